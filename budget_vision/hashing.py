"""Content fingerprints used as cache keys."""
import base64
import hashlib


def fingerprint(image_bytes: bytes | bytearray | memoryview) -> str:
    """Base64 SHA-256 digest of the raw image bytes. Not a security credential."""
    match image_bytes:
        case bytes() | bytearray() | memoryview():
            digest = hashlib.sha256(image_bytes).digest()
            return base64.standard_b64encode(digest).decode()
        case _:
            raise TypeError(f"expected bytes, got {type(image_bytes).__name__}")
