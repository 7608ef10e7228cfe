import base64
import hashlib

import pytest

from budget_vision.hashing import fingerprint


def test_fingerprint_is_deterministic():
    assert fingerprint(b"image-bytes") == fingerprint(b"image-bytes")


def test_fingerprint_differs_for_different_content():
    assert fingerprint(b"image-a") != fingerprint(b"image-b")


def test_fingerprint_is_base64_sha256():
    expected = base64.standard_b64encode(hashlib.sha256(b"abc").digest()).decode()
    assert fingerprint(b"abc") == expected


def test_fingerprint_has_fixed_length():
    assert len(fingerprint(b"")) == len(fingerprint(b"x" * 10_000)) == 44


def test_fingerprint_accepts_bytearray_and_memoryview():
    data = b"\x00\x01\x02"
    assert fingerprint(bytearray(data)) == fingerprint(data)
    assert fingerprint(memoryview(data)) == fingerprint(data)


def test_fingerprint_rejects_text():
    with pytest.raises(TypeError):
        fingerprint("not bytes")
