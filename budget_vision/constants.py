"""All magic values live here — no inline literals anywhere else."""

# Quota: free-tier remote calls per calendar month (UTC).
DEFAULT_QUOTA_LIMIT = 5000

# Retry policy. Delay before retry n (0-based) is base * 2**n seconds.
DEFAULT_MAX_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY: float = 1.0

# Cached results go stale after this many hours.
DEFAULT_CACHE_TTL_HOURS = 24

# Upper bound for a single remote call (seconds).
DEFAULT_REMOTE_TIMEOUT: float = 30.0

DEFAULT_LOG_LEVEL = "INFO"

# Remote vision backends
CLAUDE_VISION_MODEL = "claude-opus-4-6"
OPENAI_VISION_MODEL = "gpt-4o"
VISION_MAX_TOKENS = 1024
IMAGE_MEDIA_TYPE = "image/jpeg"
DETECTION_PROMPT = (
    "List every object you can see in this image. "
    "Reply with a JSON array only, no prose. Each element must be an object "
    'with keys "label" (string), "confidence" (number between 0 and 1) and '
    '"box" ([x, y] centre of the object in pixels).'
)

# Log messages
MSG_STARTING = "Starting budget-vision…"
MSG_CONNECTED = "Vision service connection successful"
MSG_CONNECT_FAILED = "All connection attempts failed: %s"
MSG_QUOTA_EXHAUSTED = "Monthly free tier limit reached (%d calls)"
MSG_QUOTA_ROLLOVER = "Quota period rolled over to %s"
MSG_QUOTA_REMAINING = "Remote calls left this period: %d"
MSG_BUSY = "Analysis already in flight, dropping request"
MSG_LOCAL_RESOLVED = "Resolved locally, no remote call needed"
MSG_LOCAL_FAILED = "Local processing failed, falling back to remote: %s"
MSG_CACHE_HIT = "Cache hit for %s"
MSG_CACHE_MISS = "Cache miss for %s"
MSG_CACHE_EVICTED = "Evicted %d expired cache entries"
MSG_REMOTE_CALL = "→ Remote vision call"
MSG_REMOTE_FAILED = "Error in vision processing: %s"
MSG_RETRY = "Attempt %d failed (%s), retrying in %.1fs"
MSG_CAPTURE_FAILED = "Image capture failed: %s"
MSG_CANCELLED = "Remote call cancelled by disposal"
MSG_DROPPED_AFTER_DISPOSE = "Dropping result delivered after disposal"
MSG_DISPOSED = "Orchestrator disposed"
MSG_RELEASE_FAILED = "Releasing %s failed: %s"
MSG_SOURCE_STATE = "Image source %s → %s"
MSG_DETECTION = "%s (%.0f%%) at %s"
