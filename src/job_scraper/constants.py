"""Engine-wide constants."""

# Session rotation
SESSION_MAX_AGE_MS = 30 * 60 * 1000  # Rotate identity after 30 minutes
SESSION_MAX_REQUESTS = 100  # Rotate identity after this many requests
ROTATION_COOLDOWN_MIN_MS = 5000  # Minimum pause after a rotation
ROTATION_COOLDOWN_JITTER_MS = 5000  # Random extra pause after a rotation

# HTTP
DEFAULT_REQUEST_TIMEOUT_SECONDS = 30
RATE_LIMIT_WINDOW_MS = 60 * 1000  # requests_per_minute window

# Source ids / search text
SOURCE_ID_SEPARATOR = "-"

# Browser identities used for session rotation
USER_AGENTS = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0",
)
