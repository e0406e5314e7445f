"""
Shared constants used across all probe modules.

Centralises endpoints, attempt counts, fallback ranges and scheduler
tunables so they live in exactly one place.
"""

# ---------------------------------------------------------------------------
# HTTP headers
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/144.0.0.0 Safari/537.36"
)

COMMON_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
}

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

LATENCY_URL = "https://www.google.com/favicon.ico"
DOWNLOAD_URL = "https://cdnjs.cloudflare.com/ajax/libs/three.js/r128/three.min.js"  # ~600 KB
UPLOAD_URL = "https://httpbin.org/post"

# ---------------------------------------------------------------------------
# Attempt counts (one cycle = 10 requests)
# ---------------------------------------------------------------------------

LATENCY_ATTEMPTS = 5
DOWNLOAD_ATTEMPTS = 3
UPLOAD_ATTEMPTS = 2

# ---------------------------------------------------------------------------
# Data transfer
# ---------------------------------------------------------------------------

BITS_PER_MEGABIT = 1_048_576     # throughput uses binary megabits
UPLOAD_PAYLOAD_SIZE = 1024 * 1024
MAX_RANDOM_CHUNK = 65_536        # largest slice a single random fill may cover
READ_CHUNK_SIZE = 64 * 1024

# ---------------------------------------------------------------------------
# Fallbacks
# ---------------------------------------------------------------------------

SYNTHETIC_LATENCY_MIN = 20.0     # ms
SYNTHETIC_LATENCY_SPAN = 10.0    # ms, so samples fall in [20, 30)
UPLOAD_TO_DOWNLOAD_RATIO = 0.4   # consumer links are asymmetric

# ---------------------------------------------------------------------------
# Scheduler / history
# ---------------------------------------------------------------------------

DEFAULT_INTERVAL_SECONDS = 10 * 60
TICK_SECONDS = 1.0
HISTORY_LIMIT = 100
INSIGHT_WINDOW = 20

MIN_INTERVAL_MINUTES = 1.0
MAX_INTERVAL_MINUTES = 24 * 60.0
MIN_HISTORY_LIMIT = 1
MAX_HISTORY_LIMIT = 10_000
