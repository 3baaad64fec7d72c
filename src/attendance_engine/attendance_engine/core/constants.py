"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
Settings modules may override most of them (see ``container.EngineSettings``).
"""

# Session status grace windows (minutes relative to session start)
DEFAULT_EARLY_GRACE_MINUTES = 30
DEFAULT_LATE_GRACE_MINUTES = 15

# Check-out
DEFAULT_MIN_SESSION_MINUTES = 1
DEFAULT_OVERTIME_AFTER_HOURS = 8

# Biometric gates
FACE_VERIFY_DISTANCE_THRESHOLD = 0.35
FACE_ENROLL_DISTANCE_THRESHOLD = 0.8
FACE_VERIFY_MIN_CONFIDENCE = 0.7
FACE_ENROLL_MIN_CONFIDENCE = 0.5
FACE_ENROLLMENT_STEPS = (
    "Look straight at the camera",
    "Turn your head slightly to the right",
    "Turn your head slightly to the left",
)

# Geolocation acquisition
EARTH_RADIUS_METERS = 6_371_000
DEFAULT_SITE_RADIUS_METERS = 200
LOCATION_MAX_ATTEMPTS = 3
LOCATION_TIMEOUT_MS = 15_000
LOCATION_MAXIMUM_AGE_MS = 300_000
LOCATION_UNAVAILABLE_BACKOFF_MS = 2_000
LOCATION_TIMEOUT_RETRY_MS = 1_000
LOCATION_UNKNOWN_RETRY_MS = 2_000

# Elapsed-time ticker
TICKER_INTERVAL_SECONDS = 1.0
ZERO_ELAPSED = "00:00:00"
