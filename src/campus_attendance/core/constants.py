"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

MIN_WINDOW_MINUTES = 15
MAX_WINDOW_MINUTES = 8 * 60
MIN_WINDOW_GAP_MINUTES = 5

CONFLICT_CHECK_DEBOUNCE_SECONDS = 0.5
SUCCESS_RESET_SECONDS = 1.5
CONFLICT_RESET_SECONDS = 2.0
ERROR_RESET_SECONDS = 3.0

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100
RECENT_SCANS_LIMIT = 10
EXPORT_BATCH_SIZE = 500

DEFAULT_EVENT_TIMEZONE = "Asia/Manila"
QR_PREFIX = "DTP"
