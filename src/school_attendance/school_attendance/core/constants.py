"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_HISTORY_LIMIT = 30
DEFAULT_SYNC_INTERVAL_SECONDS = 30
DEFAULT_NETWORK_TIMEOUT_SECONDS = 10
DEFAULT_LOW_ATTENDANCE_THRESHOLD = 75
DATE_KEY_FORMAT = "%Y-%m-%d"
