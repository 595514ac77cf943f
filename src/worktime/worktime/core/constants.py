"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_REQUEST_TIMEOUT_SECONDS = 10
DEFAULT_GEOLOCATION_TIMEOUT_SECONDS = 5

DEFAULT_WORK_START_TIME = "09:00"
DEFAULT_WORK_END_TIME = "17:00"
DEFAULT_BREAK_DURATION_MINUTES = 60
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_EARLY_LEAVE_THRESHOLD_MINUTES = 15
DEFAULT_OVERTIME_THRESHOLD_HOURS = 8
DEFAULT_WORKING_DAYS = (1, 2, 3, 4, 5)  # Monday..Friday, 0 = Sunday
DEFAULT_TIMEZONE = "UTC"
DEFAULT_HALF_DAY_FRACTION = 0.5

DEFAULT_IDLE_THRESHOLD_MINUTES = 5
DEFAULT_IDLE_WARNING_MINUTES = 1

DEFAULT_SYNC_BACKOFF_BASE_SECONDS = 30
DEFAULT_SYNC_BACKOFF_MAX_SECONDS = 30 * 60
DEFAULT_SYNC_INTERVAL_SECONDS = 60

DEFAULT_HEARTBEAT_URL = "https://www.google.com/favicon.ico"

DURATION_PLACEHOLDER = "--"
