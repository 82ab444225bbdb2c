"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CHECK_IN_TIME = "07:00"
DEFAULT_CHECK_OUT_TIME = "15:00"
DEFAULT_GRACE_PERIOD_MINUTES = 15
DEFAULT_EARLY_DEPARTURE_THRESHOLD_MINUTES = 30

MIN_OVERRIDE_REASON_LENGTH = 3
MIN_EARLY_DEPARTURE_REASON_LENGTH = 5

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 100

MIN_REPORT_YEAR = 2000
MAX_REPORT_YEAR = 2100
