"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "UTC"
DEFAULT_HISTORY_LIMIT = 12
MINUTES_PER_HOUR = 60
HALF_DAY_WEIGHT = "0.5"
MONEY_PLACES = "0.01"

# Monday..Sunday, matching date.weekday().
DEFAULT_WORKING_WEEKDAYS = (True, True, True, True, True, False, False)

SYSTEM_AUTHOR_ID = 1
AUTO_ABSENT_NOTE = "Auto-marked absent - no attendance recorded"
