"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import date

DEFAULT_LATE_GRACE_MINUTES = 15
DEFAULT_HALF_DAY_HOURS = 4.0
DEFAULT_WORK_HOURS = 8.0
DEFAULT_BREAK_MINUTES = 60
DEFAULT_WORK_DAYS = (1, 2, 3, 4, 5)

# Stand-in for an open-ended expiry when doing interval math.
OPEN_ENDED_EXPIRY = date(2099, 12, 31)

WORK_HOURS_PRECISION = 2
