"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_IN_TIME = "09:00"
DEFAULT_OUT_TIME = "18:00"

STANDARD_WORK_HOURS = 9.0
HALF_DAY_CUTOFF = "13:00"
HALF_DAY_MIN_HOURS = 6.0

HALF_DAY_VALUE = 0.75
OUTSTATION_VALUE = 1.2
FULL_DAY_VALUE = 1.0
MAX_ATTENDANCE_VALUE = 1.2

DEFAULT_MONTHLY_EARNED = 2.0

ARTICLE_DESIGNATION = "article"
NO_PUNCH = "00:00"

BULK_APPROVE_REMARK = "Bulk Approved"
BULK_REJECT_REMARK = "Bulk Rejected"
FUTURE_REQUEST_STATUS = "Future Request"
