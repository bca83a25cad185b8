"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TOKEN_HOURS = 24
JWT_ALGORITHM = "HS256"
LATEST_END_OF_DAY = "23:59"
MINUTES_PER_DAY = 24 * 60
# A reversed range no longer than this, read across midnight, is treated as an overnight shift.
MAX_OVERNIGHT_SPAN_MIN = 12 * 60
MIN_PASSWORD_LENGTH = 6
TRANSACTION_ISOLATION = "REPEATABLE READ"
