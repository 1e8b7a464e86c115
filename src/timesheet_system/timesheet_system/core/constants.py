"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DAYS_PER_WEEK = 7
MAX_HOURS_PER_ENTRY = 24
DEFAULT_MATRIX_WEEKS = 8
MAX_MATRIX_WEEKS = 52
DEFAULT_PASSWORD_MIN_LENGTH = 6
