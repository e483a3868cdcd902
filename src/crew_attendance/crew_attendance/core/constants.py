"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

import string

MIN_YEAR = 1900
MAX_YEAR = 2200

INVITE_CODE_LENGTH = 7
INVITE_CODE_ALPHABET = string.ascii_letters
MAX_INVITE_CODE_ATTEMPTS = 10

# Bulk attendance is recorded as running until exercise types become selectable.
DEFAULT_EXERCISE_TYPE_ID = 1

UNKNOWN_NAME = "N/A"
UNKNOWN_LOCATION = "Unknown location"
OTHER_LABEL = "Other"

# MySQL ER_DUP_ENTRY
MYSQL_DUPLICATE_ENTRY = 1062
