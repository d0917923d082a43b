"""Constants and defaults.

Note: The holiday list and weekly rest weekday are compiled in; changing them
requires a redeploy.
"""

import calendar

KNOWN_HOLIDAYS = (
    ("2024-08-15", "Independence Day"),
    ("2024-10-02", "Gandhi Jayanti"),
    ("2024-12-25", "Christmas"),
    ("2025-01-26", "Republic Day"),
)

# Python weekday numbering (Monday=0); Sunday opens the week in the ledger UI.
WEEKLY_REST_WEEKDAY = calendar.SUNDAY

# Hard per-submission ceiling of the ledger store, and the capacity we use.
MAX_BATCH_MUTATIONS = 500
DEFAULT_BATCH_CAPACITY = 450

DEFAULT_LOOKBACK_MONTHS = 6
DEFAULT_TIMEZONE = "Asia/Kolkata"

DEFAULT_CLOCK_IN = "09:00"
DEFAULT_CLOCK_OUT = "17:00"
DEFAULT_LOCATION = "office"
DEFAULT_TOTAL_HOURS = "8:00"

ATTENDANCE_COLLECTION = "attendance"
USERS_COLLECTION = "users"
