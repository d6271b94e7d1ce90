"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

TARGET_PERCENTAGE = 75

# Risk bands shown on the analytics screen.
SAFE_PERCENTAGE = 75
RISK_PERCENTAGE = 60

# Schedule keys number slots from the first lecture hour of the day.
FIRST_SLOT_HOUR = 9

MINUTES_PER_DAY = 24 * 60

DEFAULT_HISTORY_LIMIT = 200
DEFAULT_TRANSACTION_ATTEMPTS = 5
DEFAULT_TRANSACTION_RETRY_DELAY_MS = 50
