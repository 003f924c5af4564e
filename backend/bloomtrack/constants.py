"""Engine-wide constants for stage promotion and streak bookkeeping."""

ONE_DAY_MS = 24 * 60 * 60 * 1000

# Key used for the single evaluation of a TARGET-mode learning target
TARGET_ROOT_ID = "TARGET_ROOT"

# SPROUTING -> BUDDING
SPROUTING_TO_BUDDING_COUNT = 3
SPROUTING_COMMITMENT_COOL_DOWN_MS = ONE_DAY_MS

# BUDDING -> BLOOMING
BUDDING_TO_BLOOMING_CONSECUTIVE_DAYS = 4
MIN_HIGH_QUALITY_SCORE = 3

# BLOOMING -> HALL_OF_FAME
HALL_OF_FAME_DAYS_THRESHOLD = 100
HALL_OF_FAME_DAYS = 150

# Consecutive days / reset block
INITIAL_CONSECUTIVE_DAYS = 1
MAX_RESET_BLOCK_COUNT = 1
