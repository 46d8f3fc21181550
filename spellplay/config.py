"""Configuration constants for spellplay application."""

# Points
BASE_POINTS_PER_CORRECT = 10
PERFECT_ROUND_BONUS = 50
SPEED_BONUS_THRESHOLD = 5.0   # seconds - answers at or under this earn the speed bonus
SPEED_BONUS_POINTS = 5

# Combo multipliers
COMBO_THRESHOLDS = (2, 5, 10)  # combo counts for 2x, 3x, 4x
MAX_COMBO_MULTIPLIER = 4

# Leveling: experience for level n is LEVEL_XP_BASE * (n - 1) ** LEVEL_XP_EXPONENT
MIN_LEVEL = 1
LEVEL_XP_BASE = 100
LEVEL_XP_EXPONENT = 1.5

# Achievement thresholds
SPEED_DEMON_SECONDS = 120
STREAK_MASTER_DAYS = 7
WORD_WIZARD_WORDS = 50

# Help coins
DEFAULT_HELP_COINS = 3
MIN_HELP_COINS = 0
MAX_HELP_COINS = 10

# Performance grade accuracy cut-offs
GRADE_EXCELLENT_ACCURACY = 0.9
GRADE_GREAT_ACCURACY = 0.75
GRADE_GOOD_ACCURACY = 0.6

PARTIAL_SAVE_MESSAGE = "Progress saved partially. Your points are safe on this device, try saving again."
