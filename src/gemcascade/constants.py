GRID_ROWS = 8
GRID_COLS = 8

# Palette defaults. Colors are small integers; names are for logs and hosts only.
COLOR_NAMES = {
    1: "eth",
    2: "ruby",
    3: "amber",
    4: "jade",
    5: "sapphire",
    6: "amethyst",
    7: "pearl",
}
DEFAULT_COLOR_COUNT = 6
OBJECTIVE_COLOR = 1  # the collectible "objective" color

# Scoring defaults (see components/scoring_rules.py).
TOKEN_SCORE = 10            # per removed token
COMBO_STEP = 5              # extra per removed token for each cascade level past the first
SPECIAL_CREATED_BONUS = 20  # per transformation anchor produced by a match

# Interaction bonuses, ordered by strength. BOARD_CLEAR is the maximum.
BONUS_COLOR_CLEAR = 500
BONUS_CROSS_BLAST = 750
BONUS_COLOR_PROMOTE = 1000
BONUS_BOARD_CLEAR = 2500

# Board generation retries before giving up.
MAX_LAYOUT_ATTEMPTS = 200
