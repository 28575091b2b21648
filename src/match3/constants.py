GRID_ROWS = 5
GRID_COLS = 5
# Tile kinds are 1..TILE_KINDS; 0 is reserved for an empty cell.
TILE_KINDS = 5

# Shortest straight run that counts as a match.
MIN_RUN = 3
# Flat reward per cleared tile, no combo multiplier.
PER_TILE_SCORE = 10

# Correction passes allowed when removing matches from a freshly randomized board.
MAX_INITIAL_MATCH_PASSES = 100
# Fresh layouts tried before accepting a board that has no legal move.
MAX_LAYOUT_ATTEMPTS = 50

TILE_SIZE = 80
BOARD_MARGIN = 20
HUD_HEIGHT = 90

# Presentation pacing (seconds) used by the window when replaying a turn script.
SWAP_DURATION = 0.3
SWAP_BACK_DURATION = 0.6
CLEAR_DURATION = 0.4
FALL_DURATION = 0.3
SPAWN_DURATION = 0.4
SPAWN_STAGGER = 0.05
