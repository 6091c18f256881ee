"""
Intcode VM — Configuration Constants
====================================

Run-time knobs live on the command line (see intcodekit.py); everything
here is a fixed default shared by the library modules.
"""

import logging


# =============================================================================
#  MEMORY
# =============================================================================
MAX_ADDRESS = 2 ** 63 - 1     # largest address a signed 64-bit cell can hold
ZERO_FILL = 0                 # value of freshly grown cells
DENSE_LIMIT = 1 << 20         # cells below this grow a flat list; above, a dict


# =============================================================================
#  CONSOLE I/O FALLBACK
# =============================================================================
INPUT_PROMPT = "> "           # written to stderr before reading stdin


# =============================================================================
#  AMPLIFIER CHAIN / FEEDBACK RING
# =============================================================================
AMPLIFIER_COUNT = 5
AMPLIFIER_SEED = 0            # first signal pushed into link 0
CHAIN_PHASES = range(0, AMPLIFIER_COUNT)    # open chain, run one after another
FEEDBACK_PHASES = range(AMPLIFIER_COUNT, 2 * AMPLIFIER_COUNT)


# =============================================================================
#  CONTROLLERS
# =============================================================================
# Hull painting robot
COLOR_BLACK = 0
COLOR_WHITE = 1
TURN_LEFT = 0
TURN_RIGHT = 1

# Arcade cabinet tile ids
TILE_EMPTY = 0
TILE_WALL = 1
TILE_BLOCK = 2
TILE_PADDLE = 3
TILE_BALL = 4
SCORE_POSITION = (-1, 0)      # (x, y) pair that carries the score
FREE_PLAY_ADDRESS = 0         # patching 2 here inserts quarters
FREE_PLAY_VALUE = 2

TILE_CHARS = {
    TILE_EMPTY:  " ",
    TILE_WALL:   "%",
    TILE_BLOCK:  "#",
    TILE_PADDLE: "-",
    TILE_BALL:   "o",
}


# =============================================================================
#  THREADS
# =============================================================================
JOIN_TIMEOUT = None           # seconds; None waits forever


# =============================================================================
#  LOGGING
# =============================================================================
DEFAULT_LOG_LEVEL = logging.DEBUG
DEFAULT_CONSOLE_LEVEL = logging.WARNING
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(funcName)s:%(lineno)d | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
