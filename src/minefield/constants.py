"""
Board geometry and protocol constants.
"""
from mockfhe import MAX_U256
from oracle import BLOCK_INTERVAL_S, GATEWAY_INTERVAL_MS, GATEWAY_TIMEOUT


MINESWEEPER_ROWS = 11
MINESWEEPER_COLS = 11
CELL_COUNT = MINESWEEPER_ROWS * MINESWEEPER_COLS

BITS_PER_CELL = 2
CELL_MASK = 0x3

# Bit 2i set for every one of the 121 cells; the 14 high bits stay clear.
BOARD_MASK = (MAX_U256 // 3) >> 14

# Clues at or above this value mean "the cell is a bomb".
CELL_IS_BOMB_THRESHOLD = 9

LEVEL_COUNT = 3
CUSTOM_LEVEL = 0xFF

# Clear cache layout: 4-bit fields, 64 per 256-bit block, two blocks.
CACHE_FIELD_BITS = 4
CACHE_FIELDS_PER_BLOCK = 256 // CACHE_FIELD_BITS
CACHE_BLOCK_COUNT = 2
