"""
Board codec for the confidential Minesweeper board.

The board is a 256-bit integer with two bits per cell (bit 2i set when
cell i holds a bomb). Per-player caches are pairs of 256-bit blocks with
four bits per cell, storing clue + 1 so that 0 means "not revealed".
"""
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from mockfhe import MAX_U4, MAX_U256, ValidationError, check_uint

from .constants import (
    BITS_PER_CELL,
    CACHE_BLOCK_COUNT,
    CACHE_FIELD_BITS,
    CACHE_FIELDS_PER_BLOCK,
    CELL_COUNT,
    MINESWEEPER_COLS,
    MINESWEEPER_ROWS,
)


CacheBlocks = Tuple[int, int]

# Bomb layout of the built-in custom board.
DEFAULT_BOARD_BOMBS = (1, 13, 14, 20, 31, 44, 49, 54, 68, 69, 88, 95, 108)


# ============================================================================
# Index Validation (Low-level)
# ============================================================================

def _check_cell_index(cell_index: int, cell_count: int = CELL_COUNT) -> int:
    if cell_index < 0 or cell_index >= cell_count:
        raise ValidationError(f"Cell index out of bounds: {cell_index}")
    return cell_index


def cache_position(cell_index: int) -> Tuple[int, int]:
    """Return (block index, field index) of a cell in a cache."""
    if cell_index < 0:
        raise ValidationError(f"Cell index out of bounds: {cell_index}")
    block_index = cell_index // CACHE_FIELDS_PER_BLOCK
    field_index = cell_index % CACHE_FIELDS_PER_BLOCK
    if block_index >= CACHE_BLOCK_COUNT:
        raise ValidationError(
            f"Cell index {cell_index} exceeds the {CACHE_BLOCK_COUNT} cache blocks"
        )
    return block_index, field_index


# ============================================================================
# Board Encoding
# ============================================================================

def cell_mask(cell_index: int) -> int:
    """256-bit mask with the two bits of a cell cleared."""
    _check_cell_index(cell_index)
    return MAX_U256 ^ (0x3 << (cell_index * BITS_PER_CELL))


def set_bomb_at(board: int, cell_index: int) -> int:
    """Return the board with a bomb added at the given cell."""
    _check_cell_index(cell_index)
    return check_uint(board | (1 << (cell_index * BITS_PER_CELL)), 256)


def encode_board(bomb_indices: Iterable[int]) -> int:
    """
    Build a packed board from a collection of bomb cell indices.

    Args:
        bomb_indices: Row-major cell indices (row * cols + col).

    Returns:
        256-bit packed board.
    """
    board = 0
    for cell_index in bomb_indices:
        board = set_bomb_at(board, cell_index)
    return board


def decode_bombs(board: int, cell_count: int = CELL_COUNT) -> List[int]:
    """Return 1 for every bomb cell, 0 otherwise."""
    check_uint(board, 256)
    return [
        (board >> (i * BITS_PER_CELL)) & 1
        for i in range(cell_count)
    ]


def decode_moves(moves: int, cell_count: int = CELL_COUNT) -> List[int]:
    """Return 1 for every cell marked in a moves bitmap."""
    return decode_bombs(moves, cell_count)


def default_board() -> int:
    """Built-in custom board used when no board is supplied."""
    return encode_board(DEFAULT_BOARD_BOMBS)


# ============================================================================
# Cache Encoding
# ============================================================================

def decode_cache_block(block: int, length: int) -> List[int]:
    """Split one 256-bit block into its first `length` 4-bit fields."""
    check_uint(block, 256)
    count = min(CACHE_FIELDS_PER_BLOCK, length)
    return [
        (block >> (i * CACHE_FIELD_BITS)) & MAX_U4
        for i in range(count)
    ]


def decode_clear_cache(
    block0: int, block1: int, cell_count: int = CELL_COUNT
) -> List[int]:
    """
    Decode a two-block cache into one 4-bit field per cell.

    Args:
        block0: Fields 0..63.
        block1: Fields 64..127.
        cell_count: Number of fields to return (at most 128).

    Returns:
        List of `cell_count` field values, in cell index order.
    """
    if cell_count < 0 or cell_count > CACHE_BLOCK_COUNT * CACHE_FIELDS_PER_BLOCK:
        raise ValidationError(f"Invalid cache length: {cell_count}")

    fields: List[int] = []
    remaining = cell_count
    for block in (block0, block1):
        count = min(CACHE_FIELDS_PER_BLOCK, remaining)
        if count == 0:
            break
        fields.extend(decode_cache_block(block, count))
        remaining -= count
    return fields


def get_clear_cache_field(blocks: Sequence[int], cell_index: int) -> int:
    """Read the 4-bit field of a cell."""
    block_index, field_index = cache_position(cell_index)
    return (blocks[block_index] >> (field_index * CACHE_FIELD_BITS)) & MAX_U4


def set_clear_cache_field(
    blocks: Sequence[int], cell_index: int, value4: int
) -> CacheBlocks:
    """
    OR a 4-bit value into the field of a cell.

    Args:
        blocks: Current (block0, block1).
        cell_index: Cell whose field is written.
        value4: Value to merge (0..15).

    Returns:
        New (block0, block1) pair.

    Raises:
        ValidationError: If the cell is outside both blocks or value4 > 0xF.
    """
    block_index, field_index = cache_position(cell_index)
    if value4 < 0 or value4 > MAX_U4:
        raise ValidationError(f"Value overflow: {value4}")

    updated = list(blocks)
    shifted = (value4 & MAX_U4) << (field_index * CACHE_FIELD_BITS)
    updated[block_index] = check_uint(updated[block_index] | shifted, 256)
    return updated[0], updated[1]


# ============================================================================
# Array Helpers
# ============================================================================

def to_grid(
    values: Sequence[int],
    rows: int = MINESWEEPER_ROWS,
    cols: int = MINESWEEPER_COLS,
) -> np.ndarray:
    """Reshape per-cell values into a (rows, cols) int8 array."""
    return np.asarray(values, dtype=np.int8).reshape(rows, cols)
