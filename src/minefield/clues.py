"""
Clue engine for the packed Minesweeper board.

A clue is computed without unpacking the board: for each of the three
rows around a cell, an 8-bit window holding the 2-bit slots of columns
col-1, col and col+1 is extracted. Summing the three windows yields three
independent 2-bit counters (one per column) that add up to the number of
bombs in the 3x3 box. A bomb cell gets bits 0 and 3 forced on, which puts
its clue at or above CELL_IS_BOMB_THRESHOLD.
"""
from dataclasses import dataclass
from typing import List, Tuple

from mockfhe import EncryptedValue, ValidationError, euint4, euint8, ops

from .codec import decode_bombs
from .constants import (
    BITS_PER_CELL,
    CELL_COUNT,
    CELL_IS_BOMB_THRESHOLD,
    CELL_MASK,
    MINESWEEPER_COLS,
    MINESWEEPER_ROWS,
)


# ============================================================================
# Index Conversions (Low-level)
# ============================================================================

def cell_to_row_col(cell_index: int) -> Tuple[int, int]:
    """Convert a row-major cell index to (row, col)."""
    if cell_index < 0 or cell_index >= CELL_COUNT:
        raise ValidationError(f"Cell index overflow: {cell_index}")
    return cell_index // MINESWEEPER_COLS, cell_index % MINESWEEPER_COLS


def row_col_to_cell(row: int, col: int) -> int:
    """Convert (row, col) to a row-major cell index."""
    _check_row_col(row, col)
    return row * MINESWEEPER_COLS + col


def row_col_to_bit(row: int, col: int) -> int:
    """Bit offset of a cell's 2-bit slot in the packed board."""
    _check_row_col(row, col)
    return (row * MINESWEEPER_COLS + col) * BITS_PER_CELL


def _check_row_col(row: int, col: int) -> None:
    if not (0 <= row < MINESWEEPER_ROWS and 0 <= col < MINESWEEPER_COLS):
        raise ValidationError(f"Row/Col overflow: ({row}, {col})")


# ============================================================================
# Window Extraction
# ============================================================================

def six_bits_at(board: EncryptedValue, row: int, col: int) -> EncryptedValue:
    """
    Extract the window of slots around (row, col).

    At column 0 there is no left neighbour: the window is the low 4 bits
    of the row (columns 0 and 1). Elsewhere the 8-bit window starts at
    column col-1.

    Args:
        board: Encrypted 256-bit board.
        row: Row of the window.
        col: Column of the centre cell.

    Returns:
        Encrypted 8-bit window.
    """
    board.require(256)
    if col == 0:
        return ops.and_(ops.as_euint8(ops.shr(board, row_col_to_bit(row, 0))), 0xF)
    return ops.as_euint8(ops.shr(board, row_col_to_bit(row, col - 1)))


# ============================================================================
# Cell Computation
# ============================================================================

@dataclass(frozen=True)
class CellClue:
    """
    Encrypted result for one cell.

    Attributes:
        is_bomb: euint8, 1 if the cell holds a bomb.
        clue: euint4, neighbour count (0-8), or >= 9 for a bomb.
    """

    is_bomb: EncryptedValue
    clue: EncryptedValue


def compute_cell(board: EncryptedValue, cell_index: int) -> CellClue:
    """
    Compute the bomb flag and clue of a cell from the packed board.

    Args:
        board: Encrypted 256-bit board.
        cell_index: Row-major cell index.

    Returns:
        CellClue with encrypted is_bomb (8 bits) and clue (4 bits).
    """
    board.require(256)
    row, col = cell_to_row_col(cell_index)

    row_bits = six_bits_at(board, row, col)
    prev_row_bits = euint8(0)
    next_row_bits = euint8(0)
    if row > 0:
        prev_row_bits = six_bits_at(board, row - 1, col)
    if row < MINESWEEPER_ROWS - 1:
        next_row_bits = six_bits_at(board, row + 1, col)

    total = ops.add(next_row_bits, ops.add(row_bits, prev_row_bits))

    right = ops.and_(ops.as_euint4(total), CELL_MASK)
    middle = ops.and_(ops.as_euint4(ops.shr(total, 2)), CELL_MASK)
    left = ops.and_(ops.as_euint4(ops.shr(total, 4)), CELL_MASK)

    if col == 0:
        left, middle, right = middle, right, euint4(0)
    elif col == MINESWEEPER_COLS - 1:
        left = euint4(0)

    clue = ops.add(left, ops.add(middle, right))

    if col == 0:
        is_bomb = ops.and_(row_bits, CELL_MASK)
    else:
        is_bomb = ops.and_(ops.shr(row_bits, BITS_PER_CELL), CELL_MASK)

    row_bits4 = ops.as_euint4(row_bits)
    bomb_mask = ops.and_(row_bits4, 0x3) if col == 0 else ops.shr(row_bits4, 2)

    clue = ops.or_(clue, bomb_mask)
    clue = ops.or_(clue, ops.shl(bomb_mask, 3))

    return CellClue(is_bomb=is_bomb, clue=clue)


# ============================================================================
# Reference Solution
# ============================================================================

def _box(row: int, col: int) -> List[int]:
    """Cell indices of the 3x3 box around (row, col), including itself."""
    cells = []
    for delta_row in (-1, 0, 1):
        for delta_col in (-1, 0, 1):
            r, c = row + delta_row, col + delta_col
            if 0 <= r < MINESWEEPER_ROWS and 0 <= c < MINESWEEPER_COLS:
                cells.append(r * MINESWEEPER_COLS + c)
    return cells


def compute_clue_solution(
    board: int, bomb_mask: int = CELL_IS_BOMB_THRESHOLD
) -> List[int]:
    """
    Clue of every cell, computed by plain neighbour counting.

    Args:
        board: Clear 256-bit board.
        bomb_mask: Bits OR-ed into the clue of a bomb cell.

    Returns:
        One clue per cell; bomb cells are >= bomb_mask.
    """
    bombs = decode_bombs(board)
    solution = []
    for row in range(MINESWEEPER_ROWS):
        for col in range(MINESWEEPER_COLS):
            center = row * MINESWEEPER_COLS + col
            count = sum(bombs[i] for i in _box(row, col))
            if bombs[center]:
                count |= bomb_mask
            solution.append(count)
    return solution
