"""
Text rendering of boards, clue grids and clear caches.
"""
from typing import List, Optional, Sequence

from .codec import decode_bombs
from .constants import MINESWEEPER_COLS, MINESWEEPER_ROWS


YELLOW = "\x1b[1m\x1b[33m"
RED = "\x1b[1m\x1b[31m"
RESET = "\x1b[0m\x1b[0m"


def _row_label(row: int) -> str:
    return f"({row})".ljust(5)


def render_board(
    board: int,
    rows: int = MINESWEEPER_ROWS,
    cols: int = MINESWEEPER_COLS,
) -> str:
    """Render a packed board as rows of 0 (safe) and 1 (bomb)."""
    bombs = decode_bombs(board, rows * cols)
    lines = []
    for row in range(rows):
        cells = " ".join(str(bombs[row * cols + col]) for col in range(cols))
        lines.append(_row_label(row) + cells)
    return "\n".join(lines)


def render_values(
    values: Sequence[int],
    rows: int = MINESWEEPER_ROWS,
    cols: int = MINESWEEPER_COLS,
) -> str:
    """Render one value per cell (clues, bomb clues shown as 9+)."""
    lines = []
    for row in range(rows):
        line = _row_label(row)
        for col in range(cols):
            value = int(values[row * cols + col])
            line += f"{value:>2} "
        lines.append(line.rstrip())
    return "\n".join(lines)


def render_cache(
    fields: Sequence[int],
    pending_cell: Optional[int] = None,
    color: bool = False,
    rows: int = MINESWEEPER_ROWS,
    cols: int = MINESWEEPER_COLS,
) -> str:
    """
    Render a decoded clear cache.

    Each field holds clue + 1; zero means the cell is still hidden.

    Args:
        fields: Decoded cache fields, one per cell.
        pending_cell: Cell with a decryption in flight, shown as "?".
        color: Use ANSI colours (red for bombs, yellow for clues).
        rows: Number of rows.
        cols: Number of columns.

    Returns:
        Multi-line string.
    """
    lines: List[str] = []
    for row in range(rows):
        line = _row_label(row)
        for col in range(cols):
            cell_index = row * cols + col
            line += _render_field(int(fields[cell_index]), cell_index == pending_cell, color)
        lines.append(line.rstrip())
    return "\n".join(lines)


def _render_field(field: int, pending: bool, color: bool) -> str:
    if field == 0:
        if pending:
            return f"{RED} ? {RESET}" if color else " ? "
        return " X "

    clue = field - 1
    text = f"{clue:>2} "
    if not color:
        return text
    if clue >= 9:
        return f"{RED}{text}{RESET}"
    return f"{YELLOW}{text}{RESET}"
