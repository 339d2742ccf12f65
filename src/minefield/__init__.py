"""
Confidential Minesweeper module.

Provides the packed board codec, the board generator, the clue engine,
the per-player game store and the engine that drives reveals through
the decryption gateway.
"""
from .config import MinesweeperConfig, SIMULATOR, SYNCHRONOUS
from .constants import (
    BOARD_MASK,
    CELL_COUNT,
    CELL_IS_BOMB_THRESHOLD,
    CUSTOM_LEVEL,
    MINESWEEPER_COLS,
    MINESWEEPER_ROWS,
)
from .codec import (
    cell_mask,
    decode_bombs,
    decode_clear_cache,
    decode_moves,
    default_board,
    encode_board,
    set_bomb_at,
    set_clear_cache_field,
    to_grid,
)
from .generator import (
    BoardGenerator,
    compute_density,
    compute_deterministic_board,
)
from .clues import CellClue, compute_cell, compute_clue_solution, six_bits_at
from .store import Game, GameState, GameStore
from .events import CellRevealed
from .engine import ConfidentialMinesweeper
from .environment import ConfidentialMinesweeperEnv

__all__ = [
    "MinesweeperConfig",
    "SIMULATOR",
    "SYNCHRONOUS",
    "BOARD_MASK",
    "CELL_COUNT",
    "CELL_IS_BOMB_THRESHOLD",
    "CUSTOM_LEVEL",
    "MINESWEEPER_COLS",
    "MINESWEEPER_ROWS",
    "cell_mask",
    "decode_bombs",
    "decode_clear_cache",
    "decode_moves",
    "default_board",
    "encode_board",
    "set_bomb_at",
    "set_clear_cache_field",
    "to_grid",
    "BoardGenerator",
    "compute_density",
    "compute_deterministic_board",
    "CellClue",
    "compute_cell",
    "compute_clue_solution",
    "six_bits_at",
    "Game",
    "GameState",
    "GameStore",
    "CellRevealed",
    "ConfidentialMinesweeper",
    "ConfidentialMinesweeperEnv",
]
