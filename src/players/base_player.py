"""
Base player interface for confidential Minesweeper.

A player only ever sees the clear cache observation: hidden cells,
pending decryptions and the clues it has already revealed.
"""
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

import numpy as np

from minefield import MINESWEEPER_COLS, MINESWEEPER_ROWS
from minefield.environment import HIDDEN


# ============================================================================
# Base Player Interface
# ============================================================================

class BasePlayer(ABC):
    """
    Abstract base class for Minesweeper players.

    All players must implement select_action to choose which cell to
    reveal based on the current observation.
    """

    def __init__(
        self,
        board_height: int = MINESWEEPER_ROWS,
        board_width: int = MINESWEEPER_COLS,
    ) -> None:
        """
        Initialize the player.

        Args:
            board_height: Number of rows in the board.
            board_width: Number of columns in the board.
        """
        self.board_height = board_height
        self.board_width = board_width
        self.total_cells = board_height * board_width

    @abstractmethod
    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        """
        Select an action based on the current observation.

        Args:
            observation: 2D array of cell states.
            valid_actions: Optional mask of valid actions.

        Returns:
            Action index (row * width + col).
        """

    def action_to_position(self, action: int) -> Tuple[int, int]:
        """Convert flat action index to (row, col) position."""
        return action // self.board_width, action % self.board_width

    def position_to_action(self, row: int, col: int) -> int:
        """Convert (row, col) position to flat action index."""
        return row * self.board_width + col

    def neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """Positions of the up to eight cells around (row, col)."""
        result = []
        for delta_row in (-1, 0, 1):
            for delta_col in (-1, 0, 1):
                if delta_row == 0 and delta_col == 0:
                    continue
                r, c = row + delta_row, col + delta_col
                if 0 <= r < self.board_height and 0 <= c < self.board_width:
                    result.append((r, c))
        return result

    def get_valid_actions_from_obs(self, observation: np.ndarray) -> np.ndarray:
        """
        Get valid actions mask from observation.

        Args:
            observation: 2D array of cell states.

        Returns:
            Boolean mask where True = valid action.
        """
        return observation.flatten() == HIDDEN

    def reset(self) -> None:
        """Reset player state for a new game."""
