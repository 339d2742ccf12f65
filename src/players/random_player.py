"""
Random player for confidential Minesweeper.

Serves as a baseline by revealing hidden cells at random. Cells whose
decryption is still pending are never chosen, even if a caller's mask
allows them: the engine would reject them as already requested.
"""
from typing import Optional

import numpy as np

from minefield.environment import PENDING

from .base_player import BasePlayer


class RandomPlayer(BasePlayer):
    """Player that reveals hidden cells uniformly at random."""

    def __init__(self, seed: Optional[int] = None, **kwargs) -> None:
        """
        Initialize the random player.

        Args:
            seed: Random seed for reproducibility.
            **kwargs: Board dimensions forwarded to BasePlayer.
        """
        super().__init__(**kwargs)
        self.rng = np.random.default_rng(seed)

    def candidates(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> np.ndarray:
        """Cell indices the player may reveal, pending cells excluded."""
        cells = observation.flatten()
        mask = cells != PENDING
        if valid_actions is None:
            mask &= self.get_valid_actions_from_obs(observation)
        else:
            mask &= np.asarray(valid_actions, dtype=bool)
        return np.flatnonzero(mask)

    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        """
        Reveal a random hidden cell.

        Returns:
            Chosen cell index, or 0 when nothing can be revealed.
        """
        choices = self.candidates(observation, valid_actions)
        if choices.size == 0:
            return 0
        return int(self.rng.choice(choices))
