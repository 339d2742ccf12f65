"""
Logic-based player for confidential Minesweeper.

Applies single-clue deductions over the revealed clues:

    - if a clue equals its number of known bombs, its other hidden
      neighbours are safe
    - if a clue equals its known bombs plus hidden neighbours, every
      hidden neighbour is a bomb

Deductions are repeated until nothing changes. When no safe cell is
known the player falls back to the hidden cell with the lowest
estimated bomb probability.
"""
from typing import Optional, Set, Tuple

import numpy as np

from minefield import CELL_IS_BOMB_THRESHOLD

from .base_player import BasePlayer


Position = Tuple[int, int]


class LogicPlayer(BasePlayer):
    """
    Player that deduces safe cells from revealed clues.

    Bombs are never flagged on the board; the player keeps its own set
    of deduced bomb positions and never reveals them.
    """

    def __init__(self, seed: Optional[int] = None, **kwargs) -> None:
        """
        Initialize the logic player.

        Args:
            seed: Random seed used to break ties between guesses.
            **kwargs: Board dimensions forwarded to BasePlayer.
        """
        super().__init__(**kwargs)
        self.rng = np.random.default_rng(seed)
        self.known_bombs: Set[Position] = set()

    def reset(self) -> None:
        self.known_bombs = set()

    def select_action(
        self,
        observation: np.ndarray,
        valid_actions: Optional[np.ndarray] = None,
    ) -> int:
        """
        Select a deduced safe cell, or the least risky guess.

        Args:
            observation: 2D array of cell states.
            valid_actions: Optional mask of valid actions.

        Returns:
            Action index.
        """
        if valid_actions is None:
            valid_actions = self.get_valid_actions_from_obs(observation)

        valid_indices = np.where(valid_actions)[0]
        if len(valid_indices) == 0:
            return 0

        safe_cells = self.deduce(observation)
        for row, col in sorted(safe_cells):
            action = self.position_to_action(row, col)
            if valid_actions[action]:
                return action

        return self._select_by_probability(observation, valid_indices)

    # ========================================================================
    # Deduction
    # ========================================================================

    def deduce(self, observation: np.ndarray) -> Set[Position]:
        """
        Run single-clue deductions to a fixed point.

        Updates `known_bombs` and returns the hidden cells proven safe.
        """
        safe: Set[Position] = set()
        changed = True
        while changed:
            changed = False
            for row in range(self.board_height):
                for col in range(self.board_width):
                    clue = int(observation[row, col])
                    if clue < 1 or clue >= CELL_IS_BOMB_THRESHOLD:
                        continue

                    hidden = [
                        p for p in self.neighbors(row, col)
                        if observation[p] < 0 and p not in self.known_bombs
                        and p not in safe
                    ]
                    if not hidden:
                        continue

                    bombs = sum(
                        1 for p in self.neighbors(row, col)
                        if p in self.known_bombs
                        or observation[p] >= CELL_IS_BOMB_THRESHOLD
                    )
                    remaining = clue - bombs

                    if remaining == 0:
                        safe.update(hidden)
                        changed = True
                    elif remaining == len(hidden):
                        self.known_bombs.update(hidden)
                        changed = True

            for row in range(self.board_height):
                for col in range(self.board_width):
                    if observation[row, col] != 0:
                        continue
                    for p in self.neighbors(row, col):
                        if observation[p] < 0 and p not in safe:
                            safe.add(p)
                            changed = True

        return {p for p in safe if observation[p] < 0}

    def _select_by_probability(
        self, observation: np.ndarray, valid_indices: np.ndarray
    ) -> int:
        """Pick the hidden cell whose neighbouring clues look least dangerous."""
        best_risk = None
        candidates = []
        for action in valid_indices:
            position = self.action_to_position(int(action))
            if position in self.known_bombs:
                continue
            risk = self._estimate_risk(observation, position)
            if best_risk is None or risk < best_risk:
                best_risk = risk
                candidates = [int(action)]
            elif risk == best_risk:
                candidates.append(int(action))

        if not candidates:
            # Only known bombs are left
            return int(valid_indices[0])
        return int(self.rng.choice(candidates))

    def _estimate_risk(self, observation: np.ndarray, position: Position) -> float:
        """Highest local bomb ratio among the clues around a hidden cell."""
        risk = 0.0
        for row, col in self.neighbors(*position):
            clue = int(observation[row, col])
            if clue < 1 or clue >= CELL_IS_BOMB_THRESHOLD:
                continue
            hidden = [
                p for p in self.neighbors(row, col)
                if observation[p] < 0 and p not in self.known_bombs
            ]
            bombs = sum(1 for p in self.neighbors(row, col) if p in self.known_bombs)
            if hidden:
                risk = max(risk, (clue - bombs) / len(hidden))
        return risk
