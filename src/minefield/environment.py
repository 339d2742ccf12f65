"""
Gymnasium environment wrapper for confidential Minesweeper.

The agent never sees the board: observations are built from the clear
cache, so only decrypted clues are visible.
"""
from typing import Any, Dict, Optional, SupportsFloat, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from oracle import wait_for_decryption

from .codec import to_grid
from .config import SYNCHRONOUS, MinesweeperConfig
from .constants import CELL_COUNT, CELL_IS_BOMB_THRESHOLD, LEVEL_COUNT
from .engine import ConfidentialMinesweeper
from .render import render_cache
from .store import GameState


HIDDEN = -1
PENDING = -2


# ============================================================================
# Confidential Minesweeper Environment
# ============================================================================

class ConfidentialMinesweeperEnv(gym.Env):
    """
    Gymnasium environment over a ConfidentialMinesweeper engine.

    Observation:
        11x11 int8 array where:
        - -1 = hidden cell
        - -2 = decryption pending
        - 0-8 = revealed clue
        - 9 = revealed bomb

    Actions:
        Discrete action space of size 121.
        Action i reveals cell (i // 11, i % 11).

    Rewards:
        - +1 for revealing a safe cell
        - +10 for winning the game
        - -10 for hitting a bomb
        - -0.1 for invalid action (already revealed or pending)
    """

    metadata = {"render_modes": ["human", "ansi"], "render_fps": 4}

    def __init__(
        self,
        level: int = 0,
        config: Optional[MinesweeperConfig] = None,
        engine: Optional[ConfidentialMinesweeper] = None,
        player: str = "player",
        render_mode: Optional[str] = None,
        poll_retries: int = 30,
        poll_interval_s: float = 0.1,
    ) -> None:
        """
        Initialize the environment.

        Args:
            level: Difficulty level (0, 1 or 2) for generated boards.
            config: Engine configuration (default: synchronous gateway).
            engine: Existing engine to play on (overrides config).
            player: Player identity used on the engine.
            render_mode: How to render the environment.
            poll_retries: Retry budget when waiting for a decryption.
            poll_interval_s: Sleep between polls.
        """
        super().__init__()
        if level < 0 or level >= LEVEL_COUNT:
            raise ValueError(f"Invalid level: {level}")

        self.level = level
        self.engine = engine or ConfidentialMinesweeper(config or SYNCHRONOUS)
        self.player = player
        self.render_mode = render_mode
        self.poll_retries = poll_retries
        self.poll_interval_s = poll_interval_s

        rows, cols = self.engine.size()
        self.rows = rows
        self.cols = cols

        self.observation_space = spaces.Box(
            low=PENDING,
            high=CELL_IS_BOMB_THRESHOLD,
            shape=(rows, cols),
            dtype=np.int8,
        )
        self.action_space = spaces.Discrete(CELL_COUNT)

        self._steps = 0

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[np.ndarray, Dict[str, Any]]:
        """
        Start a new game and reveal its first cell.

        Args:
            seed: Random seed for reproducibility.
            options: "first_cell" (int) to pick the first cell, "board"
                (int) to play a custom packed board.

        Returns:
            Tuple of (observation, info dict).
        """
        super().reset(seed=seed)
        options = options or {}

        first_cell = options.get("first_cell")
        if first_cell is None:
            first_cell = int(self.np_random.integers(CELL_COUNT))

        board = options.get("board")
        if board is None:
            self.engine.new_game(self.player, self.level, first_cell)
        else:
            self.engine.new_custom_game(self.player, first_cell, board)

        self._steps = 0
        self._reveal(first_cell)

        return self.get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[np.ndarray, SupportsFloat, bool, bool, Dict[str, Any]]:
        """
        Reveal one cell.

        Args:
            action: Cell index to reveal.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info).
        """
        self._steps += 1
        reward = self._calculate_reward(int(action))

        observation = self.get_observation()
        terminated = not self.engine.player_has_game_in_progress(self.player)
        truncated = False

        return observation, reward, terminated, truncated, self._get_info()

    def _calculate_reward(self, cell_index: int) -> float:
        """Reveal a cell and score the outcome."""
        if not self.get_action_mask()[cell_index]:
            return -0.1

        self._reveal(cell_index)

        state = self.engine.game_state_of(self.player)
        if state == GameState.WON:
            return 10.0
        if state == GameState.LOST:
            return -10.0
        return 1.0

    def _reveal(self, cell_index: int) -> None:
        """Request a cell and wait until the gateway has answered."""
        self.engine.reveal_cell(self.player, cell_index)

        def answered() -> bool:
            pending = self.engine.pending_decryption_request(self.player)
            return pending.cell_index_plus_one == 0

        wait_for_decryption(
            answered,
            retries=self.poll_retries,
            interval_s=self.poll_interval_s,
        )

    # ========================================================================
    # Observation
    # ========================================================================

    def get_observation(self) -> np.ndarray:
        """Clear cache as an int8 grid (see class docstring)."""
        fields = self.engine.get_clear_cache_fields(self.player)
        values = [field - 1 if field > 0 else HIDDEN for field in fields]

        pending = self.engine.pending_decryption_request(self.player)
        if pending.cell_index_plus_one > 0:
            values[pending.cell_index_plus_one - 1] = PENDING

        return to_grid(values, self.rows, self.cols)

    def get_action_mask(self) -> np.ndarray:
        """
        Get mask of valid actions.

        Returns:
            Boolean array where True = valid action.
        """
        if not self.engine.player_has_game_in_progress(self.player):
            return np.zeros(self.action_space.n, dtype=bool)
        return self.get_observation().flatten() == HIDDEN

    def _get_info(self) -> Dict[str, Any]:
        """Get info dictionary for current state."""
        observation = self.get_observation()
        state = None
        if self.engine.is_player(self.player):
            state = self.engine.game_state_of(self.player)

        return {
            "steps": self._steps,
            "revealed": int(np.sum(observation >= 0)),
            "game_state": state.name if state is not None else "NONE",
            "valid_actions": int(np.sum(self.get_action_mask())),
        }

    def render(self) -> Optional[str]:
        """Render the current clear cache."""
        if self.render_mode == "ansi":
            return self._render_ansi()
        if self.render_mode == "human":
            print(self._render_ansi(color=True))
        return None

    def _render_ansi(self, color: bool = False) -> str:
        pending = self.engine.pending_decryption_request(self.player)
        pending_cell = pending.cell_index_plus_one - 1 if pending.cell_index_plus_one else None
        return render_cache(
            self.engine.get_clear_cache_fields(self.player),
            pending_cell=pending_cell,
            color=color,
            rows=self.rows,
            cols=self.cols,
        )
