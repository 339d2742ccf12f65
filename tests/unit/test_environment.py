"""
Unit tests for the Gymnasium environment.
"""
import numpy as np
import pytest
from minefield import ConfidentialMinesweeperEnv


@pytest.fixture
def env() -> ConfidentialMinesweeperEnv:
    """Level 0 environment on a fresh engine."""
    return ConfidentialMinesweeperEnv(level=0, render_mode="ansi")


# ============================================================================
# Reset Tests
# ============================================================================

class TestReset:
    """Test episode start."""

    def test_reset_reveals_first_cell(self, env: ConfidentialMinesweeperEnv) -> None:
        """Only the first cell is visible after reset."""
        obs, info = env.reset(options={"first_cell": 16})

        assert obs.shape == (11, 11)
        assert obs.dtype == np.int8
        assert obs[1, 5] == 0
        assert np.sum(obs == -1) == 120
        assert info["revealed"] == 1
        assert info["game_state"] == "PLAYING"
        assert info["valid_actions"] == 120

    def test_reset_random_first_cell(self, env: ConfidentialMinesweeperEnv) -> None:
        """Without options, a seeded random first cell is revealed."""
        obs, _ = env.reset(seed=3)
        assert np.sum(obs >= 0) == 1

    def test_observation_in_space(self, env: ConfidentialMinesweeperEnv) -> None:
        """Observations belong to the observation space."""
        obs, _ = env.reset(options={"first_cell": 16})
        assert env.observation_space.contains(obs)

    def test_invalid_level_raises_error(self) -> None:
        """Only generated levels are accepted."""
        with pytest.raises(ValueError):
            ConfidentialMinesweeperEnv(level=5)


# ============================================================================
# Step Tests
# ============================================================================

class TestStep:
    """Test rewards and termination."""

    def test_safe_cell_reward(self, env: ConfidentialMinesweeperEnv) -> None:
        """A safe reveal scores +1 and shows its clue."""
        env.reset(options={"first_cell": 16})
        obs, reward, terminated, truncated, info = env.step(37)

        assert reward == 1.0
        assert terminated is False
        assert truncated is False
        assert obs[3, 4] == 1
        assert info["steps"] == 1

    def test_bomb_reward(self, env: ConfidentialMinesweeperEnv) -> None:
        """A bomb scores -10 and ends the episode."""
        env.reset(options={"first_cell": 16})
        obs, reward, terminated, _, info = env.step(49)

        assert reward == -10.0
        assert terminated is True
        assert obs[4, 5] == 9
        assert info["game_state"] == "LOST"
        assert info["valid_actions"] == 0

    def test_invalid_action_reward(self, env: ConfidentialMinesweeperEnv) -> None:
        """Revealing a visible cell scores -0.1."""
        env.reset(options={"first_cell": 16})
        _, reward, terminated, _, _ = env.step(16)

        assert reward == pytest.approx(-0.1)
        assert terminated is False

    def test_victory_reward(self, edge_columns_board: int) -> None:
        """Revealing the last safe cell scores +10."""
        env = ConfidentialMinesweeperEnv()
        env.reset(options={"board": edge_columns_board, "first_cell": 1})

        cells = [
            row * 11 + col for row in range(11) for col in range(1, 10)
            if row * 11 + col != 1
        ]
        for cell_index in cells[:-1]:
            _, reward, terminated, _, _ = env.step(cell_index)
            assert reward == 1.0
            assert terminated is False

        _, reward, terminated, _, info = env.step(cells[-1])
        assert reward == 10.0
        assert terminated is True
        assert info["game_state"] == "WON"


# ============================================================================
# Mask and Render Tests
# ============================================================================

class TestMaskAndRender:
    """Test action masks and text rendering."""

    def test_action_mask_excludes_revealed(
        self, env: ConfidentialMinesweeperEnv
    ) -> None:
        """Revealed cells are not valid actions."""
        env.reset(options={"first_cell": 16})
        mask = env.get_action_mask()
        assert mask.dtype == bool
        assert mask[16] == False  # noqa: E712
        assert mask.sum() == 120

    def test_render_ansi(self, env: ConfidentialMinesweeperEnv) -> None:
        """ANSI rendering has one line per row."""
        env.reset(options={"first_cell": 16})
        text = env.render()
        lines = text.split("\n")
        assert len(lines) == 11
        assert lines[1].startswith("(1)")
        assert " X " in lines[0]
