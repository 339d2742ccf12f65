"""
Pytest configuration and shared fixtures.
"""
import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from minefield import (
    SYNCHRONOUS,
    BoardGenerator,
    ConfidentialMinesweeper,
    MinesweeperConfig,
    default_board,
    encode_board,
)
from oracle import BlockClock, Gateway, ManualClock


# ============================================================================
# Board Fixtures
# ============================================================================

# Level 0, game counter 0, first cell 16.
LEVEL0_BOARD = 0x4000000000000040101000144004000000000000000000000000
LEVEL0_BOMBS = (49, 55, 57, 58, 66, 70, 75, 103)


@pytest.fixture
def level0_board() -> int:
    """First deterministic level 0 board, first cell 16."""
    return LEVEL0_BOARD


@pytest.fixture
def custom_board() -> int:
    """Built-in custom board."""
    return default_board()


@pytest.fixture
def edge_columns_board() -> int:
    """Bombs in the first and last column of every row."""
    bombs = []
    for row in range(11):
        bombs.append(row * 11)
        bombs.append(row * 11 + 10)
    return encode_board(bombs)


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def manual_clock() -> ManualClock:
    """Millisecond source that only moves on demand."""
    return ManualClock(start_ms=1_000_000)


@pytest.fixture
def block_clock(manual_clock: ManualClock) -> BlockClock:
    """Block clock driven by the manual clock."""
    return BlockClock(10, now_ms=manual_clock)


@pytest.fixture
def engine(block_clock: BlockClock) -> ConfidentialMinesweeper:
    """Engine whose gateway resolves requests inside reveal_cell."""
    return ConfidentialMinesweeper(SYNCHRONOUS, clock=block_clock)


@pytest.fixture
def async_engine(block_clock: BlockClock) -> ConfidentialMinesweeper:
    """Engine with a 20 ms timer-driven gateway."""
    config = MinesweeperConfig(gateway_interval_ms=20)
    engine = ConfidentialMinesweeper(config, clock=block_clock)
    yield engine
    engine.gateway.cancel()


@pytest.fixture
def manual_gateway_engine(block_clock: BlockClock) -> ConfidentialMinesweeper:
    """Engine whose gateway never fires on its own; drain() by hand."""
    gateway = Gateway(interval_ms=60_000, clock=block_clock)
    engine = ConfidentialMinesweeper(
        MinesweeperConfig(gateway_interval_ms=60_000),
        clock=block_clock,
        gateway=gateway,
    )
    yield engine
    gateway.cancel()


@pytest.fixture
def generator() -> BoardGenerator:
    """Fresh deterministic generator (counter 0)."""
    return BoardGenerator()
