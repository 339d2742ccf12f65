"""
Engine configuration.
"""
from dataclasses import dataclass

from .constants import BLOCK_INTERVAL_S, GATEWAY_INTERVAL_MS, GATEWAY_TIMEOUT


@dataclass(frozen=True)
class MinesweeperConfig:
    """
    Configuration for a confidential Minesweeper engine.

    Attributes:
        gateway_interval_ms: Delay before the gateway resolves queued
            decryption requests (0 = resolve synchronously).
        block_interval_in_sec: Scale used to derive coarse block timestamps.
        gateway_timeout: Lifetime of a decryption request, in timestamp units.
    """

    gateway_interval_ms: int = GATEWAY_INTERVAL_MS
    block_interval_in_sec: int = BLOCK_INTERVAL_S
    gateway_timeout: int = GATEWAY_TIMEOUT

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self._validate()

    def _validate(self) -> None:
        """Ensure configuration values are valid."""
        if self.gateway_interval_ms < 0:
            raise ValueError("Gateway interval cannot be negative")
        if self.block_interval_in_sec <= 0:
            raise ValueError("Block interval must be positive")
        if self.gateway_timeout <= 0:
            raise ValueError("Gateway timeout must be positive")

    @property
    def synchronous(self) -> bool:
        """True when requests are resolved inside reveal_cell."""
        return self.gateway_interval_ms == 0


# Preset configurations
SIMULATOR = MinesweeperConfig(GATEWAY_INTERVAL_MS, BLOCK_INTERVAL_S)
SYNCHRONOUS = MinesweeperConfig(0, BLOCK_INTERVAL_S)
