"""
Coarse block clock used to time out decryption requests.
"""
import time
from typing import Callable, Optional


BLOCK_INTERVAL_S = 10

# Wall-clock milliseconds per block.
BLOCK_PERIOD_MS = 10_000


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class BlockClock:
    """
    Timestamps advance in steps of `block_interval_in_sec`, once per block.

    A request stamped with an absolute `delay` has expired as soon as the
    current timestamp is strictly greater than that delay.
    """

    def __init__(
        self,
        block_interval_in_sec: int = BLOCK_INTERVAL_S,
        now_ms: Optional[Callable[[], int]] = None,
    ) -> None:
        """
        Initialize the clock.

        Args:
            block_interval_in_sec: Timestamp increment per block.
            now_ms: Source of the current time in milliseconds.
        """
        if block_interval_in_sec <= 0:
            raise ValueError("Block interval must be positive")
        self.block_interval_in_sec = block_interval_in_sec
        self.now_ms = now_ms or _wall_clock_ms

    def timestamp(self) -> int:
        """Current block timestamp."""
        return self.block_interval_in_sec * (self.now_ms() // BLOCK_PERIOD_MS)

    def has_expired(self, delay: int) -> bool:
        return self.timestamp() > delay


class ManualClock:
    """Millisecond source that only moves when told to."""

    def __init__(self, start_ms: int = 0) -> None:
        self.current_ms = start_ms

    def __call__(self) -> int:
        return self.current_ms

    def advance(self, ms: int) -> None:
        self.current_ms += ms
