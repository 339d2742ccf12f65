"""
Decryption gateway.

Requests are queued in FIFO order and resolved either synchronously
(interval 0) or by a timer thread after the configured interval. Each
resolved request is decrypted and handed to the registered callback.
"""
import logging
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, List, Optional

from mockfhe import (
    EncryptedValue,
    MinesweeperError,
    StaleCallbackError,
    StateError,
    decrypt,
    decrypt_bool,
)

from .clock import BlockClock


logger = logging.getLogger(__name__)

GATEWAY_INTERVAL_MS = 1000
GATEWAY_TIMEOUT = 100

DecryptCallback = Callable[[int, int, bool], None]


@dataclass(frozen=True)
class GatewayTask:
    """Queued decryption of a (clue, victory) pair."""

    request_id: int
    clue: EncryptedValue
    victory: EncryptedValue
    delay: int


# ============================================================================
# Gateway
# ============================================================================

class Gateway:
    """
    FIFO decryption queue with its own request id counter.

    The queue and the counter are guarded by one lock. The callback is
    always invoked outside that lock.
    """

    def __init__(
        self,
        interval_ms: int = GATEWAY_INTERVAL_MS,
        clock: Optional[BlockClock] = None,
        callback: Optional[DecryptCallback] = None,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            interval_ms: Delay before queued requests are resolved
                (0 = resolve inside submit).
            clock: Block clock used to detect expired requests.
            callback: Receives (request_id, clear_clue, clear_victory).
        """
        if interval_ms < 0:
            raise ValueError("Gateway interval cannot be negative")
        self.interval_ms = interval_ms
        self.clock = clock or BlockClock()
        self._callback = callback
        self._queue: Deque[GatewayTask] = deque()
        self._lock = threading.Lock()
        self._next_id = 0
        self._timers: List[threading.Timer] = []

    @property
    def synchronous(self) -> bool:
        return self.interval_ms == 0

    def set_callback(self, callback: DecryptCallback) -> None:
        self._callback = callback

    def next_request_id(self) -> int:
        """Allocate the next request id."""
        with self._lock:
            request_id = self._next_id
            self._next_id += 1
            return request_id

    def pending_count(self) -> int:
        with self._lock:
            return len(self._queue)

    def is_empty(self) -> bool:
        return self.pending_count() == 0

    # ========================================================================
    # Submission
    # ========================================================================

    def submit(self, task: GatewayTask) -> None:
        """
        Queue a decryption task.

        In synchronous mode the queue is drained before returning;
        otherwise a timer drains it after `interval_ms`.
        """
        with self._lock:
            self._queue.append(task)
        logger.debug("Queued decryption request %d", task.request_id)

        if self.synchronous:
            self.drain()
            return

        timer = threading.Timer(self.interval_ms / 1000.0, self._on_timer)
        timer.daemon = True
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]
            self._timers.append(timer)
        timer.start()

    def _on_timer(self) -> None:
        try:
            self.drain()
        except MinesweeperError:
            logger.exception("Gateway drain failed")

    # ========================================================================
    # Resolution
    # ========================================================================

    def drain(self) -> int:
        """
        Resolve every queued task.

        Expired tasks are skipped. A stale callback (the request was
        deleted while queued) is logged and the loop continues.

        Returns:
            Number of tasks delivered to the callback.
        """
        if self._callback is None:
            raise StateError("No decryption callback registered")

        delivered = 0
        while True:
            with self._lock:
                if not self._queue:
                    break
                task = self._queue.popleft()

            if self.clock.has_expired(task.delay):
                logger.info(
                    "Skipping expired decryption request %d (delay=%d)",
                    task.request_id, task.delay,
                )
                continue

            clue = decrypt(task.clue, 4)
            victory = decrypt_bool(task.victory)
            try:
                self._callback(task.request_id, clue, victory)
            except StaleCallbackError as exc:
                logger.warning(
                    "Dropping decryption request %d: %s", task.request_id, exc
                )
                continue
            delivered += 1

        return delivered

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for every scheduled timer to finish."""
        with self._lock:
            timers = list(self._timers)
        for timer in timers:
            timer.join(timeout)
        with self._lock:
            self._timers = [t for t in self._timers if t.is_alive()]

    def cancel(self) -> None:
        """Cancel pending timers without resolving their tasks."""
        with self._lock:
            timers, self._timers = self._timers, []
        for timer in timers:
            timer.cancel()
