"""
Cell-revealed notifications.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Hashable, List


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CellRevealed:
    """
    Emitted when a decryption result is written to a player's cache.

    Attributes:
        player: Player identity.
        cell_index: Revealed cell.
        clue: Clear clue (9 for a bomb).
        victory: Whether this reveal won the game.
    """

    player: Hashable
    cell_index: int
    clue: int
    victory: bool


Listener = Callable[[CellRevealed], None]


class EventBus:
    """Ordered list of listeners notified on every reveal."""

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Called with each CellRevealed event.

        Returns:
            Function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def emit(self, event: CellRevealed) -> None:
        """Notify every listener; a failing listener is logged and skipped."""
        logger.debug(
            "CellRevealed player=%s cell=%d clue=%d victory=%s",
            event.player, event.cell_index, event.clue, event.victory,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("CellRevealed listener failed for player=%s", event.player)
