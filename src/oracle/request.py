"""
Decryption request records.

At most one request is outstanding per player. Requests are indexed both
by id (for the decryption callback) and by player (for replay).
"""
from dataclasses import dataclass
from typing import Dict, Hashable, NamedTuple, Optional

from mockfhe import EncryptedValue


# ============================================================================
# Request Types
# ============================================================================

@dataclass
class DecryptionRequest:
    """
    A cell reveal waiting for the gateway.

    Attributes:
        request_id: Gateway-wide id, strictly increasing.
        player: Player identity.
        cell_index_plus_one: Requested cell + 1 (0 means none).
        clue: Encrypted 4-bit clue captured at request time.
        victory: Encrypted boolean captured at request time.
        delay: Absolute expiry timestamp.
        completed: Set once the callback has been applied.
    """

    request_id: int
    player: Hashable
    cell_index_plus_one: int
    clue: EncryptedValue
    victory: EncryptedValue
    delay: int
    completed: bool = False

    @property
    def cell_index(self) -> int:
        return self.cell_index_plus_one - 1


class PendingRequest(NamedTuple):
    """Public view of a player's outstanding request."""

    cell_index_plus_one: int
    expired: bool
    delay: int


NO_PENDING_REQUEST = PendingRequest(0, False, 0)


# ============================================================================
# Request Registry
# ============================================================================

class RequestRegistry:
    """Requests by id, plus the current request id of every player."""

    def __init__(self) -> None:
        self._by_id: Dict[int, DecryptionRequest] = {}
        self._by_player: Dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def add(self, request: DecryptionRequest) -> None:
        """Store a request and make it the player's current one."""
        self._by_id[request.request_id] = request
        self._by_player[request.player] = request.request_id

    def get(self, request_id: int) -> Optional[DecryptionRequest]:
        return self._by_id.get(request_id)

    def current_id(self, player: Hashable) -> Optional[int]:
        return self._by_player.get(player)

    def of_player(self, player: Hashable) -> Optional[DecryptionRequest]:
        """Return the player's current request, or None."""
        request_id = self._by_player.get(player)
        if request_id is None:
            return None
        return self._by_id.get(request_id)

    def remove(self, request_id: int) -> None:
        """Delete a request and, if current, the player's pointer to it."""
        request = self._by_id.pop(request_id, None)
        if request is None:
            return
        if self._by_player.get(request.player) == request_id:
            del self._by_player[request.player]

    def remove_player(self, player: Hashable) -> None:
        """Delete the player's current request, if any."""
        request_id = self._by_player.pop(player, None)
        if request_id is not None:
            self._by_id.pop(request_id, None)
