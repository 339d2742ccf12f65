"""
Per-player game state and caches.

A player with no entry in the store has no game. Caches are created on
demand and removed together with the game.
"""
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Dict, Hashable, List, Optional

from mockfhe import (
    EncryptedValue,
    ValidationError,
    is_initialized,
    ops,
    uninitialized,
)

from .codec import (
    CacheBlocks,
    cache_position,
    get_clear_cache_field,
    set_clear_cache_field,
)
from .constants import BITS_PER_CELL, CACHE_BLOCK_COUNT, CACHE_FIELD_BITS


Player = Hashable


class GameState(Enum):
    """Possible states of a game."""

    PLAYING = auto()
    WON = auto()
    LOST = auto()


# ============================================================================
# Game
# ============================================================================

@dataclass
class Game:
    """
    One player's game.

    Attributes:
        board: Encrypted 256-bit packed board.
        moves: Bit 2i set once cell i was requested.
        level: 0, 1, 2 or CUSTOM_LEVEL.
        first_cell_index: Cell that is guaranteed bomb-free.
        exploded: A bomb was revealed.
        victory: Every safe cell was requested and no bomb was hit.
    """

    board: EncryptedValue
    level: int
    first_cell_index: int
    moves: int = 0
    exploded: bool = False
    victory: bool = False

    @property
    def in_progress(self) -> bool:
        """True while the game can still be played."""
        return not self.exploded and not self.victory

    @property
    def state(self) -> GameState:
        if self.exploded:
            return GameState.LOST
        if self.victory:
            return GameState.WON
        return GameState.PLAYING

    def mark_move(self, cell_index: int) -> None:
        """Record that a cell was requested."""
        self.moves |= 1 << (cell_index * BITS_PER_CELL)

    def is_move(self, cell_index: int) -> bool:
        return (self.moves >> (cell_index * BITS_PER_CELL)) & 1 == 1


# ============================================================================
# Player Caches
# ============================================================================

def _empty_encrypted_blocks() -> List[EncryptedValue]:
    return [uninitialized(256) for _ in range(CACHE_BLOCK_COUNT)]


@dataclass
class PlayerCaches:
    """
    Encrypted and clear 4-bit-per-cell caches of one player.

    The encrypted cache accumulates clues as they are computed; the clear
    cache holds clue + 1 for every decrypted cell.
    """

    encrypted: List[EncryptedValue] = field(default_factory=_empty_encrypted_blocks)
    clear: CacheBlocks = (0, 0)

    def save_encrypted(self, cell_index: int, value4: EncryptedValue) -> None:
        """
        OR an encrypted 4-bit value into the encrypted cache.

        Args:
            cell_index: Cell whose field is written.
            value4: Encrypted 4-bit clue.
        """
        value4.require(4)
        block_index, field_index = cache_position(cell_index)
        shifted = ops.shl(ops.as_euint256(value4), field_index * CACHE_FIELD_BITS)

        block = self.encrypted[block_index]
        if is_initialized(block):
            self.encrypted[block_index] = ops.or_(block, shifted)
        else:
            self.encrypted[block_index] = shifted

    def save_clear(self, cell_index: int, value4: int) -> None:
        """Store a clear value (clue + 1) in the clear cache."""
        if value4 >= 0xF:
            raise ValidationError(f"Clear cache value overflow: {value4}")
        self.clear = set_clear_cache_field(self.clear, cell_index, value4)

    def get_clear(self, cell_index: int) -> int:
        return get_clear_cache_field(self.clear, cell_index)


# ============================================================================
# Game Store
# ============================================================================

class GameStore:
    """
    Mapping from player identity to game and caches.

    The store is not thread-safe by itself; the engine serialises access.
    """

    def __init__(self) -> None:
        self._games: Dict[Player, Game] = {}
        self._caches: Dict[Player, PlayerCaches] = {}

    def __len__(self) -> int:
        return len(self._games)

    def __contains__(self, player: Player) -> bool:
        return player in self._games

    def get(self, player: Player) -> Optional[Game]:
        """Return the player's game, or None."""
        return self._games.get(player)

    def caches(self, player: Player) -> PlayerCaches:
        """Return the player's caches, creating empty ones if needed."""
        caches = self._caches.get(player)
        if caches is None:
            caches = PlayerCaches()
            self._caches[player] = caches
        return caches

    def peek_caches(self, player: Player) -> Optional[PlayerCaches]:
        """Return the player's caches without creating them."""
        return self._caches.get(player)

    def create(self, player: Player, game: Game) -> Game:
        """Replace any previous game of the player with a new one."""
        self.delete(player)
        self._games[player] = game
        self._caches[player] = PlayerCaches()
        return game

    def delete(self, player: Player) -> None:
        """Remove the player's game and both caches."""
        self._games.pop(player, None)
        self._caches.pop(player, None)

    def has_game_in_progress(self, player: Player) -> bool:
        game = self._games.get(player)
        return game is not None and game.in_progress
