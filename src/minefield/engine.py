"""
Confidential Minesweeper engine.

Ties together the board generator, the clue engine, the per-player game
store and the decryption gateway. Boards stay encrypted; a player only
learns the clues of the cells they reveal, once the gateway has decrypted
them and called back.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Hashable, List, Optional, Tuple

from mockfhe import (
    AlreadyRequestedError,
    AlreadyRevealedError,
    EncryptedValue,
    GameOverError,
    NotAPlayerError,
    StaleCallbackError,
    StateError,
    ValidationError,
    euint256,
    ops,
)
from oracle import (
    NO_PENDING_REQUEST,
    BlockClock,
    DecryptionRequest,
    Gateway,
    GatewayTask,
    PendingRequest,
    RequestRegistry,
)

from .clues import CellClue, compute_cell, six_bits_at
from .codec import CacheBlocks, cell_mask, decode_clear_cache
from .config import MinesweeperConfig
from .constants import (
    BOARD_MASK,
    CELL_COUNT,
    CELL_IS_BOMB_THRESHOLD,
    CUSTOM_LEVEL,
    LEVEL_COUNT,
    MINESWEEPER_COLS,
    MINESWEEPER_ROWS,
)
from .events import CellRevealed, EventBus, Listener
from .generator import BoardGenerator
from .store import Game, GameState, GameStore, Player, PlayerCaches


logger = logging.getLogger(__name__)


@dataclass
class NextRevealOptions:
    """
    Test hooks applied to the next reveal.

    Attributes:
        force_expired: File the next request already expired. Reset after
            every request.
        skip_gateway: Store requests without queueing them.
    """

    force_expired: bool = False
    skip_gateway: bool = False


# ============================================================================
# Engine
# ============================================================================

class ConfidentialMinesweeper:
    """
    Multi-player Minesweeper with confidential boards.

    Every mutator runs under one re-entrant lock, so a synchronous gateway
    can call back into the engine from inside reveal_cell.
    """

    def __init__(
        self,
        config: Optional[MinesweeperConfig] = None,
        clock: Optional[BlockClock] = None,
        gateway: Optional[Gateway] = None,
        generator: Optional[BoardGenerator] = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            config: Engine configuration (default: 1000 ms gateway).
            clock: Block clock (default: wall clock).
            gateway: Decryption gateway (default: built from config).
            generator: Board generator (default: deterministic).
        """
        self.config = config or MinesweeperConfig()
        self.clock = clock or BlockClock(self.config.block_interval_in_sec)
        self.gateway = gateway or Gateway(self.config.gateway_interval_ms, self.clock)
        self.gateway.set_callback(self.callback_decrypt_cell)
        self.generator = generator or BoardGenerator()

        self.store = GameStore()
        self.requests = RequestRegistry()
        self.events = EventBus()
        self.next_reveal_options = NextRevealOptions()
        self._lock = threading.RLock()

    # ========================================================================
    # Game Lifecycle
    # ========================================================================

    def new_game(self, player: Player, level: int, first_cell_index: int) -> None:
        """
        Start a generated game, replacing any previous one.

        Args:
            player: Player identity.
            level: Difficulty level (0, 1 or 2).
            first_cell_index: Cell guaranteed to be bomb-free.
        """
        if level < 0 or level >= LEVEL_COUNT:
            raise ValidationError(f"Invalid level: {level}")
        self._check_cell_index(first_cell_index)

        with self._lock:
            board = self.generator.next_board(level, first_cell_index)
            self._new_game(player, level, euint256(board), first_cell_index)

    def new_custom_game(
        self, player: Player, first_cell_index: int, encoded_board: int
    ) -> None:
        """
        Start a game on a caller-supplied board.

        The board is masked so only legal cell bits survive and the first
        cell is bomb-free.
        """
        self._check_cell_index(first_cell_index)
        board = ops.and_(
            ops.as_euint256(encoded_board), BOARD_MASK & cell_mask(first_cell_index)
        )
        with self._lock:
            self._new_game(player, CUSTOM_LEVEL, board, first_cell_index)

    def _new_game(
        self,
        player: Player,
        level: int,
        board: EncryptedValue,
        first_cell_index: int,
    ) -> None:
        self._delete_game(player)
        self.store.create(player, Game(board, level, first_cell_index))
        logger.debug(
            "New game player=%s level=%d first_cell=%d", player, level, first_cell_index
        )

    def resign(self, player: Player) -> None:
        """Abandon the player's game; clears caches and pending request."""
        with self._lock:
            self._delete_game(player)

    def delete_game(self, player: Player) -> None:
        self.resign(player)

    def _delete_game(self, player: Player) -> None:
        self.requests.remove_player(player)
        self.store.delete(player)

    def set_deterministic_mode(self, deterministic: bool) -> None:
        with self._lock:
            self.generator.deterministic = deterministic

    @property
    def deterministic(self) -> bool:
        return self.generator.deterministic

    def set_next_reveal_options(
        self,
        force_expired: bool = False,
        skip_gateway: bool = False,
    ) -> None:
        """Configure test hooks for the next reveal."""
        with self._lock:
            self.next_reveal_options = NextRevealOptions(force_expired, skip_gateway)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a CellRevealed listener; returns an unsubscribe function."""
        return self.events.subscribe(listener)

    # ========================================================================
    # Reveal Protocol
    # ========================================================================

    def reveal_cell(self, player: Player, cell_index: int) -> int:
        """
        Request the decryption of a cell.

        If the player's previous request expired before the gateway served
        it, that request is filed again with the same ciphertexts and the
        given cell index is ignored.

        Args:
            player: Player identity.
            cell_index: Cell to reveal.

        Returns:
            Id of the filed decryption request.

        Raises:
            NotAPlayerError: If the player has no game.
            GameOverError: If the game exploded or was won.
            ValidationError: If the cell index is out of range.
            AlreadyRevealedError: If the cell already has a clear value.
            AlreadyRequestedError: If a request is pending and not expired.
        """
        with self._lock:
            game = self._require_game(player)
            if game.exploded:
                raise GameOverError("Game over")
            if game.victory:
                raise GameOverError("Game already won")
            self._check_cell_index(cell_index)

            caches = self.store.caches(player)
            if caches.get_clear(cell_index) > 0:
                raise AlreadyRevealedError(f"Already revealed: {cell_index}")

            pending = self.requests.of_player(player)
            if pending is not None and not self.clock.has_expired(pending.delay):
                raise AlreadyRequestedError(
                    f"Already requested: {pending.cell_index}"
                )

            delay = self._compute_new_request_delay()

            if pending is not None:
                logger.debug(
                    "Replaying expired request %d for cell %d",
                    pending.request_id, pending.cell_index,
                )
                cell_index = pending.cell_index
                clue, victory = pending.clue, pending.victory
                self.requests.remove(pending.request_id)
            else:
                game.mark_move(cell_index)
                clue = self._compute_encrypted_cell(player, game.board, cell_index, True).clue
                victory = ops.eq(ops.xor(game.board, game.moves), BOARD_MASK)

            return self._request_cell_decryption(player, cell_index, clue, victory, delay)

    def _compute_new_request_delay(self) -> int:
        now = self.clock.timestamp()
        timeout = self.config.gateway_timeout
        if self.next_reveal_options.force_expired:
            if not self.gateway.is_empty():
                raise StateError("force_expired not allowed while the gateway queue is busy")
            return now - timeout
        return now + timeout

    def _request_cell_decryption(
        self,
        player: Player,
        cell_index: int,
        clue: EncryptedValue,
        victory: EncryptedValue,
        delay: int,
    ) -> int:
        request_id = self.gateway.next_request_id()
        self.requests.add(DecryptionRequest(
            request_id=request_id,
            player=player,
            cell_index_plus_one=cell_index + 1,
            clue=clue,
            victory=victory,
            delay=delay,
        ))
        self.next_reveal_options.force_expired = False
        logger.debug(
            "Decryption request %d player=%s cell=%d delay=%d",
            request_id, player, cell_index, delay,
        )

        if not self.next_reveal_options.skip_gateway:
            self.gateway.submit(GatewayTask(request_id, clue, victory, delay))
        return request_id

    def callback_decrypt_cell(
        self, request_id: int, clear_clue: int, clear_victory: bool
    ) -> None:
        """
        Apply a decryption result.

        Args:
            request_id: Id of the request being answered.
            clear_clue: Decrypted clue (>= 9 means bomb).
            clear_victory: Decrypted victory flag.

        Raises:
            StaleCallbackError: If the request was deleted, superseded or
                already completed.
        """
        with self._lock:
            request = self.requests.get(request_id)
            if request is None:
                raise StaleCallbackError(f"Unknown request: {request_id}")
            if self.requests.current_id(request.player) != request_id:
                raise StaleCallbackError(f"Request {request_id} was superseded")
            if request.completed:
                raise StaleCallbackError(f"Request {request_id} already completed")

            game = self.store.get(request.player)
            if game is None:
                raise StaleCallbackError(f"No game for request {request_id}")

            request.completed = True
            self.requests.remove(request_id)

            cell_index = request.cell_index
            if clear_clue >= CELL_IS_BOMB_THRESHOLD:
                game.exploded = True
                clear_clue = CELL_IS_BOMB_THRESHOLD

            self.store.caches(request.player).save_clear(cell_index, clear_clue + 1)
            game.victory = bool(clear_victory) and not game.exploded

            event = CellRevealed(request.player, cell_index, clear_clue, game.victory)

        self.events.emit(event)

    # ========================================================================
    # Queries
    # ========================================================================

    def board_of(self, player: Player) -> EncryptedValue:
        return self._require_game(player).board

    def moves_of(self, player: Player) -> int:
        return self._require_game(player).moves

    def get_clear_cache(self, player: Player) -> CacheBlocks:
        """Raw clear cache blocks (zeros for a player without a game)."""
        caches = self.store.peek_caches(player)
        return caches.clear if caches is not None else (0, 0)

    def get_clear_cache_fields(self, player: Player) -> List[int]:
        """Decoded clear cache, one clue + 1 per cell."""
        return decode_clear_cache(*self.get_clear_cache(player), CELL_COUNT)

    def get_encrypted_cache(self, player: Player) -> Tuple[EncryptedValue, EncryptedValue]:
        caches = self._require_caches(player)
        return caches.encrypted[0], caches.encrypted[1]

    def pending_decryption_request(self, player: Player) -> PendingRequest:
        """Outstanding request of a player, or an all-zero record."""
        with self._lock:
            request = self.requests.of_player(player)
            if request is None:
                return NO_PENDING_REQUEST
            return PendingRequest(
                request.cell_index_plus_one,
                self.clock.has_expired(request.delay),
                request.delay,
            )

    def is_clear_cell_available(self, player: Player, cell_index: int) -> bool:
        self._check_cell_index(cell_index)
        caches = self.store.peek_caches(player)
        return caches is not None and caches.get_clear(cell_index) > 0

    def get_clear_cell(self, player: Player, cell_index: int) -> int:
        """
        Clear clue of a revealed cell.

        Raises:
            NotAPlayerError: If the player has no game.
            GameOverError: If the game exploded.
            StateError: If the cell has no clear value yet.
        """
        self._check_cell_index(cell_index)
        game = self._require_game(player)
        if game.exploded:
            raise GameOverError("Game over")
        clue_plus_one = self.store.caches(player).get_clear(cell_index)
        if clue_plus_one == 0:
            raise StateError(f"No cached value for cell {cell_index}")
        return clue_plus_one - 1

    def is_it_a_victory(self, player: Player) -> bool:
        game = self.store.get(player)
        return game is not None and game.victory

    def is_it_game_over(self, player: Player) -> bool:
        game = self.store.get(player)
        return game is not None and game.exploded

    def game_state_of(self, player: Player) -> GameState:
        return self._require_game(player).state

    def is_player(self, player: Player) -> bool:
        return player in self.store

    def player_has_game_in_progress(self, player: Player) -> bool:
        return self.store.has_game_in_progress(player)

    def get_first_cell_index(self, player: Player) -> int:
        if not self.player_has_game_in_progress(player):
            raise NotAPlayerError(f"No game in progress for {player}")
        return self.store.get(player).first_cell_index

    def level_of(self, player: Player) -> int:
        return self._require_game(player).level

    @staticmethod
    def size() -> Tuple[int, int]:
        return MINESWEEPER_ROWS, MINESWEEPER_COLS

    @staticmethod
    def cell_count() -> int:
        return CELL_COUNT

    # ========================================================================
    # Clue Engine Access
    # ========================================================================

    def compute_six_bits_at(self, player: Player, row: int, col: int) -> EncryptedValue:
        return six_bits_at(self.board_of(player), row, col)

    def compute_encrypted_cell(
        self, player: Player, cell_index: int, save: bool = False
    ) -> CellClue:
        """Compute a cell's encrypted clue, optionally saving it to the cache."""
        with self._lock:
            game = self._require_game(player)
            return self._compute_encrypted_cell(player, game.board, cell_index, save)

    def _compute_encrypted_cell(
        self, player: Player, board: EncryptedValue, cell_index: int, save: bool
    ) -> CellClue:
        result = compute_cell(board, cell_index)
        if save:
            self.store.caches(player).save_encrypted(cell_index, result.clue)
        return result

    # ========================================================================
    # Helpers (Low-level)
    # ========================================================================

    def _require_game(self, player: Hashable) -> Game:
        game = self.store.get(player)
        if game is None:
            raise NotAPlayerError(f"Not a player: {player}")
        return game

    def _require_caches(self, player: Hashable) -> PlayerCaches:
        self._require_game(player)
        return self.store.caches(player)

    @staticmethod
    def _check_cell_index(cell_index: int) -> None:
        if cell_index < 0 or cell_index >= CELL_COUNT:
            raise ValidationError(f"Invalid cell index: {cell_index}")
