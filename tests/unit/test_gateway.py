"""
Unit tests for the decryption protocol and gateway.

Tests request expiry and replay, stale callbacks, FIFO draining and the
timer-driven asynchronous gateway.
"""
import logging

import pytest
from minefield import ConfidentialMinesweeper
from mockfhe import (
    AlreadyRequestedError,
    StaleCallbackError,
    StateError,
    ebool,
    euint4,
)
from oracle import BlockClock, Gateway, GatewayTask, ManualClock


PLAYER = "alice"

# Enough wall-clock time for a request to expire (timeout 100, 10 per block).
EXPIRY_MS = 110_000


# ============================================================================
# Block Clock Tests
# ============================================================================

class TestBlockClock:
    """Test coarse block timestamps."""

    def test_timestamp_steps_per_block(self) -> None:
        """Timestamps advance by the block interval every 10 seconds."""
        now = ManualClock(25_000)
        clock = BlockClock(10, now_ms=now)
        assert clock.timestamp() == 20
        now.advance(4_999)
        assert clock.timestamp() == 20
        now.advance(1)
        assert clock.timestamp() == 30

    def test_has_expired_is_strict(self) -> None:
        """A request expires only once the timestamp passes its delay."""
        clock = BlockClock(10, now_ms=ManualClock(100_000))
        assert clock.has_expired(100) is False
        assert clock.has_expired(99) is True

    def test_invalid_interval_raises_error(self) -> None:
        """The block interval must be positive."""
        with pytest.raises(ValueError):
            BlockClock(0)


# ============================================================================
# Expiry and Replay Tests
# ============================================================================

class TestExpiryAndReplay:
    """Test the per-player request state machine."""

    def test_pending_request_blocks_new_reveal(
        self, engine: ConfidentialMinesweeper
    ) -> None:
        """A live request must be answered before the next reveal."""
        engine.new_game(PLAYER, 0, 16)
        engine.set_next_reveal_options(skip_gateway=True)
        engine.reveal_cell(PLAYER, 16)

        pending = engine.pending_decryption_request(PLAYER)
        assert pending.cell_index_plus_one == 17
        assert pending.expired is False

        with pytest.raises(AlreadyRequestedError):
            engine.reveal_cell(PLAYER, 17)

    def test_force_expired_then_replay(self, engine: ConfidentialMinesweeper) -> None:
        """An expired request is replayed for the cell it was filed for."""
        engine.new_game(PLAYER, 0, 16)
        engine.set_next_reveal_options(force_expired=True)
        engine.reveal_cell(PLAYER, 16)

        pending = engine.pending_decryption_request(PLAYER)
        assert pending.cell_index_plus_one == 17
        assert pending.expired is True
        assert engine.is_clear_cell_available(PLAYER, 16) is False

        engine.reveal_cell(PLAYER, 50)

        assert engine.is_clear_cell_available(PLAYER, 16) is True
        assert engine.is_clear_cell_available(PLAYER, 50) is False
        assert engine.moves_of(PLAYER) == 1 << 32
        assert engine.pending_decryption_request(PLAYER).cell_index_plus_one == 0

    def test_force_expired_resets_after_one_request(
        self, engine: ConfidentialMinesweeper
    ) -> None:
        """force_expired only applies to the next request."""
        engine.new_game(PLAYER, 0, 16)
        engine.set_next_reveal_options(force_expired=True)
        engine.reveal_cell(PLAYER, 16)
        assert engine.next_reveal_options.force_expired is False

    def test_replay_reuses_ciphertexts(
        self,
        engine: ConfidentialMinesweeper,
        manual_clock: ManualClock,
    ) -> None:
        """The replayed request carries the same clue and victory values."""
        engine.new_game(PLAYER, 0, 16)
        engine.set_next_reveal_options(skip_gateway=True)
        first_id = engine.reveal_cell(PLAYER, 16)
        first = engine.requests.of_player(PLAYER)

        manual_clock.advance(EXPIRY_MS)
        assert engine.pending_decryption_request(PLAYER).expired is True

        second_id = engine.reveal_cell(PLAYER, 30)
        second = engine.requests.of_player(PLAYER)

        assert second_id > first_id
        assert second.cell_index == 16
        assert second.clue is first.clue
        assert second.victory is first.victory
        assert engine.requests.get(first_id) is None
        assert engine.moves_of(PLAYER) == 1 << 32

    def test_expired_request_answered_after_replay(
        self,
        engine: ConfidentialMinesweeper,
        manual_clock: ManualClock,
    ) -> None:
        """Once the gateway is back, the replay resolves the cell."""
        engine.new_game(PLAYER, 0, 16)
        engine.set_next_reveal_options(skip_gateway=True)
        engine.reveal_cell(PLAYER, 37)
        manual_clock.advance(EXPIRY_MS)

        engine.set_next_reveal_options()
        engine.reveal_cell(PLAYER, 0)

        assert engine.get_clear_cell(PLAYER, 37) == 1


# ============================================================================
# Gateway Queue Tests
# ============================================================================

class TestGatewayQueue:
    """Test queue draining with a gateway that never fires by itself."""

    def test_drain_answers_queued_requests(
        self, manual_gateway_engine: ConfidentialMinesweeper
    ) -> None:
        """Requests stay pending until the queue is drained."""
        engine = manual_gateway_engine
        engine.new_game(PLAYER, 0, 16)
        engine.reveal_cell(PLAYER, 16)

        assert engine.gateway.pending_count() == 1
        assert engine.is_clear_cell_available(PLAYER, 16) is False

        assert engine.gateway.drain() == 1
        assert engine.is_clear_cell_available(PLAYER, 16) is True
        assert engine.gateway.is_empty()

    def test_force_expired_requires_empty_queue(
        self, manual_gateway_engine: ConfidentialMinesweeper
    ) -> None:
        """force_expired fails while requests are queued, before any change."""
        engine = manual_gateway_engine
        engine.new_game("alice", 0, 16)
        engine.new_game("bob", 0, 16)
        engine.reveal_cell("alice", 16)

        engine.set_next_reveal_options(force_expired=True)
        with pytest.raises(StateError, match="force_expired"):
            engine.reveal_cell("bob", 16)

        assert engine.moves_of("bob") == 0
        assert engine.pending_decryption_request("bob").cell_index_plus_one == 0

    def test_expired_task_is_skipped(
        self,
        manual_gateway_engine: ConfidentialMinesweeper,
        manual_clock: ManualClock,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """The gateway drops tasks whose delay has passed."""
        engine = manual_gateway_engine
        engine.new_game(PLAYER, 0, 16)
        engine.reveal_cell(PLAYER, 16)
        manual_clock.advance(EXPIRY_MS)

        with caplog.at_level(logging.INFO, logger="oracle.gateway"):
            assert engine.gateway.drain() == 0

        assert "Skipping expired decryption request" in caplog.text
        assert engine.pending_decryption_request(PLAYER).expired is True

    def test_replayed_request_supersedes_queued_one(
        self,
        manual_gateway_engine: ConfidentialMinesweeper,
        manual_clock: ManualClock,
    ) -> None:
        """Only the replayed task is delivered."""
        engine = manual_gateway_engine
        engine.new_game(PLAYER, 0, 16)
        engine.reveal_cell(PLAYER, 16)
        manual_clock.advance(EXPIRY_MS)
        engine.reveal_cell(PLAYER, 16)

        assert engine.gateway.pending_count() == 2
        assert engine.gateway.drain() == 1
        assert engine.get_clear_cell(PLAYER, 16) == 0

    def test_stale_callback_after_resign(
        self,
        manual_gateway_engine: ConfidentialMinesweeper,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """A queued request of a deleted game is logged and dropped."""
        engine = manual_gateway_engine
        engine.new_game(PLAYER, 0, 16)
        engine.reveal_cell(PLAYER, 16)
        engine.resign(PLAYER)

        with caplog.at_level(logging.WARNING, logger="oracle.gateway"):
            assert engine.gateway.drain() == 0

        assert "Dropping decryption request" in caplog.text
        assert engine.is_player(PLAYER) is False

    def test_unknown_request_raises_error(
        self, engine: ConfidentialMinesweeper
    ) -> None:
        """Callbacks for unknown ids are rejected."""
        with pytest.raises(StaleCallbackError):
            engine.callback_decrypt_cell(42, 0, False)

    def test_callback_is_applied_once(
        self, manual_gateway_engine: ConfidentialMinesweeper
    ) -> None:
        """A second callback for the same request is stale."""
        engine = manual_gateway_engine
        engine.new_game(PLAYER, 0, 16)
        request_id = engine.reveal_cell(PLAYER, 16)

        engine.callback_decrypt_cell(request_id, 0, False)
        with pytest.raises(StaleCallbackError):
            engine.callback_decrypt_cell(request_id, 0, False)

    def test_fifo_order(self, block_clock: BlockClock) -> None:
        """Tasks are delivered in submission order."""
        delivered = []
        gateway = Gateway(
            interval_ms=60_000,
            clock=block_clock,
            callback=lambda request_id, clue, victory: delivered.append(request_id),
        )
        delay = block_clock.timestamp() + 100
        for _ in range(3):
            request_id = gateway.next_request_id()
            gateway.submit(GatewayTask(request_id, euint4(1), ebool(False), delay))

        gateway.cancel()
        assert gateway.drain() == 3
        assert delivered == [0, 1, 2]

    def test_drain_without_callback_raises_error(self) -> None:
        """A gateway needs a callback before it can deliver."""
        with pytest.raises(StateError):
            Gateway(interval_ms=0).drain()

    def test_negative_interval_raises_error(self) -> None:
        """The gateway interval cannot be negative."""
        with pytest.raises(ValueError):
            Gateway(interval_ms=-1)


# ============================================================================
# Asynchronous Gateway Tests
# ============================================================================

class TestAsyncGateway:
    """Test the timer-driven gateway."""

    def test_timer_answers_request(
        self, async_engine: ConfidentialMinesweeper
    ) -> None:
        """The timer drains the queue after the interval."""
        async_engine.new_game(PLAYER, 0, 16)
        async_engine.reveal_cell(PLAYER, 16)

        async_engine.gateway.join(timeout=5.0)

        assert async_engine.is_clear_cell_available(PLAYER, 16) is True
        assert async_engine.get_clear_cell(PLAYER, 16) == 0

    def test_events_from_timer_thread(
        self, async_engine: ConfidentialMinesweeper
    ) -> None:
        """Listeners are notified when the timer answers."""
        events = []
        async_engine.subscribe(events.append)
        async_engine.new_game(PLAYER, 0, 16)
        async_engine.reveal_cell(PLAYER, 16)
        async_engine.gateway.join(timeout=5.0)

        assert len(events) == 1
        assert events[0].cell_index == 16
