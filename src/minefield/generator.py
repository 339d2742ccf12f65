"""
Board generation for the confidential Minesweeper game.

Boards are built by AND-ing and OR-ing five 256-bit pseudorandom words so
that each level gets its own bomb density:

    Level 0: R0 & R1 & R3 & (R2 | R4)   ~ 9.4%
    Level 1: R0 & R1 & R3               ~ 12.5%
    Level 2: R0 & R1 & (R2 | R4)        ~ 18.8%

In deterministic mode the words are keccak256(abi.encode(counter, level, i))
so a board can be recomputed by anyone who knows the game counter.
"""
import threading
from typing import List, Optional

import numpy as np
from Crypto.Hash import keccak

from mockfhe import ValidationError, check_uint

from .codec import cell_mask, decode_bombs
from .constants import BOARD_MASK, CELL_COUNT, LEVEL_COUNT


WORD_COUNT = 5


# ============================================================================
# Hashing (Low-level)
# ============================================================================

def abi_encode_seed(counter: int, level: int, index: int) -> bytes:
    """ABI encoding of the tuple (uint256 counter, uint8 level, uint256 index)."""
    check_uint(counter, 256)
    check_uint(level, 8)
    check_uint(index, 256)
    return b"".join(v.to_bytes(32, "big") for v in (counter, level, index))


def keccak_word(counter: int, level: int, index: int) -> int:
    """Pseudorandom 256-bit word number `index` for a game."""
    digest = keccak.new(digest_bits=256)
    digest.update(abi_encode_seed(counter, level, index))
    return int.from_bytes(digest.digest(), "big")


# ============================================================================
# Board Formula
# ============================================================================

def combine_words(level: int, words: List[int], start_mask: int) -> int:
    """
    Combine five random words into a masked board.

    Args:
        level: Difficulty level (0, 1 or 2).
        words: R0..R4.
        start_mask: Mask clearing the first clicked cell.

    Returns:
        Packed board with bombs only on legal even bits.
    """
    r0, r1, r2, r3, r4 = words
    board = r0 & r1
    if level < 2:
        board &= r3
    if level != 1:
        board &= r2 | r4
    return board & BOARD_MASK & start_mask


def _check_level(level: int) -> None:
    if level < 0 or level >= LEVEL_COUNT:
        raise ValidationError(f"Invalid level: {level}")


def compute_deterministic_board_with_mask(
    level: int, counter: int, start_mask: int
) -> int:
    """Deterministic board for a game counter, masked by `start_mask`."""
    _check_level(level)
    words = [keccak_word(counter, level, i) for i in range(WORD_COUNT)]
    return combine_words(level, words, start_mask)


def compute_deterministic_board(
    level: int, counter: int, first_cell_index: int
) -> int:
    """Deterministic board whose first clicked cell is never a bomb."""
    return compute_deterministic_board_with_mask(
        level, counter, cell_mask(first_cell_index)
    )


def compute_density(board: int) -> float:
    """Percentage of cells holding a bomb."""
    return 100.0 * sum(decode_bombs(board)) / CELL_COUNT


# ============================================================================
# Board Generator
# ============================================================================

class BoardGenerator:
    """
    Produces new boards and owns the global game counter.

    The counter only advances for deterministic boards, under a lock, so
    concurrent games never reuse a seed.
    """

    def __init__(
        self,
        deterministic: bool = True,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize the generator.

        Args:
            deterministic: Use keccak words derived from the counter.
            seed: Seed for the random word source (non-deterministic mode).
        """
        self.deterministic = deterministic
        self._count = 0
        self._lock = threading.Lock()
        self.rng = np.random.default_rng(seed)

    @property
    def count(self) -> int:
        """Number of deterministic boards generated so far."""
        with self._lock:
            return self._count

    def next_board(self, level: int, first_cell_index: int) -> int:
        """
        Generate the next board.

        Args:
            level: Difficulty level (0, 1 or 2).
            first_cell_index: Cell guaranteed to be bomb-free.

        Returns:
            Packed board.
        """
        _check_level(level)
        start_mask = cell_mask(first_cell_index)

        with self._lock:
            if self.deterministic:
                board = compute_deterministic_board_with_mask(
                    level, self._count, start_mask
                )
                self._count += 1
                return board
            return combine_words(level, self._random_words(), start_mask)

    def _random_words(self) -> List[int]:
        return [
            int.from_bytes(self.rng.bytes(32), "big")
            for _ in range(WORD_COUNT)
        ]
