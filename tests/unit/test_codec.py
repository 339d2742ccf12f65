"""
Unit tests for the packed board and cache codec.
"""
import numpy as np
import pytest
from minefield import (
    BOARD_MASK,
    CELL_COUNT,
    cell_mask,
    decode_bombs,
    decode_clear_cache,
    decode_moves,
    default_board,
    encode_board,
    set_bomb_at,
    set_clear_cache_field,
    to_grid,
)
from minefield.codec import DEFAULT_BOARD_BOMBS, get_clear_cache_field
from mockfhe import MAX_U256, ValidationError


# ============================================================================
# Board Encoding Tests
# ============================================================================

class TestBoardEncoding:
    """Test 2-bit-per-cell board encoding."""

    def test_encode_sets_even_bits(self) -> None:
        """Each bomb should set bit 2 * cell_index."""
        assert encode_board([0]) == 1
        assert encode_board([1]) == 4
        assert encode_board([0, 3]) == 1 | (1 << 6)

    def test_decode_bombs_inverts_encode(self) -> None:
        """Decoding should list exactly the encoded bombs."""
        bombs = decode_bombs(encode_board([5, 60, 120]))
        assert len(bombs) == CELL_COUNT
        assert [i for i, b in enumerate(bombs) if b] == [5, 60, 120]

    def test_set_bomb_out_of_range_raises_error(self) -> None:
        """Cell indices past the board are rejected."""
        with pytest.raises(ValidationError):
            set_bomb_at(0, CELL_COUNT)

    def test_board_mask_covers_every_cell(self) -> None:
        """BOARD_MASK should be the board with a bomb on every cell."""
        assert BOARD_MASK == encode_board(range(CELL_COUNT))
        assert BOARD_MASK >> (CELL_COUNT * 2) == 0

    def test_cell_mask_clears_one_cell(self) -> None:
        """cell_mask should clear only the two bits of its cell."""
        mask = cell_mask(16)
        assert mask == MAX_U256 ^ (0x3 << 32)
        assert encode_board([16, 17]) & mask == encode_board([17])

    def test_decode_moves(self) -> None:
        """Moves use the same bit layout as bombs."""
        moves = (1 << 0) | (1 << 20)
        assert decode_moves(moves)[:11] == [1] + [0] * 9 + [1]

    def test_default_board_bombs(self) -> None:
        """The built-in board holds its listed bombs."""
        bombs = decode_bombs(default_board())
        assert [i for i, b in enumerate(bombs) if b] == list(DEFAULT_BOARD_BOMBS)


# ============================================================================
# Cache Encoding Tests
# ============================================================================

class TestCacheEncoding:
    """Test 4-bit-per-cell cache encoding."""

    def test_set_and_get_field(self) -> None:
        """A written field should be read back."""
        blocks = set_clear_cache_field((0, 0), 3, 7)
        assert blocks == (7 << 12, 0)
        assert get_clear_cache_field(blocks, 3) == 7

    def test_second_block(self) -> None:
        """Cells 64 and above live in the second block."""
        blocks = set_clear_cache_field((0, 0), 65, 0xA)
        assert blocks == (0, 0xA << 4)
        assert get_clear_cache_field(blocks, 65) == 0xA

    def test_set_field_ors_values(self) -> None:
        """Fields are merged with OR."""
        blocks = set_clear_cache_field((0, 0), 0, 0b0101)
        blocks = set_clear_cache_field(blocks, 0, 0b0010)
        assert get_clear_cache_field(blocks, 0) == 0b0111

    def test_value_overflow_raises_error(self) -> None:
        """Values wider than 4 bits are rejected."""
        with pytest.raises(ValidationError):
            set_clear_cache_field((0, 0), 0, 0x10)

    def test_block_overflow_raises_error(self) -> None:
        """Only two blocks exist."""
        with pytest.raises(ValidationError):
            set_clear_cache_field((0, 0), 128, 1)

    def test_decode_clear_cache(self) -> None:
        """Decoding should return fields in cell order across blocks."""
        blocks = (0, 0)
        blocks = set_clear_cache_field(blocks, 0, 1)
        blocks = set_clear_cache_field(blocks, 63, 2)
        blocks = set_clear_cache_field(blocks, 64, 3)
        blocks = set_clear_cache_field(blocks, 120, 4)

        fields = decode_clear_cache(*blocks, CELL_COUNT)

        assert len(fields) == CELL_COUNT
        assert (fields[0], fields[63], fields[64], fields[120]) == (1, 2, 3, 4)
        assert sum(fields) == 10

    def test_decode_short_length(self) -> None:
        """Only the first cell_count fields are returned."""
        assert decode_clear_cache(0x21, 0, 2) == [1, 2]

    def test_decode_invalid_length_raises_error(self) -> None:
        """More than 128 fields do not fit in two blocks."""
        with pytest.raises(ValidationError):
            decode_clear_cache(0, 0, 129)


# ============================================================================
# Array Helper Tests
# ============================================================================

class TestToGrid:
    """Test reshaping to numpy grids."""

    def test_grid_shape_and_dtype(self) -> None:
        """Grids are 11x11 int8 arrays in row-major order."""
        grid = to_grid(list(range(CELL_COUNT)))
        assert grid.shape == (11, 11)
        assert grid.dtype == np.int8
        assert grid[1, 0] == 11
