"""
Width-tagged encrypted value stand-ins.

An EncryptedValue carries a plaintext integer, the unsigned bit width it
was declared with and an "initialized" flag. It plays the part of a
ciphertext handle: the layout and width discipline are real, the
confidentiality is not.
"""
from dataclasses import dataclass
from typing import Union

from .errors import (
    UninitializedValueError,
    ValidationError,
    ValueOverflowError,
    WidthMismatchError,
)


# ============================================================================
# Constants
# ============================================================================

SUPPORTED_BITS = (1, 4, 8, 16, 32, 64, 128, 256)

MAX_U4 = 0xF
MAX_U8 = 0xFF
MAX_U16 = 0xFFFF
MAX_U32 = 0xFFFFFFFF
MAX_U64 = (1 << 64) - 1
MAX_U128 = (1 << 128) - 1
MAX_U256 = (1 << 256) - 1


def max_value(bits: int) -> int:
    """Largest unsigned value representable on `bits` bits."""
    return (1 << bits) - 1


def check_uint(value: int, bits: int) -> int:
    """
    Check that an unsigned value fits in the given width.

    Args:
        value: Integer to check.
        bits: Declared width.

    Returns:
        The value, unchanged.

    Raises:
        ValueOverflowError: If value is negative or too large.
    """
    if value < 0 or value > max_value(bits):
        raise ValueOverflowError(f"uint{bits} overflow value={value}")
    return value


# ============================================================================
# Encrypted Value
# ============================================================================

@dataclass(frozen=True)
class EncryptedValue:
    """
    Plaintext stand-in for a ciphertext of a given width.

    Attributes:
        value: Underlying unsigned integer.
        bits: Declared width (1 for booleans).
        initialized: False for a handle that was never assigned.
    """

    value: int = 0
    bits: int = 256
    initialized: bool = True

    def __post_init__(self) -> None:
        """Validate width and value range."""
        if self.bits not in SUPPORTED_BITS:
            raise ValidationError(f"Unsupported width: {self.bits} bits")
        check_uint(self.value, self.bits)

    def require(self, bits: int) -> "EncryptedValue":
        """Fail unless this value has the given width."""
        if self.bits != bits:
            raise WidthMismatchError(
                f"Invalid encrypted value, got {self.bits} bits, expecting {bits}."
            )
        return self


Operand = Union[EncryptedValue, int]


# ============================================================================
# Factories
# ============================================================================

def ebool(value: Union[bool, int]) -> EncryptedValue:
    """Encrypted boolean."""
    return EncryptedValue(1 if value else 0, 1)


def euint4(value: int) -> EncryptedValue:
    return EncryptedValue(value, 4)


def euint8(value: int) -> EncryptedValue:
    return EncryptedValue(value, 8)


def euint16(value: int) -> EncryptedValue:
    return EncryptedValue(value, 16)


def euint256(value: int) -> EncryptedValue:
    return EncryptedValue(value, 256)


def uninitialized(bits: int) -> EncryptedValue:
    """Handle that was never assigned (reads as zero)."""
    return EncryptedValue(0, bits, initialized=False)


def is_initialized(value: EncryptedValue) -> bool:
    return value.initialized


def decrypt(value: EncryptedValue, bits: int) -> int:
    """
    Reveal the plaintext behind an encrypted value.

    Args:
        value: Encrypted value to decrypt.
        bits: Width the caller expects.

    Returns:
        The plaintext integer.

    Raises:
        WidthMismatchError: If the width differs.
        UninitializedValueError: If the handle was never assigned.
    """
    value.require(bits)
    if not value.initialized:
        raise UninitializedValueError("Cannot decrypt an uninitialized value")
    return check_uint(value.value, bits)


def decrypt_bool(value: EncryptedValue) -> bool:
    return decrypt(value, 1) == 1
