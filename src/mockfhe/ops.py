"""
Width-checked operations on encrypted value stand-ins.

Every operation takes an EncryptedValue on the left and either an
EncryptedValue of the same width or a plain integer on the right. The
result is range-checked against the declared width: overflow is an
error, never a wraparound.
"""
from .values import (
    EncryptedValue,
    Operand,
    check_uint,
    ebool,
    max_value,
)


# ============================================================================
# Operand Helpers (Low-level)
# ============================================================================

def _rhs_value(lhs: EncryptedValue, rhs: Operand) -> int:
    """Extract the right operand, checked against the left operand width."""
    if isinstance(rhs, EncryptedValue):
        return rhs.require(lhs.bits).value
    return check_uint(rhs, lhs.bits)


def _shift_amount(amount: Operand) -> int:
    """Shift amounts are 8-bit values, encrypted or clear."""
    if isinstance(amount, EncryptedValue):
        return check_uint(amount.value, 8)
    return check_uint(amount, 8)


def _result(value: int, bits: int) -> EncryptedValue:
    return EncryptedValue(check_uint(value, bits), bits)


# ============================================================================
# Casts
# ============================================================================

def as_euint(value: Operand, bits: int) -> EncryptedValue:
    """
    Cast to an encrypted value of the given width, keeping the low bits.

    A plain integer must already be a valid uint256.
    """
    if isinstance(value, EncryptedValue):
        raw = value.value
    else:
        raw = check_uint(value, 256)
    return EncryptedValue(raw & max_value(bits), bits)


def as_euint4(value: Operand) -> EncryptedValue:
    return as_euint(value, 4)


def as_euint8(value: Operand) -> EncryptedValue:
    return as_euint(value, 8)


def as_euint256(value: Operand) -> EncryptedValue:
    return as_euint(value, 256)


# ============================================================================
# Bitwise Operations
# ============================================================================

def and_(lhs: EncryptedValue, rhs: Operand) -> EncryptedValue:
    return _result(lhs.value & _rhs_value(lhs, rhs), lhs.bits)


def or_(lhs: EncryptedValue, rhs: Operand) -> EncryptedValue:
    return _result(lhs.value | _rhs_value(lhs, rhs), lhs.bits)


def xor(lhs: EncryptedValue, rhs: Operand) -> EncryptedValue:
    return _result(lhs.value ^ _rhs_value(lhs, rhs), lhs.bits)


def shl(lhs: EncryptedValue, amount: Operand) -> EncryptedValue:
    """
    Shift left. Bits pushed past the declared width raise an error.

    Args:
        lhs: Value to shift.
        amount: Shift amount (uint8).

    Returns:
        Shifted value of the same width.
    """
    return _result(lhs.value << _shift_amount(amount), lhs.bits)


def shr(lhs: EncryptedValue, amount: Operand) -> EncryptedValue:
    return _result(lhs.value >> _shift_amount(amount), lhs.bits)


# ============================================================================
# Arithmetic and Comparison
# ============================================================================

def add(lhs: EncryptedValue, rhs: Operand) -> EncryptedValue:
    return _result(lhs.value + _rhs_value(lhs, rhs), lhs.bits)


def eq(lhs: EncryptedValue, rhs: Operand) -> EncryptedValue:
    """Encrypted equality, returned as an encrypted boolean."""
    return ebool(lhs.value == _rhs_value(lhs, rhs))
