"""
Encrypted value stand-ins module.

Provides bit-width-tagged plaintext values that mimic ciphertext handles,
and the width-checked operations used for every packed board computation.
"""
from .errors import (
    MinesweeperError,
    ValidationError,
    ValueOverflowError,
    WidthMismatchError,
    UninitializedValueError,
    StateError,
    NotAPlayerError,
    GameOverError,
    AlreadyRevealedError,
    AlreadyRequestedError,
    StaleCallbackError,
    DecryptionTimeoutError,
)
from .values import (
    EncryptedValue,
    MAX_U4,
    MAX_U8,
    MAX_U32,
    MAX_U256,
    check_uint,
    ebool,
    euint4,
    euint8,
    euint16,
    euint256,
    uninitialized,
    is_initialized,
    decrypt,
    decrypt_bool,
)
from . import ops

__all__ = [
    "MinesweeperError",
    "ValidationError",
    "ValueOverflowError",
    "WidthMismatchError",
    "UninitializedValueError",
    "StateError",
    "NotAPlayerError",
    "GameOverError",
    "AlreadyRevealedError",
    "AlreadyRequestedError",
    "StaleCallbackError",
    "DecryptionTimeoutError",
    "EncryptedValue",
    "MAX_U4",
    "MAX_U8",
    "MAX_U32",
    "MAX_U256",
    "check_uint",
    "ebool",
    "euint4",
    "euint8",
    "euint16",
    "euint256",
    "uninitialized",
    "is_initialized",
    "decrypt",
    "decrypt_bool",
    "ops",
]
