"""
Exception hierarchy shared by the confidential Minesweeper packages.

Validation failures derive from ValueError so callers that only know
about built-in exceptions still catch them.
"""


class MinesweeperError(Exception):
    """Base class for every error raised by the engine."""


# ============================================================================
# Validation Errors
# ============================================================================

class ValidationError(MinesweeperError, ValueError):
    """Bad argument: cell index, level, width or value range."""


class ValueOverflowError(ValidationError):
    """Result does not fit in the declared unsigned width."""


class WidthMismatchError(ValidationError):
    """Operands of an encrypted operation have different widths."""


class UninitializedValueError(ValidationError):
    """An encrypted handle was used before being assigned."""


# ============================================================================
# State Errors
# ============================================================================

class StateError(MinesweeperError):
    """Operation is not allowed in the player's current state."""


class NotAPlayerError(StateError):
    """Player has no game."""


class GameOverError(StateError):
    """Player's game is already finished."""


class AlreadyRevealedError(StateError):
    """Cell already has a clear value."""


class AlreadyRequestedError(StateError):
    """A decryption request is pending and has not expired."""


class StaleCallbackError(StateError):
    """Decryption callback does not match the stored request."""


# ============================================================================
# Timeout Errors
# ============================================================================

class DecryptionTimeoutError(MinesweeperError, TimeoutError):
    """Clear value did not become available within the retry budget."""
