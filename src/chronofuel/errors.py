"""
chronofuel/errors.py

Error taxonomy for the emission engine.

Every failure is raised as one of four kinds so callers can assert on the
cause rather than on "something failed":

- ValidationError: malformed input (non-positive amount, null address)
- AuthorizationError: caller is not the owner or the registered engine
- StateError: the current state forbids the operation
- AlreadyConfiguredError: rebinding a collaborator to a different value

All errors abort the whole operation with no observable state change.
"""

from typing import Optional


class ChronofuelError(Exception):
    """Base class for all chronofuel errors."""
    pass


class ValidationError(ChronofuelError):
    """Raised for non-positive amounts and null addresses."""
    pass


class AuthorizationError(ChronofuelError):
    """Raised when the caller is neither the owner nor the bound engine."""
    pass


class AlreadyConfiguredError(ChronofuelError):
    """Raised when a one-time binding is pointed at a different value."""
    pass


class StateError(ChronofuelError):
    """Raised when the current state does not allow the operation."""
    pass


class NoActiveStakeError(StateError):
    pass


class InsufficientStakeError(StateError):
    pass


class CooldownActiveError(StateError):
    """Raised when a claim is attempted before the cooldown has elapsed."""

    def __init__(self, message: str, retry_at: Optional[int] = None):
        super().__init__(message)
        self.retry_at = retry_at


class ShieldNotFoundError(StateError):
    pass


class NotConfiguredError(StateError):
    """Raised when a collaborator the operation needs has not been bound."""
    pass


class RecordIndexError(StateError):
    pass


class InsufficientBalanceError(StateError):
    pass


class InsufficientAllowanceError(StateError):
    pass


class ReentrancyError(StateError):
    """Raised when a guarded operation is re-entered from inside itself."""
    pass
