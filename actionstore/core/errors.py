"""
Exception types for the action execution engine.

Every error an action call can be rejected with derives from ActionStoreError.
Wrapping errors keep the original exception as __cause__.
"""

from typing import Optional


class ActionStoreError(Exception):
    """Base class for all actionstore errors."""

    def __init__(self, message: str, action_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.action_name = action_name


class NotInitializedError(ActionStoreError):
    """Raised when an action is used before Store.init()."""
    pass


class AlreadyInitializedError(ActionStoreError):
    """Raised when Store.init() is called a second time."""
    pass


class UnknownActionError(ActionStoreError, AttributeError):
    """Raised when an action name is not in the action table."""
    pass


class InvalidActionResult(ActionStoreError):
    """Raised when an action produced no usable state (None, or an empty iterator)."""
    pass


class ActionExecutionError(ActionStoreError):
    """Raised when the action body, a yielded awaitable or a generator step fails."""
    pass


class MiddlewareError(ActionStoreError):
    """Raised when a pre or post middleware hook fails."""

    def __init__(self, message: str, action_name: Optional[str] = None, phase: Optional[str] = None) -> None:
        super().__init__(message, action_name=action_name)
        self.phase = phase


class SubscriberError(ActionStoreError):
    """Raised when a commit listener fails. The commit itself stays in effect."""
    pass
