"""
actionstore

Single-writer state container whose state changes come from actions. Actions
may return a value, an awaitable, a generator or an async generator; calls are
serialized and every produced state is committed in order.

The module-level functions operate on one default Store:

    import actionstore

    actionstore.init({"increment": increment}, lambda actions: {"count": 0}, render)
    await actionstore.actions.increment(5)
    actionstore.get_state()
"""

from typing import Any, Callable, Iterable, Mapping, Optional

from .config import StoreConfig
from .core.errors import (
    ActionStoreError,
    NotInitializedError,
    AlreadyInitializedError,
    UnknownActionError,
    InvalidActionResult,
    ActionExecutionError,
    MiddlewareError,
    SubscriberError,
)
from .core.dispatcher import ActionContext
from .core.events import CommitEvent, CommitRecorder
from .core.middleware import Middleware, MiddlewareContext, MiddlewareSpec
from .store import ActionsNamespace, Store, Subscriber

__version__ = "0.1.0"

_default_store = Store()

actions = _default_store.actions


def default_store() -> Store:
    return _default_store


def init(
    action_table: Mapping[str, Callable[..., Any]],
    initial_state: Callable[[ActionsNamespace], Any],
    subscriber: Optional[Subscriber] = None,
) -> Store:
    return _default_store.init(action_table, initial_state, subscriber)


def get_state() -> Any:
    return _default_store.state


def set_middlewares(entries: Iterable[MiddlewareSpec]) -> None:
    _default_store.set_middlewares(entries)


def enable_logging(enabled: bool = True) -> None:
    _default_store.enable_logging(enabled)


def enable_state_logging(enabled: bool = True) -> None:
    _default_store.enable_state_logging(enabled)


def subscribe(listener: Callable[[CommitEvent], None]) -> Callable[[], None]:
    return _default_store.subscribe(listener)


__all__ = [
    "__version__",
    "Store",
    "StoreConfig",
    "ActionsNamespace",
    "ActionContext",
    "CommitEvent",
    "CommitRecorder",
    "Middleware",
    "MiddlewareContext",
    "actions",
    "default_store",
    "init",
    "get_state",
    "set_middlewares",
    "enable_logging",
    "enable_state_logging",
    "subscribe",
    "ActionStoreError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "UnknownActionError",
    "InvalidActionResult",
    "ActionExecutionError",
    "MiddlewareError",
    "SubscriberError",
]
