"""
Public store surface.

Usage:
    store = Store()
    store.init(
        {"increment": lambda ctx, n=1: {"count": ctx.state()["count"] + n}},
        lambda actions: {"count": 0},
        subscriber=lambda state, actions: print(state),
    )
    await store.actions.increment(5)   # {"count": 5}
    store.state                        # {"count": 5}
"""

import asyncio
import functools
import logging
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, Mapping, Optional

from .config import StoreConfig
from .core.dispatcher import ActionFn, Dispatcher, LoggingToggles
from .core.errors import AlreadyInitializedError, InvalidActionResult, NotInitializedError, UnknownActionError
from .core.events import CommitChannel, CommitEvent
from .core.middleware import MiddlewarePipeline, MiddlewareSpec
from .core.state import StateCell

logger = logging.getLogger(__name__)

Subscriber = Callable[[Any, "ActionsNamespace"], None]


class ActionsNamespace:
    """
    Callable view of the action table.

    Names are resolved against the store at call time, so the namespace can be
    handed out (and captured by actions) before init() has run.
    """

    def __init__(self, store: "Store") -> None:
        self._store = store

    def __getattr__(self, name: str) -> Callable[..., "asyncio.Future[Any]"]:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    def __getitem__(self, name: str) -> Callable[..., "asyncio.Future[Any]"]:
        table = self._store._require_table()
        if name not in table:
            raise UnknownActionError(f"Unknown action: {name}", action_name=name)
        bound = functools.partial(self._store.dispatch, name)
        functools.update_wrapper(bound, table[name])
        return bound

    def __contains__(self, name: object) -> bool:
        return name in self._store._require_table()

    def __iter__(self) -> Iterator[str]:
        return iter(self._store._require_table())

    def __len__(self) -> int:
        return len(self._store._require_table())

    def __dir__(self) -> Iterable[str]:
        if self._store.initialized:
            return sorted(self._store._require_table())
        return []

    def __repr__(self) -> str:
        if not self._store.initialized:
            return "<ActionsNamespace (not initialized)>"
        return f"<ActionsNamespace {sorted(self._store._require_table())}>"


class Store:
    """
    Single-writer state container driven by actions.

    Fields:
        config: StoreConfig (logging defaults)
        actions: ActionsNamespace, valid before init() but unusable until then
    """

    def __init__(self, config: Optional[StoreConfig] = None) -> None:
        self.config = config or StoreConfig.from_env()
        self.actions = ActionsNamespace(self)
        self._table: Optional[Mapping[str, ActionFn]] = None
        self._cell: Optional[StateCell] = None
        self._dispatcher: Optional[Dispatcher] = None
        self._channel = CommitChannel()
        self._middleware = MiddlewarePipeline()
        self._toggles = LoggingToggles(
            enabled=self.config.logging_enabled,
            include_state=self.config.log_state,
        )

    @property
    def initialized(self) -> bool:
        return self._dispatcher is not None

    @property
    def state(self) -> Any:
        """Current committed state."""
        if self._cell is None:
            raise NotInitializedError("Store is not initialized; call init() first")
        return self._cell.get()

    @property
    def version(self) -> int:
        """Number of commits since init()."""
        if self._cell is None:
            raise NotInitializedError("Store is not initialized; call init() first")
        return self._cell.version

    def init(
        self,
        actions: Mapping[str, ActionFn],
        initial_state: Callable[["ActionsNamespace"], Any],
        subscriber: Optional[Subscriber] = None,
    ) -> "Store":
        """
        Register the action table and produce the initial state.

        Args:
            actions: Mapping of action name -> action function
            initial_state: Callable receiving the actions namespace, returning the initial state
            subscriber: Called as subscriber(state, actions) after every commit

        Returns:
            self

        Raises:
            AlreadyInitializedError: If called twice
            InvalidActionResult: If initial_state returns None
        """
        if self.initialized:
            raise AlreadyInitializedError("Store.init() may only be called once")
        if not callable(initial_state):
            raise TypeError("initial_state must be a callable returning the initial state")
        for name, fn in actions.items():
            if not isinstance(name, str) or not callable(fn):
                raise TypeError(f"Action {name!r} must map a string name to a callable")

        # The table is readable (not callable) while initial_state runs.
        self._table = MappingProxyType(dict(actions))
        try:
            initial = initial_state(self.actions)
            if initial is None:
                raise InvalidActionResult("initial_state returned None")
        except Exception:
            self._table = None
            raise

        self._cell = StateCell(initial, action_names=self._table.keys())
        if subscriber is not None:
            self.subscribe(lambda event: subscriber(event.state, self.actions))

        self._dispatcher = Dispatcher(
            self._table,
            self._cell,
            self._channel,
            actions=self.actions,
            middleware=self._middleware,
            toggles=self._toggles,
        )
        logger.debug("Store initialized with actions: %s", ", ".join(sorted(self._table)))
        return self

    def dispatch(self, name: str, /, *args: Any, **kwargs: Any) -> "asyncio.Future[Any]":
        """
        Call action name with user arguments.

        Before init() the call fails with NotInitializedError: as a rejected
        future when an event loop is running, raised directly otherwise.

        Returns:
            Future of the final committed state
        """
        if self._dispatcher is None:
            error = NotInitializedError(f"Action '{name}' called before Store.init()", action_name=name)
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                raise error from None
            fut = loop.create_future()
            fut.set_exception(error)
            return fut
        return self._dispatcher.dispatch(name, args, kwargs)

    def subscribe(self, listener: Callable[[CommitEvent], None]) -> Callable[[], None]:
        """
        Register a commit listener.

        Returns:
            Callable that unsubscribes the listener
        """
        return self._channel.subscribe(listener)

    def set_middlewares(self, entries: Iterable[MiddlewareSpec]) -> None:
        """Replace all middleware with entries ({"type": "pre"|"post", "method", "meta"})."""
        self._middleware.set(entries)

    def enable_logging(self, enabled: bool = True) -> None:
        self._toggles.enabled = enabled

    def enable_state_logging(self, enabled: bool = True) -> None:
        self._toggles.include_state = enabled

    async def wait_idle(self) -> None:
        """Wait until every queued action call has settled."""
        if self._dispatcher is not None:
            await self._dispatcher.queue.wait_idle()

    def _require_table(self) -> Mapping[str, ActionFn]:
        if self._table is None:
            raise NotInitializedError("Store is not initialized; call init() first")
        return self._table
