"""
Dispatcher: runs one action call through the whole pipeline.

For every call:
    1. pre middleware
    2. action body, called with ActionContext(state, actions) + user args
    3. normalized results committed one by one (cell write, then channel publish)
    4. post middleware
    5. future resolved with the final committed state

On failure remaining commits are skipped, post middleware is skipped, and the
future is rejected. Commits already made stay in effect.
"""

import asyncio
import itertools
import time
from contextlib import aclosing
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from ..observability.logging_config import get_logger
from ..observability.metrics import set_queue_depth, track_action, track_action_duration, track_commit
from .canonical import to_plain
from .errors import ActionExecutionError, ActionStoreError, UnknownActionError
from .events import CommitChannel, CommitEvent
from .middleware import POST, PRE, MiddlewarePipeline
from .normalize import drain
from .queue import ExecutionQueue
from .state import StateCell

ActionFn = Callable[..., Any]


@dataclass(frozen=True)
class ActionCall:
    """
    One invocation of an action.

    Fields:
        call_id: Unique id within the dispatcher ("call-1", "call-2", ...)
        name: Action name
        args: Positional user arguments
        kwargs: Keyword user arguments
    """
    call_id: str
    name: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ActionContext:
    """
    First argument of every action function.

    state() returns the latest committed state; actions is the public
    actions namespace, so actions can trigger other actions.
    """
    state: Callable[[], Any]
    actions: Any


@dataclass
class LoggingToggles:
    """Mutable switches read by the dispatcher on every call."""
    enabled: bool = False
    include_state: bool = False


class Dispatcher:
    """
    Wires state cell, queue, normalizer, middleware and commit channel together.

    Usage:
        dispatcher = Dispatcher(table, cell, channel, actions=namespace)
        final_state = await dispatcher.dispatch("increment", (5,))
    """

    def __init__(
        self,
        table: Mapping[str, ActionFn],
        cell: StateCell,
        channel: CommitChannel,
        actions: Any = None,
        middleware: Optional[MiddlewarePipeline] = None,
        queue: Optional[ExecutionQueue] = None,
        toggles: Optional[LoggingToggles] = None,
    ) -> None:
        self._table = table
        self._cell = cell
        self._channel = channel
        self._actions = actions
        self._middleware = middleware if middleware is not None else MiddlewarePipeline()
        self._queue = queue if queue is not None else ExecutionQueue()
        self._toggles = toggles if toggles is not None else LoggingToggles()
        self._ids = itertools.count(1)

    @property
    def queue(self) -> ExecutionQueue:
        return self._queue

    def dispatch(
        self,
        name: str,
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> "asyncio.Future[Any]":
        """
        Queue one call of action name.

        Must be called with a running event loop.

        Returns:
            Future resolved with the final committed state, or rejected with
            an ActionStoreError subclass
        """
        call = ActionCall(
            call_id=f"call-{next(self._ids)}",
            name=name,
            args=tuple(args),
            kwargs=dict(kwargs or {}),
        )

        if name not in self._table:
            fut = asyncio.get_running_loop().create_future()
            fut.set_exception(UnknownActionError(f"Unknown action: {name}", action_name=name))
            return fut

        fut = self._queue.enqueue(lambda: self._run(call), label=call.call_id)
        set_queue_depth(self._queue.pending)
        return fut

    async def _run(self, call: ActionCall) -> Any:
        prev_state = self._cell.get()
        started = time.perf_counter()
        commits = 0
        try:
            with track_action_duration(call.name):
                self._middleware.run_phase(PRE, self._cell.get, call.name, call.args, call.kwargs)

                result = self._invoke(call)
                async with aclosing(drain(result, call.name)) as states:
                    async for value in states:
                        self._commit(call, commits, value)
                        commits += 1

                self._middleware.run_phase(POST, self._cell.get, call.name, call.args, call.kwargs)
        except Exception as e:
            track_action(call.name, "error")
            self._log_call(call, commits, started, prev_state, error=e)
            raise
        finally:
            # This call is about to leave the queue.
            set_queue_depth(self._queue.pending - 1)

        track_action(call.name, "ok")
        self._log_call(call, commits, started, prev_state)
        return self._cell.get()

    def _invoke(self, call: ActionCall) -> Any:
        fn = self._table[call.name]
        ctx = ActionContext(state=self._cell.get, actions=self._actions)
        try:
            return fn(ctx, *call.args, **call.kwargs)
        except ActionStoreError:
            raise
        except Exception as e:
            raise ActionExecutionError(
                f"Action '{call.name}' failed: {e!r}", action_name=call.name
            ) from e

    def _commit(self, call: ActionCall, index: int, value: Any) -> None:
        version = self._cell.commit(value)
        track_commit(call.name)
        self._channel.publish(
            CommitEvent(call_id=call.call_id, action=call.name, index=index, version=version, state=value)
        )

    def _log_call(
        self,
        call: ActionCall,
        commits: int,
        started: float,
        prev_state: Any,
        error: Optional[BaseException] = None,
    ) -> None:
        if not self._toggles.enabled:
            return

        fields: Dict[str, Any] = {
            "action": call.name,
            "call_id": call.call_id,
            "action_args": to_plain(call.args),
            "action_kwargs": to_plain(call.kwargs),
            "outcome": "error" if error is not None else "ok",
            "commits": commits,
            "duration_ms": round((time.perf_counter() - started) * 1000, 3),
        }
        if self._toggles.include_state:
            fields["prev_state"] = to_plain(prev_state)
            fields["next_state"] = to_plain(self._cell.get())

        logger = get_logger(__name__, trace_id=call.call_id, **fields)
        if error is not None:
            logger.warning("Action %s failed after %d commit(s): %r", call.name, commits, error)
        else:
            logger.info("Action %s committed %d state(s)", call.name, commits)
