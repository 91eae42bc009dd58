"""
Action normalizer.

Turns whatever an action function returned into one lazy, uniform sequence
of states to commit. Four shapes are recognised, checked in this order:

    ASYNC_ITERATOR  async generators and other async iterators
    ITERATOR        generators and other iterators (not plain iterables)
    AWAITABLE       coroutines, futures, anything with __await__
    VALUE           everything else

The sequence is lazy: the next step of a (async) generator is only requested
after the consumer has committed the previous value, so code inside the
generator that calls state() sees the value it just yielded.
"""

import inspect
from collections.abc import AsyncGenerator, AsyncIterator, Generator, Iterator
from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncIterator as AsyncIteratorT, Callable, Dict

from .errors import ActionExecutionError, ActionStoreError, InvalidActionResult


class ResultKind(str, Enum):
    ASYNC_ITERATOR = "async_iterator"
    ITERATOR = "iterator"
    AWAITABLE = "awaitable"
    VALUE = "value"


def classify(result: Any) -> ResultKind:
    """
    Classify an action's raw return value by capability.

    Dicts, lists and strings are iterables but not iterators, so they are
    plain values.
    """
    if isinstance(result, AsyncIterator):
        return ResultKind.ASYNC_ITERATOR
    if isinstance(result, Iterator):
        return ResultKind.ITERATOR
    if inspect.isawaitable(result):
        return ResultKind.AWAITABLE
    return ResultKind.VALUE


async def _from_async_iterator(it: Any) -> AsyncIteratorT[Any]:
    is_gen = isinstance(it, AsyncGenerator)
    sent = None
    error = None
    try:
        while True:
            try:
                if error is not None:
                    pending, error = error, None
                    value = await it.athrow(pending)
                elif is_gen:
                    value = await it.asend(sent)
                else:
                    value = await it.__anext__()
            except StopAsyncIteration as stop:
                # Async generators cannot return a value, hand-written
                # iterators may still pass one through StopAsyncIteration.
                if stop.args and stop.args[0] is not None:
                    yield stop.args[0]
                return

            if inspect.isawaitable(value):
                try:
                    value = await value
                except Exception as e:
                    if not is_gen:
                        raise
                    error = e
                    continue

            yield value
            sent = value
    finally:
        if is_gen:
            await it.aclose()


async def _from_iterator(it: Any) -> AsyncIteratorT[Any]:
    is_gen = isinstance(it, Generator)
    sent = None
    error = None
    try:
        while True:
            try:
                if error is not None:
                    pending, error = error, None
                    step = it.throw(pending)
                elif is_gen:
                    step = it.send(sent)
                else:
                    step = next(it)
            except StopIteration as stop:
                if stop.value is not None:
                    yield stop.value
                return

            if inspect.isawaitable(step):
                try:
                    step = await step
                except Exception as e:
                    # Plain iterators have no throw(); the failure ends the sequence.
                    if not is_gen:
                        raise
                    error = e
                    continue

            yield step
            sent = step
    finally:
        if is_gen:
            it.close()


async def _from_awaitable(aw: Any) -> AsyncIteratorT[Any]:
    yield await aw


async def _from_value(value: Any) -> AsyncIteratorT[Any]:
    yield value


_SOURCES: Dict[ResultKind, Callable[[Any], AsyncIteratorT[Any]]] = {
    ResultKind.ASYNC_ITERATOR: _from_async_iterator,
    ResultKind.ITERATOR: _from_iterator,
    ResultKind.AWAITABLE: _from_awaitable,
    ResultKind.VALUE: _from_value,
}


async def drain(result: Any, action_name: str) -> AsyncIteratorT[Any]:
    """
    Yield the states an action result produces, one at a time.

    Args:
        result: Raw return value of the action function
        action_name: Used in error messages

    Yields:
        Each state to commit, in order

    Raises:
        InvalidActionResult: If the result (or a step) is None, or nothing was produced
        ActionExecutionError: If a step raised (original exception as __cause__)
    """
    if result is None:
        raise InvalidActionResult(f"Action '{action_name}' returned None", action_name=action_name)

    emitted = 0
    async with aclosing(_SOURCES[classify(result)](result)) as steps:
        while True:
            try:
                value = await steps.__anext__()
            except StopAsyncIteration:
                break
            except ActionStoreError:
                raise
            except Exception as e:
                raise ActionExecutionError(
                    f"Action '{action_name}' failed: {e!r}", action_name=action_name
                ) from e

            if value is None:
                raise InvalidActionResult(
                    f"Action '{action_name}' produced None at step {emitted}",
                    action_name=action_name,
                )
            emitted += 1
            yield value

    if emitted == 0:
        raise InvalidActionResult(f"Action '{action_name}' produced no state", action_name=action_name)
