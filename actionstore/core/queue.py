"""
Execution queue: strict FIFO serializer for action work.

At most one entry is active at any time. An entry is promoted only after the
previous active entry has fully settled, whether it succeeded or failed.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Deque, Optional, Set

logger = logging.getLogger(__name__)

Work = Callable[[], Awaitable[Any]]


@dataclass
class QueueEntry:
    """
    One queued unit of work.

    Fields:
        label: Human-readable label (call id) for logs and introspection
        work: Zero-argument callable returning an awaitable
        future: Settled with the work's result or exception
    """
    label: str
    work: Work
    future: "asyncio.Future[Any]"


class ExecutionQueue:
    """
    Single-slot FIFO executor on the running event loop.

    Usage:
        queue = ExecutionQueue()
        fut = queue.enqueue(lambda: do_work(), label="call-1")
        result = await fut
    """

    def __init__(self) -> None:
        self._waiting: Deque[QueueEntry] = deque()
        self._active: Optional[QueueEntry] = None
        self._tasks: Set["asyncio.Task[None]"] = set()
        self._idle: Optional[asyncio.Event] = None

    @property
    def active(self) -> Optional[str]:
        """Label of the active entry, or None."""
        return self._active.label if self._active is not None else None

    @property
    def pending(self) -> int:
        """Number of entries waiting or active."""
        return len(self._waiting) + (1 if self._active is not None else 0)

    @property
    def idle(self) -> bool:
        return self._active is None and not self._waiting

    def enqueue(self, work: Work, label: str = "") -> "asyncio.Future[Any]":
        """
        Queue work behind every entry enqueued before it.

        Must be called with a running event loop.

        Returns:
            Future settled with the work's result (or exception)
        """
        loop = asyncio.get_running_loop()
        entry = QueueEntry(label=label, work=work, future=loop.create_future())
        self._waiting.append(entry)
        if self._active is None:
            self._promote()
        else:
            logger.debug("Queued %s behind %s (%d waiting)", label, self._active.label, len(self._waiting))
        return entry.future

    async def wait_idle(self) -> None:
        """Wait until no entry is active or waiting."""
        if self.idle:
            return
        if self._idle is None:
            self._idle = asyncio.Event()
        await self._idle.wait()

    def _promote(self) -> None:
        if not self._waiting:
            self._active = None
            if self._idle is not None:
                # Waiters are woken; the next wait gets an event on its own loop.
                self._idle.set()
                self._idle = None
            return

        entry = self._waiting.popleft()
        self._active = entry
        logger.debug("Promoted %s", entry.label)
        task = asyncio.ensure_future(self._execute(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _execute(self, entry: QueueEntry) -> None:
        try:
            result = await entry.work()
        except asyncio.CancelledError:
            if not entry.future.done():
                entry.future.cancel()
            raise
        except Exception as e:
            # A caller may have cancelled its future; the work still ran to the end.
            if not entry.future.done():
                entry.future.set_exception(e)
        else:
            if not entry.future.done():
                entry.future.set_result(result)
        finally:
            self._active = None
            self._promote()
