"""
Commit events and the channel that carries them to listeners.

Every commit produces exactly one CommitEvent. The subscriber passed to
Store.init() is just one listener on the channel.
"""

from dataclasses import dataclass
from typing import Any, Callable, List

from .errors import SubscriberError

Listener = Callable[["CommitEvent"], None]


@dataclass(frozen=True)
class CommitEvent:
    """
    Immutable record of one state commit.

    Fields:
        call_id: Identifier of the action call that produced the commit
        action: Action name
        index: Position of this commit within its call (0-based)
        version: State cell version after the commit
        state: The committed state
    """
    call_id: str
    action: str
    index: int
    version: int
    state: Any


class CommitChannel:
    """
    Synchronous fan-out of commit events.

    Listeners run in subscription order, inside the commit step, before the
    action is allowed to produce its next value.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: CommitEvent) -> None:
        """
        Deliver event to every listener.

        Raises:
            SubscriberError: If a listener raises (remaining listeners are skipped)
        """
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                raise SubscriberError(
                    f"Commit listener failed for action '{event.action}': {e}",
                    action_name=event.action,
                ) from e


class CommitRecorder:
    """
    Listener that keeps every event it receives.

    Usage:
        recorder = CommitRecorder()
        store.subscribe(recorder)
        await store.actions.increment()
        recorder.states  # [{"count": 1}]
    """

    def __init__(self) -> None:
        self.events: List[CommitEvent] = []

    def __call__(self, event: CommitEvent) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)

    @property
    def states(self) -> List[Any]:
        return [ev.state for ev in self.events]

    def for_call(self, call_id: str) -> List[CommitEvent]:
        return [ev for ev in self.events if ev.call_id == call_id]
