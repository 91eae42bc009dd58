"""
State cell: the single owner of the current state value.

The cell is written only by the dispatcher's commit step. Everything else
reads it through get().
"""

from typing import Any, FrozenSet, Iterable


class StateCell:
    """
    Holder of the current committed state.

    Fields:
        version: Number of commits applied so far (0 = initial state)
        action_names: Names of the registered actions

    State values are replaced wholesale, never mutated in place.
    """

    def __init__(self, initial: Any, action_names: Iterable[str] = ()) -> None:
        self._value = initial
        self._version = 0
        self._action_names: FrozenSet[str] = frozenset(action_names)

    @property
    def version(self) -> int:
        return self._version

    @property
    def action_names(self) -> FrozenSet[str]:
        return self._action_names

    def get(self) -> Any:
        """Return the current committed state."""
        return self._value

    def commit(self, value: Any) -> int:
        """
        Replace the current state.

        Args:
            value: New state (must not be None)

        Returns:
            Version number of the new state
        """
        if value is None:
            raise ValueError("StateCell cannot hold None")
        self._value = value
        self._version += 1
        return self._version
