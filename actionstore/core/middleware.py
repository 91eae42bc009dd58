"""
Middleware pipeline: pre/post hooks around every action call.

Hooks observe the call, they never write state. A hook that raises fails the
whole call with MiddlewareError.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict

from .errors import MiddlewareError

PRE = "pre"
POST = "post"

Phase = Literal["pre", "post"]


class Middleware(BaseModel):
    """
    One registered hook.

    Fields:
        type: "pre" (before the action body) or "post" (after the final commit)
        method: Callable receiving a MiddlewareContext
        meta: Opaque value handed to method unchanged on every call
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    type: Phase
    method: Callable[..., Any]
    meta: Any = None

    @property
    def phase(self) -> str:
        return self.type


@dataclass(frozen=True)
class MiddlewareContext:
    """
    What a hook sees.

    Fields:
        state: Accessor returning the current committed state
        name: Action name
        args: Positional user arguments (the injected context excluded)
        kwargs: Keyword user arguments
        meta: The hook's own meta
    """
    state: Callable[[], Any]
    name: str
    args: Tuple[Any, ...] = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)
    meta: Any = None


MiddlewareSpec = Union[Middleware, Mapping[str, Any]]


class MiddlewarePipeline:
    """Ordered list of hooks, replaced wholesale by set()."""

    def __init__(self, entries: Iterable[MiddlewareSpec] = ()) -> None:
        self._entries: Tuple[Middleware, ...] = ()
        self.set(entries)

    def __len__(self) -> int:
        return len(self._entries)

    def set(self, entries: Iterable[MiddlewareSpec]) -> None:
        """
        Replace all hooks.

        Mappings are validated into Middleware ({"type", "method", "meta"}).

        Raises:
            pydantic.ValidationError: If an entry has an unknown type or a non-callable method
        """
        validated: List[Middleware] = []
        for entry in entries:
            if isinstance(entry, Middleware):
                validated.append(entry)
            else:
                validated.append(Middleware.model_validate(dict(entry)))
        self._entries = tuple(validated)

    def entries(self, phase: str) -> Tuple[Middleware, ...]:
        return tuple(m for m in self._entries if m.type == phase)

    def run_phase(
        self,
        phase: str,
        state: Callable[[], Any],
        name: str,
        args: Tuple[Any, ...] = (),
        kwargs: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Call every hook of phase in registration order.

        Raises:
            MiddlewareError: On the first hook that raises (later hooks do not run)
        """
        kwargs = dict(kwargs or {})
        for index, entry in enumerate(self.entries(phase)):
            ctx = MiddlewareContext(state=state, name=name, args=tuple(args), kwargs=kwargs, meta=entry.meta)
            try:
                entry.method(ctx)
            except Exception as e:
                raise MiddlewareError(
                    f"{phase} middleware #{index} failed for action '{name}': {e!r}",
                    action_name=name,
                    phase=phase,
                ) from e
