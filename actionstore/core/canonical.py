"""
Canonical, JSON-friendly rendering of state values.

Used for state snapshots in log records and for CLI output. State itself is
opaque to the engine, so anything that is not a plain container is reduced
to a printable form here rather than rejected.
"""

import dataclasses
import json
from collections.abc import Mapping
from typing import Any


def to_plain(obj: Any) -> Any:
    """
    Convert an arbitrary state value into JSON-compatible data.

    Rules:
    - mapping keys sorted and stringified
    - tuples, lists, sets and frozensets become lists (sets sorted by repr)
    - dataclass instances become dicts of their fields
    - objects with model_dump() (pydantic models) are dumped
    - other non-JSON scalars fall back to repr()
    """
    if obj is None or isinstance(obj, (bool, int, float, str)):
        return obj
    if isinstance(obj, Mapping):
        return {str(k): to_plain(obj[k]) for k in sorted(obj.keys(), key=str)}
    if isinstance(obj, (list, tuple)):
        return [to_plain(x) for x in obj]
    if isinstance(obj, (set, frozenset)):
        return [to_plain(x) for x in sorted(obj, key=repr)]
    if isinstance(obj, type):
        return repr(obj)
    if dataclasses.is_dataclass(obj):
        return {f.name: to_plain(getattr(obj, f.name)) for f in dataclasses.fields(obj)}
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        return to_plain(model_dump())
    return repr(obj)


def canonical_json_str(obj: Any, indent: Any = None) -> str:
    """
    Deterministic JSON string for display.

    Same input always renders to the same text (sorted keys, fixed separators).
    """
    if indent is None:
        return json.dumps(to_plain(obj), sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return json.dumps(to_plain(obj), sort_keys=True, indent=indent, ensure_ascii=False)
