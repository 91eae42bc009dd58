"""
Loading of store definitions for the CLI.

A store module defines:
    actions        mapping of action name -> action function
    initial_state  callable(actions) -> initial state
    middlewares    optional list of middleware entries
"""

import importlib
import importlib.util
import inspect
import json
import os
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, List, Mapping, Tuple


class AppLoadError(Exception):
    """Raised when a store module cannot be loaded or is incomplete."""
    pass


@dataclass(frozen=True)
class StoreApp:
    module: str
    actions: Mapping[str, Callable[..., Any]]
    initial_state: Callable[..., Any]
    middlewares: List[Any] = field(default_factory=list)


def _import(target: str) -> ModuleType:
    if target.endswith(".py") or os.path.sep in target:
        if not os.path.isfile(target):
            raise AppLoadError(f"File not found: {target}")
        name = os.path.splitext(os.path.basename(target))[0]
        spec = importlib.util.spec_from_file_location(name, target)
        if spec is None or spec.loader is None:
            raise AppLoadError(f"Cannot load {target}")
        module = importlib.util.module_from_spec(spec)
        spec.loader.exec_module(module)
        return module
    try:
        return importlib.import_module(target)
    except ImportError as e:
        raise AppLoadError(f"Cannot import {target}: {e}") from e


def load_app(target: str) -> StoreApp:
    """
    Load a store definition from a module path or a .py file.

    Raises:
        AppLoadError: If the module is missing or lacks actions/initial_state
    """
    module = _import(target)
    actions = getattr(module, "actions", None)
    initial_state = getattr(module, "initial_state", None)
    if not isinstance(actions, Mapping):
        raise AppLoadError(f"{target} does not define an 'actions' mapping")
    if not callable(initial_state):
        raise AppLoadError(f"{target} does not define a callable 'initial_state'")
    return StoreApp(
        module=target,
        actions=actions,
        initial_state=initial_state,
        middlewares=list(getattr(module, "middlewares", None) or []),
    )


def parse_call(text: str) -> Tuple[str, Tuple[Any, ...]]:
    """
    Parse "name" or "name:JSON" into (name, args).

    A JSON list is spread into positional args, any other JSON value is the
    single argument.

    Examples:
        parse_call("reset")         -> ("reset", ())
        parse_call("increment:5")   -> ("increment", (5,))
        parse_call("add:[1, 2]")    -> ("add", (1, 2))
    """
    name, sep, raw = text.partition(":")
    name = name.strip()
    if not name:
        raise ValueError(f"Invalid call (missing action name): {text!r}")
    if not sep:
        return name, ()
    value = json.loads(raw)
    if isinstance(value, list):
        return name, tuple(value)
    return name, (value,)


def describe_action(fn: Callable[..., Any]) -> str:
    """Declared shape of an action function."""
    if inspect.isasyncgenfunction(fn):
        return "async generator"
    if inspect.isgeneratorfunction(fn):
        return "generator"
    if inspect.iscoroutinefunction(fn):
        return "coroutine"
    return "function"
