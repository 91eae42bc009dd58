"""
Core action execution primitives.

This module provides the building blocks of the store:
- StateCell: Owner of the current state
- CommitEvent / CommitChannel: One event per commit, fanned out to listeners
- classify / drain: Normalization of action results into state sequences
- ExecutionQueue: Strict FIFO, one active call at a time
- MiddlewarePipeline: Pre/post hooks
- Dispatcher: The pipeline that ties them together
"""

from .state import StateCell
from .events import CommitEvent, CommitChannel, CommitRecorder
from .normalize import ResultKind, classify, drain
from .queue import ExecutionQueue, QueueEntry
from .middleware import Middleware, MiddlewareContext, MiddlewarePipeline, PRE, POST
from .dispatcher import ActionCall, ActionContext, Dispatcher, LoggingToggles
from .canonical import to_plain, canonical_json_str
from .errors import (
    ActionStoreError,
    NotInitializedError,
    AlreadyInitializedError,
    UnknownActionError,
    InvalidActionResult,
    ActionExecutionError,
    MiddlewareError,
    SubscriberError,
)

__all__ = [
    "StateCell",
    "CommitEvent",
    "CommitChannel",
    "CommitRecorder",
    "ResultKind",
    "classify",
    "drain",
    "ExecutionQueue",
    "QueueEntry",
    "Middleware",
    "MiddlewareContext",
    "MiddlewarePipeline",
    "PRE",
    "POST",
    "ActionCall",
    "ActionContext",
    "Dispatcher",
    "LoggingToggles",
    "to_plain",
    "canonical_json_str",
    "ActionStoreError",
    "NotInitializedError",
    "AlreadyInitializedError",
    "UnknownActionError",
    "InvalidActionResult",
    "ActionExecutionError",
    "MiddlewareError",
    "SubscriberError",
]
