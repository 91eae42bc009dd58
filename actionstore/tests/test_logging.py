"""
Tests for per-call log records and structured logging setup.
"""

import io
import json
import logging

import pytest

from actionstore.core.errors import ActionExecutionError
from actionstore.observability.logging_config import get_logger, setup_logging

DISPATCH_LOGGER = "actionstore.core.dispatcher"


def increment(ctx, n=1):
    return {"count": ctx.state()["count"] + n}


def fail(ctx):
    raise RuntimeError("boom")


def call_records(caplog):
    return [r for r in caplog.records if r.name == DISPATCH_LOGGER]


@pytest.mark.asyncio
async def test_no_call_records_when_logging_disabled(store, caplog):
    """No call record is emitted while logging is off."""
    caplog.set_level(logging.INFO, logger=DISPATCH_LOGGER)
    store.init({"increment": increment}, lambda actions: {"count": 0})

    await store.actions.increment()
    assert call_records(caplog) == []


@pytest.mark.asyncio
async def test_call_record_fields(store, caplog):
    """A call record carries the action name, arguments and outcome."""
    caplog.set_level(logging.INFO, logger=DISPATCH_LOGGER)
    store.init({"increment": increment}, lambda actions: {"count": 0})
    store.enable_logging()

    await store.actions.increment(5)

    [record] = call_records(caplog)
    assert record.levelno == logging.INFO
    assert record.action == "increment"
    assert record.action_args == [5]
    assert record.action_kwargs == {}
    assert record.outcome == "ok"
    assert record.commits == 1
    assert record.trace_id == record.call_id
    assert not hasattr(record, "prev_state")


@pytest.mark.asyncio
async def test_call_record_state_snapshots(store, caplog):
    """State logging adds prev and next state to the record."""
    caplog.set_level(logging.INFO, logger=DISPATCH_LOGGER)
    store.init({"increment": increment}, lambda actions: {"count": 0})
    store.enable_logging()
    store.enable_state_logging()

    await store.actions.increment(2)

    [record] = call_records(caplog)
    assert record.prev_state == {"count": 0}
    assert record.next_state == {"count": 2}


@pytest.mark.asyncio
async def test_failed_call_logged_as_warning(store, caplog):
    """A failed call is logged at WARNING with its error."""
    caplog.set_level(logging.INFO, logger=DISPATCH_LOGGER)
    store.init({"fail": fail}, lambda actions: {"count": 0})
    store.enable_logging()

    with pytest.raises(ActionExecutionError):
        await store.actions.fail()

    [record] = call_records(caplog)
    assert record.levelno == logging.WARNING
    assert record.outcome == "error"
    assert record.commits == 0


@pytest.mark.asyncio
async def test_logging_can_be_switched_off_again(store, caplog):
    """Turning logging off stops further call records."""
    caplog.set_level(logging.INFO, logger=DISPATCH_LOGGER)
    store.init({"increment": increment}, lambda actions: {"count": 0})
    store.enable_logging()
    await store.actions.increment()
    store.enable_logging(False)
    await store.actions.increment()

    assert len(call_records(caplog)) == 1


def test_setup_logging_json(monkeypatch, restore_root_logger):
    """JSON format emits one parseable line with trace_id and bound fields."""
    monkeypatch.setenv("ACTIONSTORE_LOG_FORMAT", "json")
    monkeypatch.setenv("ACTIONSTORE_LOG_LEVEL", "INFO")
    stream = io.StringIO()
    setup_logging(stream=stream)

    get_logger("actionstore.test", trace_id="call-9", action="increment").info("settled")

    line = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert line["message"] == "settled"
    assert line["level"] == "INFO"
    assert line["logger"] == "actionstore.test"
    assert line["trace_id"] == "call-9"
    assert line["action"] == "increment"


def test_setup_logging_text_defaults_trace_id(monkeypatch, restore_root_logger):
    """Records without a trace id render N/A in text format."""
    monkeypatch.setenv("ACTIONSTORE_LOG_FORMAT", "text")
    stream = io.StringIO()
    setup_logging(stream=stream)

    logging.getLogger("actionstore.other").warning("plain record")

    output = stream.getvalue()
    assert "plain record" in output
    assert "[trace_id=N/A]" in output
