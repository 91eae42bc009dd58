"""
Tests for the actionstore CLI (run, inspect, version).
"""

import json

import pytest
from typer.testing import CliRunner

from actionstore.cli._loader import describe_action, parse_call
from actionstore.cli.main import app

APP_MODULE = "actionstore.tests.counter_app"

runner = CliRunner()


def test_parse_call_forms():
    """Call strings parse into a name and positional arguments."""
    assert parse_call("reset") == ("reset", ())
    assert parse_call("increment:5") == ("increment", (5,))
    assert parse_call("add:[1, 2]") == ("add", (1, 2))
    assert parse_call('set:{"count": 3}') == ("set", ({"count": 3},))


def test_parse_call_rejects_bad_input():
    """A missing name or malformed JSON argument is rejected."""
    with pytest.raises(ValueError):
        parse_call(":5")
    with pytest.raises(ValueError):
        parse_call("increment:{bad")


def test_describe_action_shapes():
    """Action functions are described by the result shape they produce."""
    from actionstore.tests import counter_app

    assert describe_action(counter_app.increment) == "function"
    assert describe_action(counter_app.add_later) == "coroutine"
    assert describe_action(counter_app.count_up) == "generator"
    assert describe_action(counter_app.count_down) == "async generator"


def test_run_json_commits_in_call_order():
    """Commits appear in call order with increasing versions."""
    result = runner.invoke(app, ["run", APP_MODULE, "increment:5", "count_up", "add_later:[2]", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["success"] is True
    assert data["initial_state"] == {"count": 0}
    assert [c["state"]["count"] for c in data["commits"]] == [5, 6, 7, 8, 10]
    assert [c["version"] for c in data["commits"]] == [1, 2, 3, 4, 5]
    assert [c["ok"] for c in data["calls"]] == [True, True, True]
    assert data["calls"][1]["state"] == {"count": 8}
    assert data["final_state"] == {"count": 10}


def test_run_reports_failed_call_and_continues():
    """A failing call is reported and later calls still run."""
    result = runner.invoke(app, ["run", APP_MODULE, "increment", "fail", "increment", "--json"])

    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert data["success"] is False
    assert data["calls"][1]["ok"] is False
    assert "ActionExecutionError" in data["calls"][1]["error"]
    assert data["final_state"] == {"count": 2}


def test_run_unknown_action_fails_call():
    """An unknown action name fails only that call."""
    result = runner.invoke(app, ["run", APP_MODULE, "nope", "--json"])

    assert result.exit_code == 1
    data = json.loads(result.stdout)
    assert "UnknownActionError" in data["calls"][0]["error"]


def test_run_rich_output():
    """Rich output shows the commit table and final state."""
    result = runner.invoke(app, ["run", APP_MODULE, "count_down:1"])

    assert result.exit_code == 0, result.output
    assert "Commits" in result.stdout
    assert "Final state" in result.stdout


def test_run_missing_module():
    """An unimportable module exits with code 2."""
    result = runner.invoke(app, ["run", "actionstore.tests.does_not_exist", "--json"])

    assert result.exit_code == 2
    assert "error" in json.loads(result.stdout)


def test_run_bad_call_argument():
    """A malformed call argument exits with code 2."""
    result = runner.invoke(app, ["run", APP_MODULE, "increment:{bad", "--json"])

    assert result.exit_code == 2


def test_run_logging_enabled_from_env(restore_root_logger):
    """ACTIONSTORE_LOGGING turns on call records without --log."""
    env = {"ACTIONSTORE_LOGGING": "1", "ACTIONSTORE_LOG_LEVEL": "INFO", "ACTIONSTORE_LOG_FORMAT": "json"}
    result = runner.invoke(app, ["run", APP_MODULE, "increment"], env=env)

    assert result.exit_code == 0, result.output
    assert "Action increment committed 1 state(s)" in result.output
    assert "next_state" not in result.output


def test_run_state_logging_enabled_from_env(restore_root_logger):
    """ACTIONSTORE_LOG_STATE alone logs calls with state snapshots."""
    env = {"ACTIONSTORE_LOG_STATE": "1", "ACTIONSTORE_LOG_LEVEL": "INFO", "ACTIONSTORE_LOG_FORMAT": "json"}
    result = runner.invoke(app, ["run", APP_MODULE, "increment"], env=env)

    assert result.exit_code == 0, result.output
    assert "Action increment committed 1 state(s)" in result.output
    assert "next_state" in result.output


def test_run_bad_metrics_port_env():
    """An unparsable ACTIONSTORE_METRICS_PORT is a usage error, not a traceback."""
    result = runner.invoke(app, ["run", APP_MODULE, "increment", "--json"], env={"ACTIONSTORE_METRICS_PORT": "http"})

    assert result.exit_code == 2
    assert "error" in json.loads(result.stdout)


def test_run_from_file(tmp_path):
    """A store module can be loaded from a .py file path."""
    path = tmp_path / "toggle_store.py"
    path.write_text(
        "def toggle(ctx):\n"
        "    return {'on': not ctx.state()['on']}\n"
        "\n"
        "actions = {'toggle': toggle}\n"
        "\n"
        "def initial_state(actions):\n"
        "    return {'on': False}\n"
    )

    result = runner.invoke(app, ["run", str(path), "toggle", "toggle", "toggle", "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["final_state"] == {"on": True}


def test_run_module_without_actions(tmp_path):
    """A module without an actions mapping is rejected."""
    path = tmp_path / "empty_store.py"
    path.write_text("value = 1\n")

    result = runner.invoke(app, ["run", str(path), "--json"])

    assert result.exit_code == 2
    assert "actions" in json.loads(result.stdout)["error"]


def test_inspect_json():
    """Inspect lists action shapes, middleware count and initial state."""
    result = runner.invoke(app, ["inspect", APP_MODULE, "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    shapes = {row["name"]: row["shape"] for row in data["actions"]}
    assert shapes == {
        "add_later": "coroutine",
        "count_down": "async generator",
        "count_up": "generator",
        "fail": "function",
        "increment": "function",
    }
    assert data["initial_state"] == {"count": 0}
    assert data["middlewares"] == 1


def test_inspect_rich_output():
    """Inspect renders an action table and the initial state."""
    result = runner.invoke(app, ["inspect", APP_MODULE])

    assert result.exit_code == 0, result.output
    assert "increment" in result.stdout
    assert "Initial state" in result.stdout


def test_version():
    """Version command names the package."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert "actionstore" in result.stdout
