"""
Run command: execute action calls against a store module
"""

import asyncio
import json
import sys
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import typer
from rich.console import Console
from rich.table import Table

from ...config import StoreConfig
from ...core.canonical import canonical_json_str, to_plain
from ...core.errors import ActionStoreError
from ...core.events import CommitEvent, CommitRecorder
from ...observability.logging_config import setup_logging
from ...observability.metrics import start_metrics_server
from ...store import Store
from .._loader import AppLoadError, StoreApp, load_app, parse_call

console = Console()


@dataclass
class RunReport:
    initial_state: Any
    results: List[Any]
    commits: List[CommitEvent]
    final_state: Any

    @property
    def failures(self) -> int:
        return sum(1 for r in self.results if isinstance(r, BaseException))


async def execute_calls(
    app: StoreApp,
    calls: List[Tuple[str, Tuple[Any, ...]]],
    config: Optional[StoreConfig] = None,
) -> RunReport:
    """
    Initialize a fresh store from app and fire all calls at once.

    Calls are queued in the order given and settle in that order. Logging
    defaults come from config (environment when omitted).
    """
    store = Store(config=config)
    store.set_middlewares(app.middlewares)
    store.init(app.actions, app.initial_state)

    recorder = CommitRecorder()
    store.subscribe(recorder)
    initial = store.state

    futures = [store.dispatch(name, *args) for name, args in calls]
    results = await asyncio.gather(*futures, return_exceptions=True)
    return RunReport(initial_state=initial, results=list(results), commits=recorder.events, final_state=store.state)


def _print_report(calls: List[str], report: RunReport) -> None:
    table = Table(title="Commits")
    table.add_column("Version", style="cyan", justify="right")
    table.add_column("Call", style="dim")
    table.add_column("Action", style="green")
    table.add_column("State", style="yellow")
    for ev in report.commits:
        table.add_row(str(ev.version), ev.call_id, ev.action, canonical_json_str(ev.state))
    console.print(table)

    for call, result in zip(calls, report.results):
        if isinstance(result, BaseException):
            console.print(f"[red]✗ {call}:[/red] {type(result).__name__}: {result}")
        else:
            console.print(f"[green]✓ {call}[/green]")

    console.print(f"\n[bold]Final state:[/bold] {canonical_json_str(report.final_state)}")


def _report_json(calls: List[str], report: RunReport) -> dict:
    return {
        "success": report.failures == 0,
        "initial_state": to_plain(report.initial_state),
        "commits": [
            {"version": ev.version, "call_id": ev.call_id, "action": ev.action, "state": to_plain(ev.state)}
            for ev in report.commits
        ],
        "calls": [
            {"call": call, "ok": False, "error": f"{type(result).__name__}: {result}"}
            if isinstance(result, BaseException)
            else {"call": call, "ok": True, "state": to_plain(result)}
            for call, result in zip(calls, report.results)
        ],
        "final_state": to_plain(report.final_state),
    }


def run_command(
    module: str = typer.Argument(..., help="Module path or .py file defining `actions` and `initial_state`"),
    calls: Optional[List[str]] = typer.Argument(None, help="Action calls: name or name:JSON"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
    log: bool = typer.Option(False, "--log", help="Log every action call (to stderr)"),
    log_state: bool = typer.Option(False, "--log-state", help="Include state snapshots in log records"),
):
    """
    Run action calls against a fresh store.

    Examples:
        actionstore run myapp.store increment:5 increment
        actionstore run ./counter.py "add:[1, 2]" --json
    """
    calls = calls or []
    try:
        app = load_app(module)
        parsed = [parse_call(c) for c in calls]
        config = StoreConfig.from_env()
    except (AppLoadError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    # Flags add to the ACTIONSTORE_LOGGING / ACTIONSTORE_LOG_STATE defaults.
    config.log_state = config.log_state or log_state
    config.logging_enabled = config.logging_enabled or log or config.log_state
    if config.logging_enabled:
        setup_logging(stream=sys.stderr)
    start_metrics_server(config.metrics_enabled, config.metrics_port)

    try:
        report = asyncio.run(execute_calls(app, parsed, config))
    except (ActionStoreError, TypeError, ValueError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error initializing store:[/red] {e}")
        raise typer.Exit(2)

    if json_output:
        print(json.dumps(_report_json(calls, report), indent=2))
    else:
        _print_report(calls, report)

    raise typer.Exit(1 if report.failures else 0)
