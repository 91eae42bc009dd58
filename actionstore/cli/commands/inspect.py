"""
Inspect command: list the actions of a store module
"""

import json

import typer
from rich.console import Console
from rich.table import Table

from ...core.canonical import canonical_json_str, to_plain
from ...core.errors import ActionStoreError
from ...store import Store
from .._loader import AppLoadError, describe_action, load_app

console = Console()


def inspect_command(
    module: str = typer.Argument(..., help="Module path or .py file defining `actions` and `initial_state`"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Show the actions a store module defines and its initial state.

    Examples:
        actionstore inspect myapp.store
        actionstore inspect ./counter.py --json
    """
    try:
        app = load_app(module)
        store = Store().init(app.actions, app.initial_state)
    except (AppLoadError, ActionStoreError, TypeError) as e:
        if json_output:
            print(json.dumps({"error": str(e)}))
        else:
            console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    rows = []
    for name in sorted(app.actions):
        fn = app.actions[name]
        doc = (fn.__doc__ or "").strip().splitlines()
        rows.append({"name": name, "shape": describe_action(fn), "doc": doc[0] if doc else ""})

    if json_output:
        print(json.dumps({
            "module": module,
            "actions": rows,
            "middlewares": len(app.middlewares),
            "initial_state": to_plain(store.state),
        }, indent=2))
        raise typer.Exit(0)

    table = Table(title=f"Actions: {module}")
    table.add_column("Name", style="green")
    table.add_column("Shape", style="cyan")
    table.add_column("Description", style="dim")
    for row in rows:
        table.add_row(row["name"], row["shape"], row["doc"])
    console.print(table)
    console.print(f"\n[bold]Middlewares:[/bold] {len(app.middlewares)}")
    console.print(f"[bold]Initial state:[/bold] {canonical_json_str(store.state)}")
    raise typer.Exit(0)
