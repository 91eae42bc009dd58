#!/usr/bin/env python3
"""
actionstore CLI

Main entrypoint for the actionstore command-line tool.
"""

import typer
from rich.console import Console
from rich.table import Table

from .commands import inspect, run

app = typer.Typer(
    name="actionstore",
    help="Run and inspect action-driven state stores",
    add_completion=False,
)

console = Console()

app.command("run")(run.run_command)
app.command("inspect")(inspect.inspect_command)


@app.command()
def version():
    """Show version information."""
    from actionstore import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]actionstore[/bold]", f"v{__version__}")
    table.add_row("Result shapes", "value, awaitable, generator, async generator")

    console.print(table)


def main():
    """Main entrypoint."""
    app()


if __name__ == "__main__":
    main()
