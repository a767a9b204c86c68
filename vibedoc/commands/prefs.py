"""Preference commands - the only state that survives a restart."""

import typer
from rich.table import Table

from vibedoc.config.ui_config import get_ui_config_path
from vibedoc.exceptions import ConfigurationError
from vibedoc.services.app_state import AppState
from vibedoc.utils.output import console, err_console, print_json

app = typer.Typer(help="Show and change persisted UI preferences")


@app.command("show")
def show_prefs(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show current preferences."""
    with AppState() as state:
        prefs = state.preferences

    if json_output:
        print_json(prefs)
        return

    table = Table(title="Preferences")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in prefs.items():
        table.add_row(key, str(value))
    console.print(table)
    console.print(f"[dim]{get_ui_config_path()}[/dim]")


@app.command("set")
def set_pref(
    key: str = typer.Argument(..., help="theme, view_mode or sidebar_width"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Change one preference.

    Examples:
        vibedoc prefs set theme light
        vibedoc prefs set sidebar_width 360
    """
    with AppState() as state:
        try:
            stored = state.set_preference(key, value)
        except ConfigurationError as e:
            err_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1) from e
    console.print(f"[green]✅ {key}[/green] = {stored}")
