#!/usr/bin/env python3
"""
Main CLI entry point for vibedoc
"""

import logging

import typer

from vibedoc import __version__
from vibedoc.commands.prefs import app as prefs_app
from vibedoc.commands.script import app as script_app
from vibedoc.commands.tasks import app as tasks_app
from vibedoc.utils.logging import get_logger


def version():
    """Show vibedoc version"""
    typer.echo(f"vibedoc version {__version__}")


# Callback for global options
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only log errors"),
):
    """
    vibedoc - generation job tracking and podcast script editing core

    [bold]Examples:[/bold]

    Show a generated script with every cluster open:
        [cyan]vibedoc script show podcast.json --expand-all[/cyan]

    Replay recorded job callbacks:
        [cyan]vibedoc tasks replay events.json[/cyan]

    Switch to the light theme:
        [cyan]vibedoc prefs set theme light[/cyan]
    """
    if verbose and quiet:
        typer.echo("Error: --verbose and --quiet are mutually exclusive", err=True)
        raise typer.Exit(1)

    if verbose:
        get_logger("vibedoc", logging.DEBUG)
    else:
        # Warnings reach stderr through logging's last-resort handler
        logging.getLogger("vibedoc").setLevel(logging.ERROR if quiet else logging.WARNING)


def create_app() -> typer.Typer:
    """Create and configure the main CLI application"""
    app = typer.Typer(rich_markup_mode="rich", no_args_is_help=True)
    app.callback()(main)
    app.command()(version)
    app.add_typer(script_app, name="script")
    app.add_typer(tasks_app, name="tasks")
    app.add_typer(prefs_app, name="prefs")
    return app


# Create the app instance
app = create_app()


def run():
    """Entry point for the CLI"""
    app()


if __name__ == "__main__":
    run()
