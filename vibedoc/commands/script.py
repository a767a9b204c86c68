"""Podcast script commands - load, validate and inspect generated scripts."""

import json
from pathlib import Path

import typer

from vibedoc.exceptions import PodcastDataError
from vibedoc.services.content_tree import ContentTree
from vibedoc.ui.script_view import filter_dialogues, render_script_tree
from vibedoc.utils.output import console, err_console, print_json

app = typer.Typer(help="Inspect generated podcast scripts")


def _load_tree(path: Path) -> ContentTree:
    """Read a script file into a fresh ContentTree.

    Prints an error and raises typer.Exit(1) if the file is unusable.
    """
    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1) from e
    tree = ContentTree()
    try:
        tree.set_podcast_data(raw)
    except PodcastDataError as e:
        err_console.print(f"[red]Invalid podcast script: {e}[/red]")
        raise typer.Exit(1) from e
    return tree


@app.command()
def show(
    path: Path = typer.Argument(..., help="Podcast script JSON file"),
    query: str = typer.Option("", "--query", "-q", help="Only show dialogues matching this text"),
    expand: list[str] = typer.Option([], "--expand", "-e", help="Cluster id to expand (repeatable)"),
    expand_all: bool = typer.Option(False, "--expand-all", "-a", help="Expand every cluster"),
    select: str | None = typer.Option(None, "--select", "-s", help="Highlight a cluster id"),
) -> None:
    """Show a podcast script as a cluster tree.

    Examples:
        vibedoc script show podcast.json --expand-all
        vibedoc script show podcast.json -e index -q webcontainer
    """
    tree = _load_tree(path)
    if expand_all:
        tree.expand_all_clusters()
    for cluster_id in expand:
        if not tree.is_expanded(cluster_id):
            tree.toggle_cluster_expansion(cluster_id)
    tree.set_selected_cluster_id(select)
    tree.set_search_query(query)

    snapshot = tree.snapshot()
    console.print(render_script_tree(snapshot))
    if query and snapshot.podcast_data is not None:
        matches = filter_dialogues(snapshot.podcast_data, query)
        console.print(f"[dim]{len(matches)} dialogues match '{query}'[/dim]")


@app.command()
def validate(path: Path = typer.Argument(..., help="Podcast script JSON file")) -> None:
    """Check that a file is a well-formed podcast script."""
    tree = _load_tree(path)
    stats = tree.statistics()
    console.print(
        f"[green]✅ Valid:[/green] {stats['total_clusters']} clusters, "
        f"{stats['total_dialogues']} dialogues"
    )


@app.command()
def stats(
    path: Path = typer.Argument(..., help="Podcast script JSON file"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show cluster/dialogue counts recomputed from the script."""
    tree = _load_tree(path)
    result = tree.statistics()
    data = tree.podcast_data
    if data is None:
        err_console.print(f"[red]No podcast script loaded from {path}[/red]")
        raise typer.Exit(1)
    declared = data.to_dict()["metadata"].get("statistics")

    if json_output:
        print_json({"computed": result, "declared": declared})
        return

    for key, value in result.items():
        line = f"{key}: [bold]{value}[/bold]"
        if isinstance(declared, dict) and key in declared and declared[key] != value:
            line += f" [yellow](metadata says {declared[key]})[/yellow]"
        console.print(line)
