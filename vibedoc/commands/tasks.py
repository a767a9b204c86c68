"""Task commands - replay job-driver events against a task registry.

Useful for checking how a recorded sequence of job callbacks would be
accepted or rejected by the lifecycle rules.
"""

import json
from pathlib import Path
from typing import Any

import typer

from vibedoc.exceptions import VibedocError
from vibedoc.models.patching import check_patch
from vibedoc.models.tasks import EDITABLE_FIELDS
from vibedoc.services.app_state import AppState
from vibedoc.ui.script_view import render_script_tree, render_task_table
from vibedoc.utils.output import console, err_console, print_json

app = typer.Typer(help="Replay task lifecycle events")

# op -> required keys
EVENT_OPS = {
    "add": ("id", "type"),
    "update": ("id",),
    "remove": ("id",),
    "complete_podcast": ("id", "script"),
}


def apply_event(state: AppState, event: dict[str, Any], base_dir: Path) -> None:
    """Apply one recorded event.

    Raises:
        VibedocError: when the registry or tree rejects the event
        ValueError: when the event itself is malformed
    """
    if not isinstance(event, dict):
        raise ValueError("Event must be an object")
    op = event.get("op")
    if op not in EVENT_OPS:
        raise ValueError(f"Unknown op {op!r}")
    missing = [k for k in EVENT_OPS[op] if k not in event]
    if missing:
        raise ValueError(f"{op} event missing {', '.join(missing)}")

    fields = {k: v for k, v in event.items() if k not in ("op", "id")}
    if op == "add":
        task_type = fields.pop("type")
        check_patch(fields, EDITABLE_FIELDS, target="task")
        state.tasks.add_task(event["id"], task_type, **fields)
    elif op == "update":
        state.tasks.update_task(event["id"], **fields)
    elif op == "remove":
        state.tasks.remove_task(event["id"])
    else:
        script = json.loads((base_dir / fields["script"]).read_text())
        state.complete_podcast_generation(event["id"], script)


@app.command()
def replay(
    path: Path = typer.Argument(..., help="JSON file holding a list of events"),
    strict: bool = typer.Option(False, "--strict", help="Stop at the first rejected event"),
    json_output: bool = typer.Option(False, "--json", help="Output final tasks as JSON"),
) -> None:
    """Replay add/update/remove/complete_podcast events and show the result.

    Example event file:
        [{"op": "add", "id": "t1", "type": "podcast_creation", "message": "Queued"},
         {"op": "update", "id": "t1", "status": "running", "progress": 45}]
    """
    try:
        events = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        err_console.print(f"[red]Cannot read {path}: {e}[/red]")
        raise typer.Exit(1) from e
    if not isinstance(events, list):
        err_console.print("[red]Event file must hold a JSON list[/red]")
        raise typer.Exit(1)

    rejected = 0
    with AppState() as state:
        for index, event in enumerate(events):
            try:
                apply_event(state, event, path.parent)
            except (VibedocError, ValueError, OSError) as e:
                rejected += 1
                err_console.print(f"[yellow]Event {index} rejected:[/yellow] {e}")
                if strict:
                    raise typer.Exit(1) from e

        tasks = state.tasks.list()
        snapshot = state.content.snapshot()

        if json_output:
            print_json([t.to_dict() for t in tasks])
        else:
            console.print(render_task_table(tasks))
            if snapshot.podcast_data is not None:
                console.print(render_script_tree(snapshot))

    if rejected:
        console.print(f"[dim]{rejected} of {len(events)} events rejected[/dim]")
