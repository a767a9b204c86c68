"""Rich renderables for the podcast script and task list.

Also holds the search filter: the content tree only stores the query
string, matching happens here in the view layer.
"""

from __future__ import annotations

from typing import Iterable

from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from ..config.constants import DIALOGUE_PREVIEW_LENGTH, SUMMARY_PREVIEW_LENGTH
from ..models.podcast import Cluster, Dialogue, PodcastData
from ..models.tasks import Task, TaskStatus
from ..services.content_tree import TreeSnapshot

STATUS_STYLE = {
    TaskStatus.PENDING: "dim",
    TaskStatus.RUNNING: "blue",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "red",
}

ICONS = {
    TaskStatus.PENDING: "○",
    TaskStatus.RUNNING: "●",
    TaskStatus.COMPLETED: "✓",
    TaskStatus.FAILED: "✗",
}


def _truncate(text: str, length: int) -> str:
    text = " ".join(text.split())
    return text if len(text) <= length else text[: length - 1] + "…"


def dialogue_matches(dialogue: Dialogue, query: str) -> bool:
    """Case-insensitive match on dialogue text or speaker."""
    if not query:
        return True
    needle = query.lower()
    return needle in dialogue.text.lower() or needle in dialogue.speaker.lower()


def filter_clusters(data: PodcastData, query: str) -> list[Cluster]:
    """Clusters holding at least one dialogue that matches ``query``."""
    if not query:
        return list(data.clusters)
    return [c for c in data.clusters if any(dialogue_matches(d, query) for d in c.dialogues)]


def filter_dialogues(data: PodcastData, query: str) -> list[Dialogue]:
    return [d for c in filter_clusters(data, query) for d in c.dialogues if dialogue_matches(d, query)]


def render_script_tree(snapshot: TreeSnapshot) -> Tree:
    """Tree of clusters; expanded clusters list their matching dialogues."""
    data = snapshot.podcast_data
    if data is None:
        return Tree(Text("No podcast script loaded", style="dim"))

    title = data.metadata.get("project_name") or data.metadata.get("podcast_id") or "Podcast script"
    root = Tree(Text(str(title), style="bold"))
    query = snapshot.search_query

    for cluster in filter_clusters(data, query):
        label = Text()
        expanded = cluster.cluster_id in snapshot.expanded_clusters
        label.append("▾ " if expanded else "▸ ")
        label.append(cluster.cluster_title, style="bold cyan")
        label.append(f" [{cluster.cluster_id}]", style="dim")
        if cluster.cluster_id == snapshot.selected_cluster_id:
            label.stylize("reverse")
        branch = root.add(label)
        if not expanded:
            continue
        branch.add(Text(_truncate(cluster.mckinsey_summary, SUMMARY_PREVIEW_LENGTH), style="italic"))
        for dialogue in cluster.dialogues:
            if not dialogue_matches(dialogue, query):
                continue
            line = Text()
            line.append(f"#{dialogue.dialogue_id} ", style="dim")
            line.append(dialogue.speaker, style="magenta")
            line.append(f" ({dialogue.emotion}) ", style="dim")
            line.append(_truncate(dialogue.text, DIALOGUE_PREVIEW_LENGTH))
            line.append(f"  [{dialogue.visualization.type.value}]", style="yellow")
            branch.add(line)
    return root


def render_task_table(tasks: Iterable[Task]) -> Table:
    table = Table(title="Tasks")
    table.add_column("", width=2)
    table.add_column("ID", style="cyan")
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("Progress", justify="right")
    table.add_column("Message")
    for task in tasks:
        style = STATUS_STYLE[task.status]
        table.add_row(
            Text(ICONS[task.status], style=style),
            task.id,
            task.type.label,
            Text(task.status.value, style=style),
            f"{round(task.progress)}%",
            task.message,
        )
    return table
