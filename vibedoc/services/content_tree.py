"""Content Tree - owns the podcast script being reviewed and its view state.

The generation pipeline replaces the whole document in one call. After
that, editors change one dialogue at a time through ``update_dialogue``,
which rebuilds only the clusters/dialogues on the path to the edited
turn. Every other cluster and dialogue stays the same object, so a
consumer can skip unchanged subtrees with an ``is`` check.

Selection, expansion and the search query are presentation state kept
alongside the document but never validated against it.
"""

from __future__ import annotations

import dataclasses
import logging
import threading
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Optional, TypeVar, Union

from ..exceptions import (
    ClusterNotFoundError,
    ContentNotLoadedError,
    DialogueNotFoundError,
    NotFoundError,
    PatchError,
)
from ..models.patching import apply_patch, check_patch
from ..models.podcast import (
    DIALOGUE_EDITABLE_FIELDS,
    Cluster,
    Dialogue,
    PodcastData,
    Visualization,
)
from ..models.types import StatisticsDict

logger = logging.getLogger(__name__)

N = TypeVar("N")


# ── Copy-on-path helper ─────────────────────────────────────────────


@dataclass(frozen=True)
class PathStep:
    """One hop down the tree.

    Attributes:
        children: Name of the tuple field holding the child nodes
        match: Picks the child to descend into
        missing: Builds the error raised when no child matches
    """

    children: str
    match: Callable[[Any], bool]
    missing: Callable[[], NotFoundError]


def replace_at_path(root: N, path: Sequence[PathStep], update: Callable[[Any], Any]) -> N:
    """Return ``root`` with the node at ``path`` replaced by ``update(node)``.

    Only nodes on the path are rebuilt; siblings are reused as-is. If
    ``update`` returns the node unchanged, ``root`` itself is returned.

    Raises:
        NotFoundError: from the first step whose ``match`` finds nothing
    """
    if not path:
        return update(root)

    step, rest = path[0], path[1:]
    children = getattr(root, step.children)
    for index, child in enumerate(children):
        if not step.match(child):
            continue
        new_child = replace_at_path(child, rest, update)
        if new_child is child:
            return root
        new_children = (*children[:index], new_child, *children[index + 1 :])
        return dataclasses.replace(root, **{step.children: new_children})  # type: ignore[type-var]
    raise step.missing()


def dialogue_path(cluster_id: str, dialogue_id: int) -> list[PathStep]:
    """Path from a PodcastData root to one dialogue."""
    return [
        PathStep(
            children="clusters",
            match=lambda c: c.cluster_id == cluster_id,
            missing=lambda: ClusterNotFoundError(cluster_id=cluster_id),
        ),
        PathStep(
            children="dialogues",
            match=lambda d: d.dialogue_id == dialogue_id,
            missing=lambda: DialogueNotFoundError(cluster_id=cluster_id, dialogue_id=dialogue_id),
        ),
    ]


# ── Snapshot ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class TreeSnapshot:
    """Consistent read of the document and its view state."""

    podcast_data: Optional[PodcastData]
    selected_cluster_id: Optional[str]
    expanded_clusters: frozenset[str]
    search_query: str


class ContentTree:
    """Thread-safe holder of the current podcast script.

    Usage:
        tree = ContentTree()
        tree.set_podcast_data(PodcastData.from_dict(payload))
        tree.update_dialogue("index", 2, text="Rewritten line")
        tree.toggle_cluster_expansion("index")
    """

    def __init__(self) -> None:
        self._data: Optional[PodcastData] = None
        self._selected_cluster_id: Optional[str] = None
        self._expanded: frozenset[str] = frozenset()
        self._search_query = ""
        self._lock = threading.Lock()

    # ---- document ----

    @property
    def podcast_data(self) -> Optional[PodcastData]:
        return self._data

    def set_podcast_data(self, data: Union[PodcastData, Mapping[str, Any], None]) -> None:
        """Replace the whole document; ``None`` clears it.

        A raw mapping is parsed with ``PodcastData.from_dict`` first, so
        an invalid payload raises before anything is replaced.
        View state is left as is; stale cluster ids are tolerated.
        """
        if data is not None and not isinstance(data, PodcastData):
            data = PodcastData.from_dict(data)
        with self._lock:
            self._data = data
        if data is None:
            logger.debug("Podcast script cleared")
        else:
            logger.debug(
                "Podcast script loaded: %d clusters, %d participants",
                len(data.clusters),
                len(data.participants),
            )

    def get_cluster(self, cluster_id: str) -> Cluster:
        data = self._require_data()
        cluster = data.find_cluster(cluster_id)
        if cluster is None:
            raise ClusterNotFoundError(cluster_id=cluster_id)
        return cluster

    def get_dialogue(self, cluster_id: str, dialogue_id: int) -> Dialogue:
        dialogue = self.get_cluster(cluster_id).find_dialogue(dialogue_id)
        if dialogue is None:
            raise DialogueNotFoundError(cluster_id=cluster_id, dialogue_id=dialogue_id)
        return dialogue

    def update_dialogue(self, cluster_id: str, dialogue_id: int, **updates: Any) -> Dialogue:
        """Merge ``updates`` into a single dialogue.

        Args:
            cluster_id: Owning cluster
            dialogue_id: Dialogue within that cluster
            **updates: Any of speaker, text, emotion, visualization
                (a Visualization or a {"type", "content"} mapping)

        Returns:
            The updated dialogue

        Raises:
            PatchError: unknown or read-only fields, or non-string text fields
            ContentNotLoadedError: no document is loaded
            ClusterNotFoundError / DialogueNotFoundError: lookup failed
        """
        check_patch(updates, DIALOGUE_EDITABLE_FIELDS, target="dialogue")
        not_text = [
            key
            for key in ("speaker", "text", "emotion")
            if key in updates and not isinstance(updates[key], str)
        ]
        if not_text:
            raise PatchError("Dialogue speaker, text and emotion must be strings", fields=not_text)
        if "visualization" in updates and not isinstance(updates["visualization"], Visualization):
            updates["visualization"] = Visualization.from_dict(updates["visualization"])

        updated: list[Dialogue] = []

        def merge(dialogue: Dialogue) -> Dialogue:
            new = apply_patch(dialogue, updates, DIALOGUE_EDITABLE_FIELDS, target="dialogue")
            updated.append(new)
            return new

        with self._lock:
            data = self._require_data()
            self._data = replace_at_path(data, dialogue_path(cluster_id, dialogue_id), merge)

        logger.debug(
            "Updated dialogue %s/%s fields=%s", cluster_id, dialogue_id, sorted(updates)
        )
        return updated[0]

    def statistics(self) -> StatisticsDict:
        """Counts recomputed from the current document (not from its metadata)."""
        data = self._data
        clusters = data.clusters if data is not None else ()
        total_dialogues = sum(len(c.dialogues) for c in clusters)
        return {
            "total_clusters": len(clusters),
            "total_dialogues": total_dialogues,
            "total_visualizations": total_dialogues,
            "average_dialogues_per_cluster": (
                round(total_dialogues / len(clusters), 2) if clusters else 0.0
            ),
        }

    def _require_data(self) -> PodcastData:
        if self._data is None:
            raise ContentNotLoadedError()
        return self._data

    # ---- view state ----

    @property
    def selected_cluster_id(self) -> Optional[str]:
        return self._selected_cluster_id

    @property
    def expanded_clusters(self) -> frozenset[str]:
        return self._expanded

    @property
    def search_query(self) -> str:
        return self._search_query

    def set_selected_cluster_id(self, cluster_id: Optional[str]) -> None:
        with self._lock:
            self._selected_cluster_id = cluster_id

    def is_expanded(self, cluster_id: str) -> bool:
        return cluster_id in self._expanded

    def toggle_cluster_expansion(self, cluster_id: str) -> bool:
        """Flip a cluster's membership in the expansion set.

        Returns:
            True if the cluster is now expanded
        """
        with self._lock:
            if cluster_id in self._expanded:
                self._expanded = self._expanded - {cluster_id}
                return False
            self._expanded = self._expanded | {cluster_id}
            return True

    def expand_all_clusters(self) -> None:
        """Expand exactly the clusters of the current document."""
        with self._lock:
            data = self._data
            self._expanded = frozenset(data.cluster_ids) if data is not None else frozenset()

    def collapse_all_clusters(self) -> None:
        with self._lock:
            self._expanded = frozenset()

    def set_search_query(self, query: str) -> None:
        with self._lock:
            self._search_query = query

    def snapshot(self) -> TreeSnapshot:
        with self._lock:
            return TreeSnapshot(
                podcast_data=self._data,
                selected_cluster_id=self._selected_cluster_id,
                expanded_clusters=self._expanded,
                search_query=self._search_query,
            )

    def reset(self) -> None:
        """Drop the document and all view state."""
        with self._lock:
            self._data = None
            self._selected_cluster_id = None
            self._expanded = frozenset()
            self._search_query = ""
