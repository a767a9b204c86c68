"""Podcast script document model.

A ``PodcastData`` value is produced wholesale by the generation pipeline
and is immutable: edits build a new value that shares every untouched
cluster and dialogue with the old one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional

from ..exceptions import PodcastDataError
from .types import (
    ClusterDict,
    DialogueDict,
    ParticipantDict,
    PodcastDataDict,
    VisualizationDict,
)


class VisualizationType(str, Enum):
    MARKDOWN = "markdown"
    MERMAID = "mermaid"


# Fields an editor may change on a dialogue. dialogue_id is its identity.
DIALOGUE_EDITABLE_FIELDS = ("speaker", "text", "emotion", "visualization")


# ── Parsing helpers ─────────────────────────────────────────────────


def _require_mapping(raw: Any, path: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise PodcastDataError("Expected an object", path=path, got=type(raw).__name__)
    return raw


def _require_list(raw: Mapping[str, Any], key: str, path: str) -> Sequence[Any]:
    value = raw.get(key)
    if not isinstance(value, list):
        raise PodcastDataError("Expected a list", path=f"{path}.{key}")
    return value


def _require_str(raw: Mapping[str, Any], key: str, path: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise PodcastDataError("Expected a string", path=f"{path}.{key}")
    return value


def _freeze(value: Any) -> Any:
    """Read-only deep copy: mappings become MappingProxyType, lists tuples.

    An existing MappingProxyType is taken as already frozen.
    """
    if isinstance(value, MappingProxyType):
        return value
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


# ── Value objects ───────────────────────────────────────────────────


@dataclass(frozen=True)
class Visualization:
    type: VisualizationType
    content: str

    @classmethod
    def from_dict(cls, raw: Any, path: str = "visualization") -> "Visualization":
        raw = _require_mapping(raw, path)
        try:
            vis_type = VisualizationType(raw.get("type"))
        except ValueError as e:
            raise PodcastDataError(
                "Visualization type must be markdown or mermaid",
                path=f"{path}.type",
                got=raw.get("type"),
            ) from e
        return cls(type=vis_type, content=_require_str(raw, "content", path))

    def to_dict(self) -> VisualizationDict:
        return {"type": self.type.value, "content": self.content}


@dataclass(frozen=True)
class Participant:
    name: str
    role: str = ""
    personality: str = ""
    background: str = ""
    speaking_style: str = ""

    @classmethod
    def from_dict(cls, raw: Any, path: str = "participant") -> "Participant":
        raw = _require_mapping(raw, path)
        return cls(
            name=_require_str(raw, "name", path),
            role=str(raw.get("role", "")),
            personality=str(raw.get("personality", "")),
            background=str(raw.get("background", "")),
            speaking_style=str(raw.get("speaking_style", "")),
        )

    def to_dict(self) -> ParticipantDict:
        return {
            "name": self.name,
            "role": self.role,
            "personality": self.personality,
            "background": self.background,
            "speaking_style": self.speaking_style,
        }


@dataclass(frozen=True)
class Dialogue:
    """One turn of scripted conversation with its visualization."""

    dialogue_id: int
    speaker: str
    text: str
    emotion: str
    visualization: Visualization

    @classmethod
    def from_dict(cls, raw: Any, path: str = "dialogue") -> "Dialogue":
        raw = _require_mapping(raw, path)
        dialogue_id = raw.get("dialogue_id")
        if isinstance(dialogue_id, bool) or not isinstance(dialogue_id, int):
            raise PodcastDataError("dialogue_id must be an integer", path=f"{path}.dialogue_id")
        return cls(
            dialogue_id=dialogue_id,
            speaker=_require_str(raw, "speaker", path),
            text=_require_str(raw, "text", path),
            emotion=_require_str(raw, "emotion", path),
            visualization=Visualization.from_dict(raw.get("visualization"), f"{path}.visualization"),
        )

    def to_dict(self) -> DialogueDict:
        return {
            "dialogue_id": self.dialogue_id,
            "speaker": self.speaker,
            "text": self.text,
            "emotion": self.emotion,
            "visualization": self.visualization.to_dict(),
        }


@dataclass(frozen=True)
class Cluster:
    """A titled group of related dialogue turns."""

    cluster_id: str
    cluster_title: str
    mckinsey_summary: str
    dialogues: tuple[Dialogue, ...] = ()

    def __post_init__(self) -> None:
        seen: set[int] = set()
        for dialogue in self.dialogues:
            if dialogue.dialogue_id in seen:
                raise PodcastDataError(
                    "Duplicate dialogue_id in cluster",
                    cluster_id=self.cluster_id,
                    dialogue_id=dialogue.dialogue_id,
                )
            seen.add(dialogue.dialogue_id)

    def find_dialogue(self, dialogue_id: int) -> Optional[Dialogue]:
        for dialogue in self.dialogues:
            if dialogue.dialogue_id == dialogue_id:
                return dialogue
        return None

    @classmethod
    def from_dict(cls, raw: Any, path: str = "cluster") -> "Cluster":
        raw = _require_mapping(raw, path)
        dialogues = tuple(
            Dialogue.from_dict(d, f"{path}.dialogues[{i}]")
            for i, d in enumerate(_require_list(raw, "dialogues", path))
        )
        return cls(
            cluster_id=_require_str(raw, "cluster_id", path),
            cluster_title=_require_str(raw, "cluster_title", path),
            mckinsey_summary=_require_str(raw, "mckinsey_summary", path),
            dialogues=dialogues,
        )

    def to_dict(self) -> ClusterDict:
        return {
            "cluster_id": self.cluster_id,
            "cluster_title": self.cluster_title,
            "mckinsey_summary": self.mckinsey_summary,
            "dialogues": [d.to_dict() for d in self.dialogues],
        }


@dataclass(frozen=True)
class PodcastData:
    """Root of a generated podcast script.

    ``metadata`` is generation provenance (podcast_id, generation_config,
    statistics, mermaid_validation, ...) and is carried through untouched.
    It is frozen on construction (nested objects become read-only
    mappings, lists become tuples) and left out of the hash.
    """

    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)
    participants: tuple[Participant, ...] = ()
    clusters: tuple[Cluster, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", _freeze(self.metadata))
        seen: set[str] = set()
        for cluster in self.clusters:
            if cluster.cluster_id in seen:
                raise PodcastDataError("Duplicate cluster_id", cluster_id=cluster.cluster_id)
            seen.add(cluster.cluster_id)

    @property
    def cluster_ids(self) -> list[str]:
        return [c.cluster_id for c in self.clusters]

    def find_cluster(self, cluster_id: str) -> Optional[Cluster]:
        for cluster in self.clusters:
            if cluster.cluster_id == cluster_id:
                return cluster
        return None

    @classmethod
    def from_dict(cls, raw: Any) -> "PodcastData":
        """Build a document from the pipeline's JSON shape.

        Raises:
            PodcastDataError: if the shape or the id uniqueness rules are violated
        """
        raw = _require_mapping(raw, "podcast")
        metadata = raw.get("metadata", {})
        if not isinstance(metadata, Mapping):
            raise PodcastDataError("Expected an object", path="podcast.metadata")
        participants = tuple(
            Participant.from_dict(p, f"podcast.participants[{i}]")
            for i, p in enumerate(_require_list(raw, "participants", "podcast"))
        )
        clusters = tuple(
            Cluster.from_dict(c, f"podcast.clusters[{i}]")
            for i, c in enumerate(_require_list(raw, "clusters", "podcast"))
        )
        return cls(
            metadata=metadata,
            participants=participants,
            clusters=clusters,
        )

    def to_dict(self) -> PodcastDataDict:
        return {
            "metadata": _thaw(self.metadata),
            "participants": [p.to_dict() for p in self.participants],
            "clusters": [c.to_dict() for c in self.clusters],
        }
