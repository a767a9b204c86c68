"""TypedDict definitions for the JSON shapes exchanged with collaborators."""

from __future__ import annotations

from typing import Literal, TypedDict

TaskTypeName = Literal["video_generation", "podcast_creation", "documentation"]
TaskStatusName = Literal["pending", "running", "completed", "failed"]
VisualizationTypeName = Literal["markdown", "mermaid"]


class TaskDict(TypedDict):
    id: str
    type: TaskTypeName
    status: TaskStatusName
    progress: float
    message: str
    created_at: str
    updated_at: str


# ── Podcast script (as produced by the generation pipeline) ─────────


class GenerationConfigDict(TypedDict, total=False):
    preset: str
    language: str
    focus_areas: list[str]
    custom_prompt: str
    max_dialogues_per_cluster: int


class StatisticsDict(TypedDict):
    total_clusters: int
    total_dialogues: int
    total_visualizations: int
    average_dialogues_per_cluster: float


class MermaidValidationDict(TypedDict, total=False):
    validated_at: str
    total_mermaid_diagrams: int
    corrections_applied: int
    conversions_to_markdown: int
    validation_version: str


class PodcastMetadataDict(TypedDict, total=False):
    podcast_id: str
    generated_at: str
    project_name: str
    generation_config: GenerationConfigDict
    statistics: StatisticsDict
    mermaid_validation: MermaidValidationDict


class ParticipantDict(TypedDict):
    name: str
    role: str
    personality: str
    background: str
    speaking_style: str


class VisualizationDict(TypedDict):
    type: VisualizationTypeName
    content: str


class DialogueDict(TypedDict):
    dialogue_id: int
    speaker: str
    text: str
    emotion: str
    visualization: VisualizationDict


class ClusterDict(TypedDict):
    cluster_id: str
    cluster_title: str
    mckinsey_summary: str
    dialogues: list[DialogueDict]


class PodcastDataDict(TypedDict):
    metadata: PodcastMetadataDict
    participants: list[ParticipantDict]
    clusters: list[ClusterDict]
