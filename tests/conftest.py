"""Shared pytest fixtures for vibedoc tests."""

import copy
import json

import pytest

from vibedoc.models.podcast import PodcastData
from vibedoc.services.content_tree import ContentTree
from vibedoc.services.task_registry import TaskRegistry

SAMPLE_PODCAST = {
    "metadata": {
        "podcast_id": "19e70ba6",
        "generated_at": "2025-06-23T17:52:10.565084",
        "project_name": "bolt.new_en",
        "generation_config": {
            "preset": "custom",
            "language": "english",
            "focus_areas": ["WebContainers", "Live Preview"],
            "custom_prompt": "Relaxed tech podcast",
            "max_dialogues_per_cluster": 4,
        },
        "statistics": {
            "total_clusters": 2,
            "total_dialogues": 4,
            "total_visualizations": 4,
            "average_dialogues_per_cluster": 2.0,
        },
        "mermaid_validation": {
            "validated_at": "2025-06-23T17:54:18.246233",
            "total_mermaid_diagrams": 1,
            "corrections_applied": 0,
            "conversions_to_markdown": 0,
            "validation_version": "1.0",
        },
    },
    "participants": [
        {
            "name": "Emma",
            "role": "Masters Student",
            "personality": "curious",
            "background": "Thesis on workflow orchestration",
            "speaking_style": "asks insightful questions",
        },
        {
            "name": "Alex",
            "role": "Senior Developer",
            "personality": "patient",
            "background": "10+ years of distributed systems",
            "speaking_style": "explains with analogies",
        },
    ],
    "clusters": [
        {
            "cluster_id": "c1",
            "cluster_title": "Introduction",
            "mckinsey_summary": "Sets the stage for the episode.",
            "dialogues": [
                {
                    "dialogue_id": 1,
                    "speaker": "emma",
                    "text": "Welcome to Tech Vibes!",
                    "emotion": "curious",
                    "visualization": {"type": "markdown", "content": "## Tech Vibes"},
                },
                {
                    "dialogue_id": 2,
                    "speaker": "alex",
                    "text": "old",
                    "emotion": "neutral",
                    "visualization": {"type": "mermaid", "content": "flowchart TD\n  a --> b"},
                },
                {
                    "dialogue_id": 3,
                    "speaker": "emma",
                    "text": "Tell me about WebContainers.",
                    "emotion": "excited",
                    "visualization": {"type": "markdown", "content": "* WebContainers"},
                },
            ],
        },
        {
            "cluster_id": "c2",
            "cluster_title": "Workbench",
            "mckinsey_summary": "The editor and preview side by side.",
            "dialogues": [
                {
                    "dialogue_id": 1,
                    "speaker": "alex",
                    "text": "The workbench is where it happens.",
                    "emotion": "happy",
                    "visualization": {"type": "markdown", "content": "### Workbench"},
                },
            ],
        },
    ],
}


@pytest.fixture
def podcast_dict():
    """A fresh copy of the sample script payload."""
    return copy.deepcopy(SAMPLE_PODCAST)


@pytest.fixture
def podcast(podcast_dict):
    return PodcastData.from_dict(podcast_dict)


@pytest.fixture
def tree(podcast):
    tree = ContentTree()
    tree.set_podcast_data(podcast)
    return tree


@pytest.fixture
def registry():
    registry = TaskRegistry()
    yield registry
    registry.clear()


@pytest.fixture
def config_dir(tmp_path, monkeypatch):
    """Point preference storage at a temp dir."""
    path = tmp_path / "config"
    monkeypatch.setenv("VIBEDOC_CONFIG_DIR", str(path))
    return path


@pytest.fixture
def script_file(tmp_path, podcast_dict):
    path = tmp_path / "podcast.json"
    path.write_text(json.dumps(podcast_dict))
    return path
