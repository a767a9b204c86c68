"""Tests for AppState: lifecycle, persistence boundary, podcast completion."""

import json

import pytest

from vibedoc.config.ui_config import load_ui_config
from vibedoc.exceptions import (
    ConfigurationError,
    InvalidTransitionError,
    PodcastDataError,
    TaskNotFoundError,
)
from vibedoc.models.tasks import TaskStatus
from vibedoc.services.app_state import AppState


class TestLifecycle:
    def test_fresh_state(self, config_dir):
        with AppState() as state:
            assert state.tasks.list() == []
            assert state.content.podcast_data is None
            assert state.preferences == {"theme": "dark", "view_mode": "html", "sidebar_width": 300}

    def test_instances_do_not_share_state(self, config_dir):
        one, two = AppState(), AppState()
        one.tasks.add_task("t1", "documentation")
        one.content.toggle_cluster_expansion("c1")
        assert two.tasks.get("t1") is None
        assert two.content.expanded_clusters == frozenset()

    def test_close_drops_volatile_state(self, config_dir, podcast):
        state = AppState()
        state.tasks.add_task("t1", "documentation")
        state.content.set_podcast_data(podcast)
        state.close()
        assert len(state.tasks) == 0
        assert state.content.podcast_data is None
        state.close()

    def test_only_preferences_survive_restart(self, config_dir, podcast):
        with AppState() as state:
            state.set_preference("theme", "light")
            state.tasks.add_task("t1", "podcast_creation")
            state.content.set_podcast_data(podcast)

        saved = json.loads((config_dir / "ui_config.json").read_text())
        assert set(saved) == {"theme", "view_mode", "sidebar_width"}

        with AppState() as state:
            assert state.preferences["theme"] == "light"
            assert state.tasks.get("t1") is None
            assert state.content.podcast_data is None

    def test_read_only_use_writes_nothing(self, config_dir):
        with AppState() as state:
            state.tasks.add_task("t1", "documentation")
            assert state.preferences["theme"] == "dark"
        assert not config_dir.exists()

    def test_explicit_config_dir(self, tmp_path):
        with AppState(config_dir=tmp_path) as state:
            state.set_preference("sidebar_width", "420")
        assert load_ui_config(tmp_path)["sidebar_width"] == 420


class TestPreferences:
    def test_invalid_preference(self, config_dir):
        with AppState() as state:
            with pytest.raises(ConfigurationError):
                state.set_preference("theme", "solarized")
            assert state.preferences["theme"] == "dark"

    def test_unknown_preference(self, config_dir):
        with AppState() as state:
            with pytest.raises(ConfigurationError):
                state.set_preference("font", "mono")

    def test_preferences_property_is_a_copy(self, config_dir):
        with AppState() as state:
            prefs = state.preferences
            prefs["theme"] = "light"
            assert state.preferences["theme"] == "dark"


class TestCompletePodcastGeneration:
    def test_loads_tree_and_completes_task(self, config_dir, podcast_dict):
        with AppState() as state:
            state.tasks.add_task("p1", "podcast_creation", status="running", progress=90)
            task = state.complete_podcast_generation("p1", podcast_dict)
            assert task.status == TaskStatus.COMPLETED
            assert task.progress == 100
            assert state.content.podcast_data.to_dict() == podcast_dict

    def test_unknown_task(self, config_dir, podcast):
        with AppState() as state:
            with pytest.raises(TaskNotFoundError):
                state.complete_podcast_generation("p1", podcast)
            assert state.content.podcast_data is None

    def test_wrong_task_type(self, config_dir, podcast):
        with AppState() as state:
            state.tasks.add_task("v1", "video_generation", status="running")
            with pytest.raises(InvalidTransitionError):
                state.complete_podcast_generation("v1", podcast)
            assert state.tasks.get("v1").status == TaskStatus.RUNNING
            assert state.content.podcast_data is None

    def test_bad_payload_leaves_task_running(self, config_dir):
        with AppState() as state:
            state.tasks.add_task("p1", "podcast_creation", status="running")
            with pytest.raises(PodcastDataError):
                state.complete_podcast_generation("p1", {"clusters": "nope"})
            assert state.tasks.get("p1").status == TaskStatus.RUNNING
            assert state.content.podcast_data is None

    def test_failed_task_leaves_tree_untouched(self, config_dir, podcast, podcast_dict):
        podcast_dict["clusters"][0]["cluster_title"] = "Replacement"
        with AppState() as state:
            state.content.set_podcast_data(podcast)
            state.tasks.add_task("p1", "podcast_creation", status="running", progress=50)
            failed = state.tasks.update_task("p1", status="failed", message="LLM timeout")
            with pytest.raises(InvalidTransitionError):
                state.complete_podcast_generation("p1", podcast_dict)
            assert state.content.podcast_data is podcast
            assert state.tasks.get("p1") is failed

    def test_repeated_completion_is_accepted(self, config_dir, podcast, podcast_dict):
        podcast_dict["clusters"][0]["cluster_title"] = "Replacement"
        with AppState() as state:
            state.tasks.add_task("p1", "podcast_creation", status="running")
            state.complete_podcast_generation("p1", podcast)
            task = state.complete_podcast_generation("p1", podcast_dict)
            assert task.status == TaskStatus.COMPLETED
            assert state.content.get_cluster("c1").cluster_title == "Replacement"
