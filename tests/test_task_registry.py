"""Tests for the task registry."""

import threading
from datetime import datetime, timedelta

import pytest

from vibedoc.exceptions import InvalidTransitionError, PatchError, TaskNotFoundError
from vibedoc.models.tasks import TaskStatus, TaskType
from vibedoc.services.task_registry import TaskRegistry


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 6, 23, 17, 0, 0)

    def __call__(self):
        self.now += timedelta(seconds=1)
        return self.now


class TestAddTask:
    def test_add_stamps_created_at_and_keeps_fields(self, registry):
        task = registry.add_task(
            "t1", "podcast_creation", status="pending", progress=0, message="Queued"
        )
        got = registry.get("t1")
        assert got == task
        assert got.type == TaskType.PODCAST_CREATION
        assert got.status == TaskStatus.PENDING
        assert got.progress == 0
        assert got.message == "Queued"
        assert isinstance(got.created_at, datetime)

    def test_defaults(self, registry):
        task = registry.add_task("t1", TaskType.DOCUMENTATION)
        assert task.status == TaskStatus.PENDING
        assert task.progress == 0
        assert task.message == ""

    def test_re_register_overwrites_whole_record(self):
        registry = TaskRegistry(clock=FakeClock())
        first = registry.add_task("t1", "video_generation")
        registry.update_task("t1", status="failed", message="boom")

        retried = registry.add_task("t1", "video_generation", message="Retrying")

        assert registry.get("t1") == retried
        assert retried.status == TaskStatus.PENDING
        assert retried.message == "Retrying"
        assert retried.created_at > first.created_at
        assert registry.count() == 1

    @pytest.mark.parametrize("progress", [-1, 100.5, "lots", True])
    def test_add_rejects_bad_progress(self, registry, progress):
        with pytest.raises(InvalidTransitionError):
            registry.add_task("t1", "documentation", progress=progress)
        assert registry.get("t1") is None

    def test_add_rejects_unknown_type(self, registry):
        with pytest.raises(InvalidTransitionError):
            registry.add_task("t1", "audiobook")


class TestUpdateTask:
    def test_merge_leaves_omitted_fields(self, registry):
        registry.add_task("t1", "podcast_creation", message="Queued")
        task = registry.update_task("t1", status="running", progress=45, message="3/10 dialogues")
        assert task.status == TaskStatus.RUNNING
        assert task.progress == 45
        assert task.message == "3/10 dialogues"

        task = registry.update_task("t1", progress=50)
        assert task.message == "3/10 dialogues"
        assert task.status == TaskStatus.RUNNING

    def test_created_at_is_never_changed(self):
        registry = TaskRegistry(clock=FakeClock())
        created = registry.add_task("t1", "documentation").created_at
        task = registry.update_task("t1", status="running")
        assert task.created_at == created
        assert task.updated_at > created

    def test_missing_id_raises_not_found(self, registry):
        with pytest.raises(TaskNotFoundError) as exc_info:
            registry.update_task("nope", progress=10)
        assert exc_info.value.context["task_id"] == "nope"

    @pytest.mark.parametrize("field", ["id", "type", "created_at", "updated_at", "colour"])
    def test_rejects_read_only_and_unknown_fields(self, registry, field):
        registry.add_task("t1", "documentation")
        with pytest.raises(PatchError):
            registry.update_task("t1", **{field: "x"})
        assert registry.get("t1").type == TaskType.DOCUMENTATION

    @pytest.mark.parametrize("terminal", ["completed", "failed"])
    @pytest.mark.parametrize("target", ["pending", "running", "completed", "failed"])
    def test_terminal_status_is_final(self, registry, terminal, target):
        registry.add_task("t1", "documentation")
        registry.update_task("t1", status=terminal)
        if target == terminal:
            assert registry.update_task("t1", status=target).status == TaskStatus(terminal)
        else:
            with pytest.raises(InvalidTransitionError):
                registry.update_task("t1", status=target)
            assert registry.get("t1").status == TaskStatus(terminal)

    def test_terminal_task_progress_is_frozen(self, registry):
        registry.add_task("t1", "documentation")
        registry.update_task("t1", status="failed", progress=30)
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", progress=40)
        # message-only updates are still accepted
        assert registry.update_task("t1", message="gave up").progress == 30

    def test_running_cannot_go_back_to_pending(self, registry):
        registry.add_task("t1", "documentation", status="running")
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", status="pending")

    def test_progress_cannot_decrease_while_running(self, registry):
        registry.add_task("t1", "video_generation")
        registry.update_task("t1", status="running", progress=60)
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", progress=59)
        assert registry.get("t1").progress == 60

    @pytest.mark.parametrize("target", ["completed", "failed"])
    def test_finishing_cannot_lower_progress(self, registry, target):
        registry.add_task("t1", "podcast_creation", status="running", progress=80)
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", status=target, progress=10)
        task = registry.get("t1")
        assert task.status == TaskStatus.RUNNING
        assert task.progress == 80

    def test_failing_keeps_higher_progress(self, registry):
        registry.add_task("t1", "podcast_creation", status="running", progress=80)
        assert registry.update_task("t1", status="failed", progress=85).progress == 85

    def test_bool_progress_rejected(self, registry):
        registry.add_task("t1", "documentation")
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", progress=True)
        assert registry.get("t1").progress == 0

    def test_progress_may_reset_while_pending(self, registry):
        registry.add_task("t1", "video_generation", progress=20)
        assert registry.update_task("t1", progress=0).progress == 0

    @pytest.mark.parametrize("progress", [-0.1, 101])
    def test_progress_out_of_bounds(self, registry, progress):
        registry.add_task("t1", "video_generation")
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", progress=progress)
        assert 0 <= registry.get("t1").progress <= 100

    def test_completion_fills_progress(self, registry):
        registry.add_task("t1", "podcast_creation", status="running", progress=80)
        assert registry.update_task("t1", status="completed").progress == 100

    def test_unknown_status_rejected(self, registry):
        registry.add_task("t1", "documentation")
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", status="paused")

    def test_rejected_update_leaves_record_untouched(self, registry):
        registry.add_task("t1", "documentation", status="running", progress=40, message="a")
        before = registry.get("t1")
        with pytest.raises(InvalidTransitionError):
            registry.update_task("t1", progress=10, message="b")
        assert registry.get("t1") is before


class TestRemoveAndQuery:
    def test_add_then_remove(self, registry):
        registry.add_task("t1", "podcast_creation")
        registry.update_task("t1", status="running", progress=45)
        removed = registry.remove_task("t1")
        assert removed.id == "t1"
        assert registry.get("t1") is None
        assert "t1" not in registry

    def test_remove_missing_returns_none(self, registry):
        assert registry.remove_task("ghost") is None

    def test_list_is_snapshot_newest_first(self):
        registry = TaskRegistry(clock=FakeClock())
        registry.add_task("a", "documentation")
        registry.add_task("b", "podcast_creation")
        snapshot = registry.list()
        assert [t.id for t in snapshot] == ["b", "a"]

        registry.remove_task("a")
        assert [t.id for t in snapshot] == ["b", "a"]
        assert len(registry) == 1

    def test_list_filters(self, registry):
        registry.add_task("a", "documentation")
        registry.add_task("b", "podcast_creation", status="running")
        registry.add_task("c", "podcast_creation", status="completed")
        assert {t.id for t in registry.list(task_type="podcast_creation")} == {"b", "c"}
        assert {t.id for t in registry.list(status=TaskStatus.RUNNING)} == {"b"}
        assert {t.id for t in registry.active()} == {"a", "b"}

    def test_independent_registries(self):
        one, two = TaskRegistry(), TaskRegistry()
        one.add_task("t1", "documentation")
        assert two.get("t1") is None


class TestConcurrency:
    def test_concurrent_progress_updates_stay_consistent(self, registry):
        registry.add_task("t1", "video_generation", status="running")
        errors = []

        def report(start):
            for progress in range(start, 101, 4):
                try:
                    registry.update_task("t1", progress=progress, message=f"{progress}%")
                except InvalidTransitionError as e:
                    errors.append(e)

        threads = [threading.Thread(target=report, args=(s,)) for s in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        task = registry.get("t1")
        assert task.message == f"{round(task.progress)}%"
        assert 0 <= task.progress <= 100
