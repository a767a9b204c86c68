"""Task records for externally executed generation jobs.

A task is created when a job is submitted, receives status/progress
updates while the job runs, and ends in ``completed`` or ``failed``.
The lifecycle rules live here so the registry only has to apply them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..config.constants import PROGRESS_MAX, PROGRESS_MIN
from ..exceptions import InvalidTransitionError
from .types import TaskDict


class TaskType(str, Enum):
    """Kind of generation job a task tracks."""

    VIDEO_GENERATION = "video_generation"
    PODCAST_CREATION = "podcast_creation"
    DOCUMENTATION = "documentation"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


class TaskStatus(str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED})

# Allowed status edges. Re-asserting the current status is always allowed.
TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    TaskStatus.PENDING: frozenset({TaskStatus.RUNNING, TaskStatus.COMPLETED, TaskStatus.FAILED}),
    TaskStatus.RUNNING: frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED}),
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}

# Fields a job driver may change after registration.
EDITABLE_FIELDS = ("status", "progress", "message")


@dataclass(frozen=True)
class Task:
    """Represents one tracked generation job.

    Attributes:
        id: Caller-supplied key, unique within a registry
        type: Kind of job
        status: Current lifecycle status
        progress: Percent complete, always within [0, 100]
        message: Human-readable status text
        created_at: When the task was registered (never changes)
        updated_at: When the last accepted update was applied
    """

    id: str
    type: TaskType
    status: TaskStatus = TaskStatus.PENDING
    progress: float = 0.0
    message: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def duration_seconds(self) -> float:
        """Seconds between registration and the last update."""
        return (self.updated_at - self.created_at).total_seconds()

    def to_dict(self) -> TaskDict:
        return {
            "id": self.id,
            "type": self.type.value,
            "status": self.status.value,
            "progress": self.progress,
            "message": self.message,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def check_progress(value: Any, *, task_id: Optional[str] = None) -> float:
    """Return ``value`` as a float, rejecting anything outside [0, 100]."""
    if isinstance(value, bool):
        raise InvalidTransitionError(
            "Progress must be a number", task_id=task_id, requested=value
        )
    try:
        progress = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidTransitionError(
            "Progress must be a number", task_id=task_id, requested=value
        ) from e
    if not PROGRESS_MIN <= progress <= PROGRESS_MAX:
        raise InvalidTransitionError(
            f"Progress must be between {PROGRESS_MIN:g} and {PROGRESS_MAX:g}",
            task_id=task_id,
            requested=progress,
        )
    return progress


def resolve_update(task: Task, updates: dict[str, Any]) -> dict[str, Any]:
    """Validate a patch against the task lifecycle and return normalized fields.

    Rules:
    - completed and failed are terminal: no status change away from them
      and no progress change once reached
    - status only moves along TRANSITIONS
    - progress stays within [0, 100] and never decreases while running
    - completing without an explicit progress sets it to 100

    Raises:
        InvalidTransitionError: when any rule is violated
    """
    resolved = dict(updates)

    status = task.status
    if "status" in resolved:
        try:
            status = TaskStatus(resolved["status"])
        except ValueError as e:
            raise InvalidTransitionError(
                "Unknown task status", task_id=task.id, requested=resolved["status"]
            ) from e
        if status != task.status and status not in TRANSITIONS[task.status]:
            raise InvalidTransitionError(
                f"Cannot move task from {task.status.value} to {status.value}",
                task_id=task.id,
                current=task.status.value,
                requested=status.value,
            )
        resolved["status"] = status

    if "progress" in resolved:
        progress = check_progress(resolved["progress"], task_id=task.id)
        if task.is_terminal and progress != task.progress:
            raise InvalidTransitionError(
                f"Task is {task.status.value}; progress is frozen",
                task_id=task.id,
                current=task.progress,
                requested=progress,
            )
        # Applies to the update that finishes a running task too
        if task.status == TaskStatus.RUNNING and progress < task.progress:
            raise InvalidTransitionError(
                "Progress cannot decrease while running",
                task_id=task.id,
                current=task.progress,
                requested=progress,
            )
        resolved["progress"] = progress
    elif status == TaskStatus.COMPLETED and task.status != TaskStatus.COMPLETED:
        resolved["progress"] = PROGRESS_MAX

    if "message" in resolved:
        resolved["message"] = str(resolved["message"])

    return resolved
