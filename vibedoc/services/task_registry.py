"""Task Registry - Tracks generation jobs executed outside this process.

A job driver registers a task when it submits a documentation, podcast
or video job, feeds it status/progress updates as the job runs, and
removes it on cancellation. UI consumers only read.
"""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from ..exceptions import InvalidTransitionError, PatchError, TaskNotFoundError
from ..models.patching import apply_patch, check_patch
from ..models.tasks import (
    EDITABLE_FIELDS,
    Task,
    TaskStatus,
    TaskType,
    check_progress,
    resolve_update,
)

logger = logging.getLogger(__name__)


class TaskRegistry:
    """Thread-safe registry of task records keyed by id.

    Records are immutable. Every mutation builds a new mapping and swaps
    it in under the lock, so a snapshot handed to a reader never changes
    underneath it and a half-merged record is never observable.

    Usage:
        registry = TaskRegistry()

        # Register a new task
        registry.add_task("t1", TaskType.PODCAST_CREATION, message="Queued")

        # Report progress from the job driver
        registry.update_task("t1", status="running", progress=45)

        # Get all tasks
        tasks = registry.list()

        # Cancel
        registry.remove_task("t1")
    """

    def __init__(self, clock: Callable[[], datetime] = datetime.now) -> None:
        self._tasks: Dict[str, Task] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def add_task(
        self,
        task_id: str,
        task_type: Union[TaskType, str],
        *,
        status: Union[TaskStatus, str] = TaskStatus.PENDING,
        progress: float = 0.0,
        message: str = "",
    ) -> Task:
        """Register a task, stamping its creation time.

        Re-registering an existing id replaces the old record entirely;
        nothing from the previous record is carried over. This is how a
        failed job is retried.

        Args:
            task_id: Caller-supplied unique key
            task_type: Kind of generation job
            status: Initial status
            progress: Initial progress, within [0, 100]
            message: Initial status text

        Returns:
            The registered task
        """
        try:
            task_type = TaskType(task_type)
            status = TaskStatus(status)
        except ValueError as e:
            raise InvalidTransitionError(str(e), task_id=task_id) from e
        now = self._clock()
        task = Task(
            id=task_id,
            type=task_type,
            status=status,
            progress=check_progress(progress, task_id=task_id),
            message=message,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            replaced = task_id in self._tasks
            tasks = dict(self._tasks)
            tasks[task_id] = task
            self._tasks = tasks
        if replaced:
            logger.debug(f"Re-registered task {task_id} ({task_type.value})")
        else:
            logger.debug(f"Registered task {task_id} ({task_type.value})")
        return task

    def update_task(self, task_id: str, **updates: Any) -> Task:
        """Merge status, progress and/or message into an existing task.

        Omitted fields are left untouched.

        Args:
            task_id: ID of the task to update
            **updates: Any of status, progress, message

        Returns:
            The updated task

        Raises:
            PatchError: an unknown or read-only field was given
            TaskNotFoundError: no task with this id
            InvalidTransitionError: the update breaks the lifecycle rules
        """
        with self._lock:
            task = self._tasks.get(task_id)
            if task is None:
                raise TaskNotFoundError(task_id=task_id)
            try:
                check_patch(updates, EDITABLE_FIELDS, target="task")
                resolved = resolve_update(task, updates)
            except (PatchError, InvalidTransitionError) as e:
                logger.warning(f"Rejected update for task {task_id}: {e}")
                raise
            if resolved:
                resolved["updated_at"] = self._clock()
            updated = apply_patch(task, resolved, (*EDITABLE_FIELDS, "updated_at"), target="task")
            tasks = dict(self._tasks)
            tasks[task_id] = updated
            self._tasks = tasks

        if updated.status != task.status:
            logger.debug(f"Task {task_id}: {task.status.value} -> {updated.status.value}")
        return updated

    def remove_task(self, task_id: str) -> Optional[Task]:
        """Remove a task, e.g. on user cancellation.

        The external job executor is not notified.

        Args:
            task_id: ID of the task to remove

        Returns:
            The removed task, or None if not found
        """
        with self._lock:
            if task_id not in self._tasks:
                return None
            tasks = dict(self._tasks)
            task = tasks.pop(task_id)
            self._tasks = tasks
        logger.debug(f"Removed task {task_id}")
        return task

    def get(self, task_id: str) -> Optional[Task]:
        """Get a task by ID.

        Returns:
            The task, or None if not found
        """
        return self._tasks.get(task_id)

    def list(
        self,
        task_type: Optional[Union[TaskType, str]] = None,
        status: Optional[Union[TaskStatus, str]] = None,
    ) -> List[Task]:
        """Get a snapshot of tasks, newest first.

        Args:
            task_type: Only tasks of this type
            status: Only tasks with this status
        """
        tasks = list(self._tasks.values())
        if task_type is not None:
            tasks = [t for t in tasks if t.type == TaskType(task_type)]
        if status is not None:
            tasks = [t for t in tasks if t.status == TaskStatus(status)]
        return sorted(tasks, key=lambda t: t.created_at, reverse=True)

    def active(self) -> List[Task]:
        """Tasks that have not reached a terminal status."""
        return [t for t in self.list() if not t.is_terminal]

    def count(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def clear(self) -> None:
        """Drop every task (app teardown and tests)."""
        with self._lock:
            self._tasks = {}
