"""Application state container.

Constructed once at startup and passed to whatever needs it. Keeps the
durable preferences apart from the volatile task registry and content
tree: only preferences ever reach disk, and only when one changes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from ..config.ui_config import Preferences, load_ui_config, save_ui_config, validate_preference
from ..exceptions import InvalidTransitionError, TaskNotFoundError
from ..models.podcast import PodcastData
from ..models.tasks import Task, TaskStatus, TaskType, resolve_update
from .content_tree import ContentTree
from .task_registry import TaskRegistry

logger = logging.getLogger(__name__)


class AppState:
    """Owns one TaskRegistry, one ContentTree and the persisted preferences.

    Usage:
        with AppState() as state:
            state.tasks.add_task("t1", "podcast_creation")
            ...
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = config_dir
        self.tasks = TaskRegistry()
        self.content = ContentTree()
        self._preferences: Preferences = load_ui_config(config_dir)
        self._unsaved = False
        self._closed = False
        logger.debug("AppState ready (preferences=%s)", dict(self._preferences))

    @property
    def preferences(self) -> Preferences:
        return {**self._preferences}  # type: ignore[return-value]

    def set_preference(self, key: str, value: Any) -> Any:
        """Validate and store one preference; saved immediately.

        Raises:
            ConfigurationError: unknown key or invalid value
        """
        normalized = validate_preference(key, value)
        self._preferences[key] = normalized  # type: ignore[literal-required]
        self._unsaved = not save_ui_config(self._preferences, self._config_dir)
        return normalized

    def complete_podcast_generation(
        self,
        task_id: str,
        data: Union[PodcastData, Mapping[str, Any]],
        message: str = "Podcast script ready",
    ) -> Task:
        """Load a finished script and mark its podcast task completed.

        The payload and the transition are both checked before anything
        changes, so a rejected call leaves the tree and the task as they
        were. The tree is then replaced first, so a consumer that sees the
        completed task can read the script. No link between the two is
        stored.

        Raises:
            TaskNotFoundError: no task with this id
            InvalidTransitionError: the task is not a podcast_creation task
                or is already terminal with a different status
            PodcastDataError: the payload is malformed
        """
        task = self.tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id=task_id)
        if task.type != TaskType.PODCAST_CREATION:
            raise InvalidTransitionError(
                "Only podcast_creation tasks produce a podcast script",
                task_id=task_id,
                current=task.type.value,
            )
        if not isinstance(data, PodcastData):
            data = PodcastData.from_dict(data)
        resolve_update(task, {"status": TaskStatus.COMPLETED})
        self.content.set_podcast_data(data)
        return self.tasks.update_task(task_id, status=TaskStatus.COMPLETED, message=message)

    def close(self) -> None:
        """Retry any unsaved preference write and drop all volatile state.

        Nothing touches disk when no preference was changed.
        """
        if self._closed:
            return
        if self._unsaved:
            save_ui_config(self._preferences, self._config_dir)
        self.tasks.clear()
        self.content.reset()
        self._closed = True
        logger.debug("AppState closed")

    def __enter__(self) -> "AppState":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
