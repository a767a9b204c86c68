"""Custom exception hierarchy for vibedoc.

Every mutation on the task registry and the content tree reports failure
by raising one of these, instead of silently ignoring the call. Callers
(UI handlers, job drivers) decide whether to log, retry or ignore.

Exception Hierarchy:
    VibedocError (base)
    ├── NotFoundError - referenced entity is not in current state
    │   ├── TaskNotFoundError
    │   ├── ClusterNotFoundError
    │   ├── DialogueNotFoundError
    │   └── ContentNotLoadedError
    ├── InvalidTransitionError - task status/progress rule violated
    ├── PatchError - update carried unknown or immutable fields
    ├── PodcastDataError - podcast document failed schema checks
    └── ConfigurationError - settings/preferences issues

Usage:
    from vibedoc.exceptions import TaskNotFoundError

    try:
        registry.update_task("t1", progress=50)
    except TaskNotFoundError as e:
        logger.info("Dropping stale progress callback: %s", e)
"""

from typing import Any, Iterable, Optional


class VibedocError(Exception):
    """Base exception for all vibedoc errors.

    Attributes:
        message: Human-readable error description
        context: Additional context about the error (e.g., IDs, statuses)
        retryable: Whether this error might succeed on retry
    """

    def __init__(
        self,
        message: str,
        *,
        retryable: bool = False,
        **context: Any,
    ) -> None:
        self.message = message
        self.context = context
        self.retryable = retryable
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with context."""
        if self.context:
            context_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


# =============================================================================
# Lookup Errors
# =============================================================================


class NotFoundError(VibedocError):
    """Base exception for references to entities absent from current state."""

    pass


class TaskNotFoundError(NotFoundError):
    """No task with the given id is registered."""

    def __init__(
        self,
        message: str = "Task not found",
        *,
        task_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if task_id is not None:
            context["task_id"] = task_id
        super().__init__(message, **context)


class ClusterNotFoundError(NotFoundError):
    """No cluster with the given id exists in the current podcast script."""

    def __init__(
        self,
        message: str = "Cluster not found",
        *,
        cluster_id: Optional[str] = None,
        **context: Any,
    ) -> None:
        if cluster_id is not None:
            context["cluster_id"] = cluster_id
        super().__init__(message, **context)


class DialogueNotFoundError(NotFoundError):
    """The cluster exists but holds no dialogue with the given id."""

    def __init__(
        self,
        message: str = "Dialogue not found",
        *,
        cluster_id: Optional[str] = None,
        dialogue_id: Optional[int] = None,
        **context: Any,
    ) -> None:
        if cluster_id is not None:
            context["cluster_id"] = cluster_id
        if dialogue_id is not None:
            context["dialogue_id"] = dialogue_id
        super().__init__(message, **context)


class ContentNotLoadedError(NotFoundError):
    """An edit targeted the content tree while no podcast script is loaded."""

    def __init__(self, message: str = "No podcast script loaded", **context: Any) -> None:
        super().__init__(message, **context)


# =============================================================================
# Task Lifecycle Errors
# =============================================================================


class InvalidTransitionError(VibedocError):
    """A task update would break the status state machine or progress bounds."""

    def __init__(
        self,
        message: str = "Invalid task transition",
        *,
        task_id: Optional[str] = None,
        current: Optional[Any] = None,
        requested: Optional[Any] = None,
        **context: Any,
    ) -> None:
        if task_id is not None:
            context["task_id"] = task_id
        if current is not None:
            context["current"] = current
        if requested is not None:
            context["requested"] = requested
        super().__init__(message, **context)


# =============================================================================
# Data Errors
# =============================================================================


class PatchError(VibedocError):
    """A partial update named fields that are unknown or not editable."""

    def __init__(
        self,
        message: str = "Invalid update fields",
        *,
        fields: Optional[Iterable[str]] = None,
        **context: Any,
    ) -> None:
        if fields is not None:
            context["fields"] = sorted(fields)
        super().__init__(message, **context)


class PodcastDataError(VibedocError):
    """A podcast document does not match the expected shape."""

    def __init__(
        self,
        message: str = "Invalid podcast data",
        *,
        path: Optional[str] = None,
        **context: Any,
    ) -> None:
        if path:
            context["path"] = path
        super().__init__(message, **context)


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(VibedocError):
    """Configuration or settings error."""

    def __init__(
        self,
        message: str = "Configuration error",
        *,
        setting: Optional[str] = None,
        **context: Any,
    ) -> None:
        if setting:
            context["setting"] = setting
        super().__init__(message, **context)
