"""Stateful services: task registry, content tree, app state."""

from .app_state import AppState
from .content_tree import ContentTree, TreeSnapshot
from .task_registry import TaskRegistry

__all__ = ["AppState", "ContentTree", "TaskRegistry", "TreeSnapshot"]
