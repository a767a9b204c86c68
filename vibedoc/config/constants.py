"""
Centralized constants for vibedoc.

Bounds, defaults and locations used by the task registry, the content
tree and the persisted preferences live here.
"""

from pathlib import Path

# =============================================================================
# CONFIG LOCATION
# =============================================================================

# Overridden at call time by the VIBEDOC_CONFIG_DIR environment variable.
DEFAULT_CONFIG_DIR = Path.home() / ".config" / "vibedoc"
CONFIG_DIR_ENV_VAR = "VIBEDOC_CONFIG_DIR"
UI_CONFIG_FILENAME = "ui_config.json"

# =============================================================================
# TASK PROGRESS
# =============================================================================

PROGRESS_MIN = 0.0
PROGRESS_MAX = 100.0

# =============================================================================
# PERSISTED PREFERENCES
# =============================================================================

THEMES = ("light", "dark")
VIEW_MODES = ("html", "markdown")

DEFAULT_THEME = "dark"
DEFAULT_VIEW_MODE = "html"
DEFAULT_SIDEBAR_WIDTH = 300  # pixels
SIDEBAR_MIN_WIDTH = 150
SIDEBAR_MAX_WIDTH = 800

# =============================================================================
# DISPLAY
# =============================================================================

DIALOGUE_PREVIEW_LENGTH = 80  # Dialogue text truncation in tree views
SUMMARY_PREVIEW_LENGTH = 100  # Cluster summary truncation
