"""
vibedoc UI Configuration.

Handles persistence of UI preferences: theme, documentation view mode
and sidebar width. These are the only fields that survive a restart;
task tracking and the podcast script are deliberately kept in memory.
Config is stored in ~/.config/vibedoc/ui_config.json
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, TypedDict

from ..exceptions import ConfigurationError
from .constants import (
    CONFIG_DIR_ENV_VAR,
    DEFAULT_CONFIG_DIR,
    DEFAULT_SIDEBAR_WIDTH,
    DEFAULT_THEME,
    DEFAULT_VIEW_MODE,
    SIDEBAR_MAX_WIDTH,
    SIDEBAR_MIN_WIDTH,
    THEMES,
    UI_CONFIG_FILENAME,
    VIEW_MODES,
)

logger = logging.getLogger(__name__)


class Preferences(TypedDict):
    """The persisted subset of application state."""

    theme: str
    view_mode: str
    sidebar_width: int


DEFAULT_CONFIG: Preferences = {
    "theme": DEFAULT_THEME,
    "view_mode": DEFAULT_VIEW_MODE,
    "sidebar_width": DEFAULT_SIDEBAR_WIDTH,
}


def get_config_dir() -> Path:
    """Get the config directory, respecting the VIBEDOC_CONFIG_DIR environment variable.

    When running tests, set VIBEDOC_CONFIG_DIR to a temp directory to keep
    tests away from the real preferences.
    """
    override = os.environ.get(CONFIG_DIR_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_DIR


def get_ui_config_path(config_dir: Path | None = None) -> Path:
    """
    Get path to UI config file.

    Args:
        config_dir: Directory override, defaults to get_config_dir()

    Returns:
        Path to ui_config.json
    """
    base = config_dir if config_dir is not None else get_config_dir()
    return base / UI_CONFIG_FILENAME


def validate_preference(key: str, value: Any) -> Any:
    """
    Check a single preference and return its normalized value.

    Raises:
        ConfigurationError: unknown key or out-of-range value
    """
    if key == "theme":
        if value not in THEMES:
            raise ConfigurationError(f"Theme must be one of {THEMES}", setting=key, value=value)
        return value
    if key == "view_mode":
        if value not in VIEW_MODES:
            raise ConfigurationError(
                f"View mode must be one of {VIEW_MODES}", setting=key, value=value
            )
        return value
    if key == "sidebar_width":
        try:
            width = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError("Sidebar width must be an integer", setting=key) from e
        if not SIDEBAR_MIN_WIDTH <= width <= SIDEBAR_MAX_WIDTH:
            raise ConfigurationError(
                f"Sidebar width must be between {SIDEBAR_MIN_WIDTH} and {SIDEBAR_MAX_WIDTH}",
                setting=key,
                value=width,
            )
        return width
    raise ConfigurationError("Unknown preference", setting=key)


def load_ui_config(config_dir: Path | None = None) -> Preferences:
    """
    Load UI configuration from file.

    Unknown keys and invalid values in the file are dropped in favour
    of defaults.

    Returns:
        Preferences dict, or defaults if file doesn't exist or is invalid
    """
    path = get_ui_config_path(config_dir)
    config: Preferences = {**DEFAULT_CONFIG}
    if not path.exists():
        return config
    try:
        raw = json.loads(path.read_text())
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Ignoring unreadable UI config %s: %s", path, e)
        return config
    if not isinstance(raw, dict):
        return config

    for key in DEFAULT_CONFIG:
        if key not in raw:
            continue
        try:
            config[key] = validate_preference(key, raw[key])  # type: ignore[literal-required]
        except ConfigurationError as e:
            logger.warning("Ignoring invalid preference in %s: %s", path, e)
    return config


def save_ui_config(config: Preferences, config_dir: Path | None = None) -> bool:
    """
    Save UI configuration to file, creating the config directory if needed.

    Args:
        config: Preferences to save

    Returns:
        True if the file was written
    """
    path = get_ui_config_path(config_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(dict(config), indent=2) + "\n")
    except OSError as e:
        # Preferences are non-critical
        logger.warning("Could not save UI config to %s: %s", path, e)
        return False
    return True
