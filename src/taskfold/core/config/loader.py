"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from .models import TaskfoldConfig

logger = logging.getLogger(__name__)

USER_CONFIG_DIRNAME = "taskfold"
PROJECT_CONFIG_FILENAME = ".taskfold.json"


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Path to ~/.config/taskfold/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / USER_CONFIG_DIRNAME / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .taskfold.json in the working directory
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / PROJECT_CONFIG_FILENAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> base = {"a": 1, "b": {"x": 10, "y": 20}}
        >>> override = {"b": {"y": 30, "z": 40}, "c": 3}
        >>> deep_merge(base, override)
        {'a': 1, 'b': {'x': 10, 'y': 30, 'z': 40}, 'c': 3}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Invalid files are logged and skipped so a broken config never blocks
    the tool.
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None

    if isinstance(data, dict):
        return data
    logger.warning("Ignoring config at %s: top level must be an object", path)
    return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        TASKFOLD_PROJECT_ROOT - overrides storage.project_root
        TASKFOLD_MIN_CONFIDENCE - overrides extraction.min_confidence

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if root := os.environ.get("TASKFOLD_PROJECT_ROOT"):
        result["storage"] = {**result.get("storage", {}), "project_root": root}

    if confidence_str := os.environ.get("TASKFOLD_MIN_CONFIDENCE"):
        try:
            confidence = int(confidence_str)
        except ValueError:
            logger.warning("Invalid TASKFOLD_MIN_CONFIDENCE value '%s', ignoring", confidence_str)
        else:
            if 0 <= confidence <= 100:
                result["extraction"] = {
                    **result.get("extraction", {}),
                    "min_confidence": confidence,
                }
            else:
                logger.warning(
                    "TASKFOLD_MIN_CONFIDENCE must be between 0 and 100, got %d, ignoring",
                    confidence,
                )

    return result


def load_config(project_dir: Path | None = None) -> TaskfoldConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (TASKFOLD_*)
        2. Project config (.taskfold.json)
        3. User config (~/.config/taskfold/config.json)
        4. Model defaults

    Every call reads the files again; nothing is cached between calls.

    Args:
        project_dir: Directory to load .taskfold.json from (defaults to cwd)

    Returns:
        Validated TaskfoldConfig instance

    Raises:
        pydantic.ValidationError: If the merged config fails validation

    Example:
        >>> config = load_config()
        >>> config.extraction.min_confidence
        30
    """
    merged: dict[str, Any] = {}

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)
    return TaskfoldConfig(**merged)
