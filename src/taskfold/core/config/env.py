"""
Layered .env loading.

Variables already exported in the shell always win. Below that, files are
applied in order, each overriding the ones before it:

    $XDG_CONFIG_HOME/taskfold/.env  <  .env  <  .env.local
"""

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from dotenv import dotenv_values

from .loader import USER_CONFIG_DIRNAME, get_xdg_config_home

logger = logging.getLogger(__name__)

PROJECT_ENV_FILENAMES = (".env", ".env.local")


def default_user_env_paths() -> list[Path]:
    return [get_xdg_config_home() / USER_CONFIG_DIRNAME / ".env"]


def default_project_env_paths(project_dir: Path) -> list[Path]:
    return [project_dir / name for name in PROJECT_ENV_FILENAMES]


def read_env_file(path: Path) -> dict[str, str]:
    """Variables declared in a dotenv file. Keys without a value are skipped."""
    if not path.is_file():
        return {}
    values = {key: value for key, value in dotenv_values(path).items() if value is not None}
    logger.debug("Read %d variable(s) from %s", len(values), path)
    return values


def load_layered_env(
    *,
    project_dir: Path | None = None,
    user_env_paths: Iterable[Path] | None = None,
    project_env_paths: Iterable[Path] | None = None,
) -> dict[str, str]:
    """
    Export variables from the user and project .env files into os.environ.

    Args:
        project_dir: Directory holding the project .env files (defaults to cwd)
        user_env_paths: Override the user-level files
        project_env_paths: Override the project-level files

    Returns:
        The variables this call exported
    """
    project_dir = project_dir or Path.cwd()
    if user_env_paths is None:
        user_env_paths = default_user_env_paths()
    if project_env_paths is None:
        project_env_paths = default_project_env_paths(project_dir)

    shell_keys = set(os.environ)
    exported: dict[str, str] = {}
    for path in [*user_env_paths, *project_env_paths]:
        for key, value in read_env_file(Path(path)).items():
            if key not in shell_keys:
                exported[key] = value

    os.environ.update(exported)
    return exported
