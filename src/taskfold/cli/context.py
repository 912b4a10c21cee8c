"""
Shared command plumbing: configuration and store construction.

The root callback loads configuration once per invocation and stores it on
the Typer context; sub-apps invoked directly (as in tests) load it lazily.
"""

import json
import sys
from pathlib import Path
from typing import Any

import typer

from taskfold.core.config import TaskfoldConfig, load_config
from taskfold.core.tasks.store import TaskStore
from taskfold.core.thoughts.store import ThoughtStore


def get_config(ctx: typer.Context) -> TaskfoldConfig:
    """Configuration for this invocation."""
    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        config = load_config()
        obj["config"] = config
    return config


def project_root(config: TaskfoldConfig) -> Path:
    return config.storage.root_path()


def get_task_store(config: TaskfoldConfig) -> TaskStore:
    return TaskStore(config.storage.tasks_path())


def get_thought_store(config: TaskfoldConfig) -> ThoughtStore:
    return ThoughtStore(config.storage.thoughts_path())


def print_json(data: Any) -> None:
    """Write JSON to stdout unstyled so it stays machine-readable."""
    sys.stdout.write(json.dumps(data, indent=2, default=str))
    sys.stdout.write("\n")
