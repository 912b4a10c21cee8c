"""
Configuration data models for taskfold.

These models define the structure of .taskfold.json and
~/.config/taskfold/config.json files, with validation via Pydantic.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskfold.core.tasks.models import DEFAULT_OWNER


class StorageConfig(BaseModel):
    """
    Where project data lives on disk.

    ``tasks_dir`` and ``thoughts_dir`` are relative to ``project_root``.
    """
    project_root: str = Field(
        default=".project",
        description="Project data directory, relative to the working directory"
    )
    tasks_dir: str = Field(
        default="tasks",
        description="Task records directory inside the project root"
    )
    thoughts_dir: str = Field(
        default="thoughts/todos",
        description="Thought inbox directory inside the project root"
    )

    @field_validator("project_root", "tasks_dir", "thoughts_dir")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("path must not be empty")
        return v.strip()

    def root_path(self, base: Path | None = None) -> Path:
        """Absolute-or-relative project root resolved against ``base``."""
        root = Path(self.project_root).expanduser()
        if base is not None and not root.is_absolute():
            root = base / root
        return root

    def tasks_path(self, base: Path | None = None) -> Path:
        return self.root_path(base) / self.tasks_dir

    def thoughts_path(self, base: Path | None = None) -> Path:
        return self.root_path(base) / self.thoughts_dir


class ExtractionConfig(BaseModel):
    """Tuning knobs for thought processing."""
    min_confidence: int = Field(
        default=30,
        ge=0,
        le=100,
        description="Candidates scoring below this are dropped"
    )
    related_limit: int = Field(
        default=3,
        ge=0,
        description="Maximum related tasks reported per suggestion"
    )
    title_max_length: int = Field(
        default=80,
        ge=10,
        description="Generated titles are truncated to this length"
    )
    context_size: int = Field(
        default=3,
        ge=0,
        description="Preceding plain lines kept as context for each candidate"
    )


class TaskfoldConfig(BaseModel):
    """
    Top-level taskfold configuration.

    Loaded from defaults, user config, project config, and env vars.

    Example:
        >>> config = TaskfoldConfig(extraction=ExtractionConfig(min_confidence=50))
        >>> config.storage.project_root
        '.project'
    """
    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="On-disk layout"
    )
    extraction: ExtractionConfig = Field(
        default_factory=ExtractionConfig,
        description="Thought processing settings"
    )
    default_owner: str = Field(
        default=DEFAULT_OWNER,
        description="Owner assigned to new tasks when none is given"
    )

    model_config = ConfigDict(
        extra="allow",  # Allow extra fields for forward compatibility
        validate_assignment=True,
    )
