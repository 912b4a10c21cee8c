"""
Typed failures raised by the taskfold core.

Every operation either returns its success payload or raises one of these.
The CLI maps them onto exit codes; the core never terminates the process.
"""

from pathlib import Path


class TaskfoldError(Exception):
    """Base class for all taskfold failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TaskfoldError):
    """A referenced task, note or file does not exist."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class ValidationError(TaskfoldError):
    """
    Missing or malformed input, or a change to an immutable field.

    Not to be confused with pydantic's ValidationError, which the stores
    translate into this type at their boundary.
    """

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class MalformedRecordError(TaskfoldError):
    """A stored task record could not be parsed.

    Collected per record during bulk loads rather than raised.
    """

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Malformed record {path.name}: {reason}")
        self.path = path
        self.reason = reason


class StorageIOError(TaskfoldError):
    """An underlying read, write or move failed. Never retried."""

    def __init__(self, operation: str, path: Path, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(f"Failed to {operation} {path}{detail}")
        self.operation = operation
        self.path = path
        self.cause = cause
