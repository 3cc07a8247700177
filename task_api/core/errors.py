"""
Error taxonomy for the task API.

Every failure the API can report belongs to exactly one ``ErrorKind``. The
exception classes below each pin their kind, so the translator in
``task_api.core.error_handlers`` dispatches on ``error.kind`` instead of on
concrete exception types.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class FieldError:
    """One violated constraint; ``field`` is a dot-joined path, "" for the whole input."""

    field: str
    message: str

    def as_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class TaskApiError(Exception):
    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ValidationFailure(TaskApiError):
    kind = ErrorKind.VALIDATION

    def __init__(self, details: Iterable[FieldError]):
        self.details = list(details)
        super().__init__("; ".join(f"{d.field or '<input>'}: {d.message}" for d in self.details))


class RecordNotFound(TaskApiError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, resource: str = "Task", key: object = None):
        self.resource = resource
        self.key = key
        super().__init__(f"{resource} {key} not found" if key is not None else f"{resource} not found")


class ResourceConflict(TaskApiError):
    kind = ErrorKind.CONFLICT


class UnexpectedError(TaskApiError):
    kind = ErrorKind.UNEXPECTED

    def __init__(self, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(str(cause) if cause is not None else "unexpected error")
