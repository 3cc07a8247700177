from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from task_api.core.errors import FieldError, ValidationFailure
from task_api.models.task import TaskStatus

TITLE_MAX_LENGTH = 200
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_TASK_ID = 2_147_483_647

# ASCII digits only, \d would also accept other scripts' numerals
_INT_RE = re.compile(r"[+-]?[0-9]+")
_TASK_ID_RE = re.compile(r"[0-9]+")


def _check_title(value: str, empty_message: str) -> str:
    # no trimming: "  " is a valid two character title
    if len(value) < 1:
        raise PydanticCustomError("title_empty", empty_message)
    if len(value) > TITLE_MAX_LENGTH:
        raise PydanticCustomError("title_too_long", "Title too long")
    return value


def _parse_int(value: Any, default: int, message: str) -> int:
    """Query-string integer: absent/blank -> default, otherwise base-10 digits only."""
    if value is None:
        return default
    if isinstance(value, bool):
        raise PydanticCustomError("int_parsing", message)
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return default
        if _INT_RE.fullmatch(text):
            return int(text)
    raise PydanticCustomError("int_parsing", message)


# ===== Inputs =====

class CreateTaskInput(BaseModel):
    """POST /tasks body. ``status`` is always populated after validation."""

    title: str = Field(..., description="1-200 characters, kept as sent")
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.PENDING

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        return _check_title(value, "Title is required")


class UpdateTaskInput(BaseModel):
    """
    PUT /tasks/{id} body.

    Absent and null are different things here: only keys present in the
    request end up in ``changes()``. ``description: null`` clears the
    description, ``title``/``status`` may not be null.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[TaskStatus] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: Optional[str]) -> str:
        if value is None:
            raise PydanticCustomError("null_not_allowed", "Title cannot be null")
        return _check_title(value, "Title cannot be empty")

    @field_validator("status")
    @classmethod
    def validate_status(cls, value: Optional[TaskStatus]) -> TaskStatus:
        if value is None:
            raise PydanticCustomError("null_not_allowed", "Status cannot be null")
        return value

    @model_validator(mode="after")
    def require_one_field(self) -> "UpdateTaskInput":
        if not self.model_fields_set:
            raise PydanticCustomError(
                "empty_update",
                "At least one field must be provided for update",
            )
        return self

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class ListTasksQuery(BaseModel):
    """GET /tasks query-string. ``limit``/``offset`` are always integers after validation."""

    status: Optional[TaskStatus] = None
    search: Optional[str] = None
    limit: int = DEFAULT_LIMIT
    offset: int = 0

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, value: Any) -> int:
        limit = _parse_int(value, DEFAULT_LIMIT, "Limit must be an integer")
        if not 1 <= limit <= MAX_LIMIT:
            raise PydanticCustomError(
                "limit_out_of_range",
                "Limit must be between 1 and {max_limit}",
                {"max_limit": MAX_LIMIT},
            )
        return limit

    @field_validator("offset", mode="before")
    @classmethod
    def parse_offset(cls, value: Any) -> int:
        offset = _parse_int(value, 0, "Offset must be an integer")
        if offset < 0:
            raise PydanticCustomError("offset_negative", "Offset must be non-negative")
        return offset


def parse_task_id(raw: str) -> int:
    text = (raw or "").strip()
    if _TASK_ID_RE.fullmatch(text):
        task_id = int(text)
        if 1 <= task_id <= MAX_TASK_ID:
            return task_id
    raise ValidationFailure([FieldError("id", "Task ID must be a positive integer")])


# ===== Outputs =====

class _CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TaskOut(_CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    status: TaskStatus
    created_at: datetime
    updated_at: datetime


class Pagination(_CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class TaskResponse(_CamelModel):
    success: bool = True
    data: TaskOut


class TaskListResponse(_CamelModel):
    success: bool = True
    data: List[TaskOut]
    pagination: Pagination


class TaskDeleteResponse(_CamelModel):
    success: bool = True
    message: str = "Task deleted successfully"
    data: TaskOut


class ErrorDetail(BaseModel):
    field: str
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: Optional[List[ErrorDetail]] = None
    message: Optional[str] = None
