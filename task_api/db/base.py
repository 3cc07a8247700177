"""Centralized SQLModel imports to ensure metadata is populated."""

from task_api.models import task as _task  # noqa: F401
