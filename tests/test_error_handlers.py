import json
import logging
import sqlite3

import pytest
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import IntegrityError, NoResultFound

from task_api.core.error_handlers import error_response, field_errors, to_api_error, translate
from task_api.core.errors import (
    ErrorKind,
    FieldError,
    RecordNotFound,
    ResourceConflict,
    UnexpectedError,
    ValidationFailure,
)
from task_api.services.task_service import TaskService


class _User(BaseModel):
    name: str


class _Payload(BaseModel):
    user: _User
    title: str


class _PgError(Exception):
    def __init__(self, pgcode):
        super().__init__(f"pg error {pgcode}")
        self.pgcode = pgcode


def _body(resp) -> dict:
    return json.loads(resp.body)


def _validation_error() -> ValidationError:
    with pytest.raises(ValidationError) as excinfo:
        _Payload.model_validate({"user": {}})
    return excinfo.value


# ===== classification =====

def test_pydantic_errors_become_validation_failure_with_nested_paths():
    error = to_api_error(_validation_error())

    assert error.kind is ErrorKind.VALIDATION
    assert [d.field for d in error.details] == ["user.name", "title"]


def test_field_errors_strip_transport_prefix():
    details = field_errors(
        [
            {"loc": ("body", "title"), "msg": "Title is required"},
            {"loc": ("query", "limit"), "msg": "bad"},
            {"loc": ("body",), "msg": "At least one field must be provided for update"},
        ]
    )

    assert details == [
        FieldError("title", "Title is required"),
        FieldError("limit", "bad"),
        FieldError("", "At least one field must be provided for update"),
    ]


def test_no_result_found_is_not_found():
    assert to_api_error(NoResultFound()).kind is ErrorKind.NOT_FOUND


@pytest.mark.parametrize(
    "orig",
    [sqlite3.IntegrityError("UNIQUE constraint failed: task.title"), _PgError("23505")],
)
def test_unique_violation_is_conflict(orig):
    exc = IntegrityError("INSERT INTO task ...", {}, orig)

    assert isinstance(to_api_error(exc), ResourceConflict)


def test_other_integrity_error_is_unexpected():
    exc = IntegrityError("INSERT INTO task ...", {}, _PgError("23503"))

    assert to_api_error(exc).kind is ErrorKind.UNEXPECTED


def test_anything_else_is_unexpected():
    error = to_api_error(RuntimeError("storage unavailable"))

    assert isinstance(error, UnexpectedError)
    assert error.message == "storage unavailable"


def test_api_errors_pass_through():
    err = RecordNotFound("Task", 1)

    assert to_api_error(err) is err


# ===== response shapes =====

def test_validation_response_shape():
    resp = error_response(ValidationFailure([FieldError("title", "Title is required")]))

    assert resp.status_code == 400
    assert _body(resp) == {
        "success": False,
        "error": "Validation error",
        "details": [{"field": "title", "message": "Title is required"}],
    }


@pytest.mark.parametrize(
    ("error", "status", "summary"),
    [
        (RecordNotFound("Task", 5), 404, "Resource not found"),
        (ResourceConflict("dup"), 409, "Resource already exists"),
        (UnexpectedError(RuntimeError("boom")), 500, "Internal server error"),
    ],
)
def test_non_validation_responses_have_no_details(error, status, summary):
    resp = error_response(error)

    assert resp.status_code == status
    assert _body(resp) == {"success": False, "error": summary}


def test_unexpected_message_only_in_diagnostic_mode():
    error = UnexpectedError(RuntimeError("Something went wrong"))

    assert "message" not in _body(error_response(error, expose_details=False))
    assert _body(error_response(error, expose_details=True))["message"] == "Something went wrong"


def test_diagnostic_mode_never_adds_message_to_client_errors():
    resp = error_response(RecordNotFound(), expose_details=True)

    assert "message" not in _body(resp)


def test_translate_logs_unexpected_errors(caplog):
    with caplog.at_level(logging.ERROR, logger="task_api.core.error_handlers"):
        translate(RuntimeError("Test error"))

    assert any("Test error" in r.getMessage() for r in caplog.records)


# ===== through the app =====

def _break_listing(monkeypatch):
    def _boom(self, query):
        raise RuntimeError("database is unavailable")

    monkeypatch.setattr(TaskService, "list_tasks", _boom)


def test_unexpected_error_hidden_outside_dev(make_client, monkeypatch):
    _break_listing(monkeypatch)
    client = make_client(env="prod")

    resp = client.get("/tasks")

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": "Internal server error"}


def test_unexpected_error_detail_in_dev(make_client, monkeypatch):
    _break_listing(monkeypatch)
    client = make_client(env="dev")

    resp = client.get("/tasks")

    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "Internal server error",
        "message": "database is unavailable",
    }


def test_unexpected_error_is_fully_handled_and_logged_once(make_client, monkeypatch, caplog):
    _break_listing(monkeypatch)
    # a re-raised exception would surface here since server exceptions are not suppressed
    client = make_client(env="prod", raise_server_exceptions=True)

    with caplog.at_level(logging.ERROR):
        resp = client.get("/tasks")

    assert resp.status_code == 500
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert "database is unavailable" in errors[0].getMessage()
