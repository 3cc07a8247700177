import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("ENV", "test")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from task_api.core.config import Settings  # noqa: E402
from task_api.db import base as _base  # noqa: F401,E402
from task_api.db.session import build_engine  # noqa: E402
from task_api.main import create_app  # noqa: E402
from task_api.routers import health as health_router  # noqa: E402
from task_api.routers import task as task_router  # noqa: E402
from task_api.services.task_service import TaskService  # noqa: E402


@pytest.fixture
def engine():
    eng = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as s:
        yield s


@pytest.fixture
def service(db):
    return TaskService(db)


@pytest.fixture
def make_client(engine):
    clients = []

    def _make(env: str = "test", raise_server_exceptions: bool = True) -> TestClient:
        app = create_app(Settings(ENV=env, _env_file=None))

        def _session():
            with Session(engine) as s:
                yield s

        app.dependency_overrides[task_router.get_session] = _session
        app.dependency_overrides[health_router.get_session] = _session
        c = TestClient(app, raise_server_exceptions=raise_server_exceptions)
        clients.append(c)
        return c

    yield _make
    for c in clients:
        c.close()


@pytest.fixture
def client(make_client):
    return make_client()
