"""Reset the task table and insert a handful of sample tasks."""
import logging
import os
import sys

from sqlalchemy import delete
from sqlmodel import SQLModel

# Add parent directory to path so task_api imports work when run as a script
sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from dotenv import load_dotenv  # noqa: E402

load_dotenv()

from task_api.core.logging_config import setup_logging  # noqa: E402
from task_api.db import base  # noqa: F401,E402
from task_api.db.session import engine, session_scope  # noqa: E402
from task_api.models.task import Task, TaskStatus, utcnow  # noqa: E402

log = logging.getLogger("seed_db")

SAMPLE_TASKS = [
    ("Complete project documentation", "Write comprehensive README and API documentation", TaskStatus.COMPLETED),
    ("Implement user authentication", "Add JWT-based authentication system", TaskStatus.IN_PROGRESS),
    ("Set up CI/CD pipeline", "Configure GitHub Actions for automated testing and deployment", TaskStatus.PENDING),
    ("Write unit tests", "Add test coverage for all endpoints", TaskStatus.PENDING),
    ("Deploy to production", "Deploy the API server to cloud platform", TaskStatus.PENDING),
]


def run_seed() -> int:
    SQLModel.metadata.create_all(engine)

    with session_scope() as db:
        db.execute(delete(Task))
        for title, description, status in SAMPLE_TASKS:
            now = utcnow()
            db.add(Task(title=title, description=description, status=status, created_at=now, updated_at=now))
        db.commit()

    log.info("Created %d tasks", len(SAMPLE_TASKS))
    return len(SAMPLE_TASKS)


if __name__ == "__main__":
    setup_logging()
    run_seed()
