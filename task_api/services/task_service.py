from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import and_, func, or_
from sqlmodel import Session, select

from task_api.core.errors import RecordNotFound
from task_api.models.task import Task, utcnow
from task_api.schemas.task import CreateTaskInput, ListTasksQuery, Pagination, UpdateTaskInput

log = logging.getLogger(__name__)


@dataclass
class TaskPage:
    items: List[Task]
    pagination: Pagination


def build_task_filter(query: ListTasksQuery):
    """
    status -> exact match, search -> substring of title OR description.
    Both present are ANDed. Returns None when nothing filters.

    The substring test is literal (LIKE wildcards escaped) and case-sensitive.
    """
    conditions = []
    if query.status is not None:
        conditions.append(Task.status == query.status)
    if query.search:
        conditions.append(
            or_(
                Task.title.contains(query.search, autoescape=True),
                Task.description.contains(query.search, autoescape=True),
            )
        )
    if not conditions:
        return None
    return and_(*conditions)


class TaskService:
    """All task persistence goes through here. Inputs are expected to be validated already."""

    def __init__(self, session: Session):
        self.session = session

    def create_task(self, data: CreateTaskInput) -> Task:
        now = utcnow()
        task = Task(
            title=data.title,
            description=data.description,
            status=data.status,
            created_at=now,
            updated_at=now,
        )
        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        log.info("task created id=%s", task.id)
        return task

    def list_tasks(self, query: ListTasksQuery) -> TaskPage:
        where = build_task_filter(query)

        stmt = select(Task).order_by(Task.created_at.desc(), Task.id.desc())
        count_stmt = select(func.count()).select_from(Task)
        if where is not None:
            stmt = stmt.where(where)
            count_stmt = count_stmt.where(where)
        total = self.session.exec(count_stmt).one()
        # past the last row the page is empty; offset may exceed any SQL integer
        if query.offset >= total:
            items = []
        else:
            stmt = stmt.offset(query.offset).limit(query.limit)
            items = list(self.session.exec(stmt).all())

        return TaskPage(
            items=items,
            pagination=Pagination(
                total=total,
                limit=query.limit,
                offset=query.offset,
                has_more=(query.offset + query.limit) < total,
            ),
        )

    def get_task(self, task_id: int) -> Optional[Task]:
        return self.session.get(Task, task_id)

    def update_task(self, task_id: int, data: UpdateTaskInput) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise RecordNotFound("Task", task_id)

        for field, value in data.changes().items():
            setattr(task, field, value)
        task.updated_at = max(utcnow(), task.created_at)

        self.session.add(task)
        self.session.commit()
        self.session.refresh(task)
        log.info("task updated id=%s", task_id)
        return task

    def delete_task(self, task_id: int) -> Task:
        task = self.session.get(Task, task_id)
        if task is None:
            raise RecordNotFound("Task", task_id)

        self.session.delete(task)
        self.session.commit()
        log.info("task deleted id=%s", task_id)
        return task
