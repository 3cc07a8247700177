# task_api/routers/task.py
from fastapi import APIRouter, Depends, Path, Request, status
from sqlmodel import Session

from task_api.core.errors import RecordNotFound
from task_api.db.session import get_session
from task_api.schemas.task import (
    CreateTaskInput,
    ErrorResponse,
    ListTasksQuery,
    TaskDeleteResponse,
    TaskListResponse,
    TaskOut,
    TaskResponse,
    UpdateTaskInput,
    parse_task_id,
)
from task_api.services.task_service import TaskService

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)

_NOT_FOUND = {404: {"model": ErrorResponse}}


def get_task_service(db: Session = Depends(get_session)) -> TaskService:
    return TaskService(db)


def valid_task_id(task_id: str = Path(..., description="Positive integer task id")) -> int:
    return parse_task_id(task_id)


def list_query(request: Request) -> ListTasksQuery:
    # query-string values arrive as strings; the model does the parsing
    return ListTasksQuery.model_validate(dict(request.query_params))


def _out(task) -> TaskOut:
    return TaskOut.model_validate(task, from_attributes=True)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: CreateTaskInput,
    service: TaskService = Depends(get_task_service),
):
    task = service.create_task(payload)
    return TaskResponse(data=_out(task))


@router.get("", response_model=TaskListResponse)
def list_tasks(
    query: ListTasksQuery = Depends(list_query),
    service: TaskService = Depends(get_task_service),
):
    page = service.list_tasks(query)
    return TaskListResponse(
        data=[_out(t) for t in page.items],
        pagination=page.pagination,
    )


@router.get("/{task_id}", response_model=TaskResponse, responses=_NOT_FOUND)
def get_task(
    task_id: int = Depends(valid_task_id),
    service: TaskService = Depends(get_task_service),
):
    task = service.get_task(task_id)
    if task is None:
        raise RecordNotFound("Task", task_id)
    return TaskResponse(data=_out(task))


@router.put("/{task_id}", response_model=TaskResponse, responses=_NOT_FOUND)
def update_task(
    payload: UpdateTaskInput,
    task_id: int = Depends(valid_task_id),
    service: TaskService = Depends(get_task_service),
):
    task = service.update_task(task_id, payload)
    return TaskResponse(data=_out(task))


@router.delete("/{task_id}", response_model=TaskDeleteResponse, responses=_NOT_FOUND)
def delete_task(
    task_id: int = Depends(valid_task_id),
    service: TaskService = Depends(get_task_service),
):
    task = service.delete_task(task_id)
    return TaskDeleteResponse(data=_out(task))
