"""TodoTask API routes.

Tasks live under their list: every path carries the list id and the list
must belong to the caller.
"""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_todo_task_service
from api.v1.schemas.common import PageMeta
from api.v1.schemas.todo_list import BulkDeleteResponse
from api.v1.schemas.todo_task import (
    DueDateUpdate,
    PriorityUpdate,
    TaskCountDetailResponse,
    TaskCountResponse,
    TodoTaskCreate,
    TodoTaskDetailResponse,
    TodoTaskListResponse,
    TodoTaskPageResponse,
    TodoTaskResponse,
    TodoTaskUpdate,
)
from core.config import settings
from core.exceptions import ValidationError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.pagination import PageRequest, SortDirection
from domain.entities.todo_task import TaskPriority, TodoTask
from domain.services.todo_task_service import TodoTaskService

router = APIRouter(prefix="/todolists/{list_id}/tasks", tags=["todo-tasks"])

# Cross-list view of the caller's tasks
user_tasks_router = APIRouter(prefix="/tasks", tags=["todo-tasks"])


@router.get(
    "",
    response_model=TodoTaskListResponse | TodoTaskPageResponse,
    summary="List tasks in a todo list",
    responses={
        200: {"description": "Tasks, most urgent first unless paginated"},
        404: {"description": "List not found"},
        422: {"description": "Filters combined with pagination"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_tasks(
    request: Request,
    list_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
    page: int | None = Query(None, ge=0, description="Zero-based page; enables pagination"),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort: str = Query("created_at", description="created_at, updated_at, title or due_date"),
    direction: SortDirection = Query(SortDirection.DESC),
    completed: bool | None = Query(None, description="Only completed / pending tasks"),
    priority: TaskPriority | None = Query(None),
    overdue: bool = Query(False, description="Only pending tasks past their due date"),
    title: str | None = Query(None, min_length=1, max_length=200),
) -> TodoTaskListResponse | TodoTaskPageResponse:
    """
    Get the tasks of one list.

    When `page` is given the result is paginated and sorted by `sort`, and
    no filter may be given. Otherwise all matching tasks are returned
    ordered by priority (URGENT first), then due date. Filters combine
    with AND.
    """
    if page is not None:
        if overdue or any(f is not None for f in (completed, priority, title)):
            raise ValidationError(
                "Filters cannot be combined with pagination", field="page"
            )
        result = await service.get_page_for_list(
            list_id,
            user.id,
            PageRequest(page=page, size=size, sort=sort, direction=direction),
        )
        return TodoTaskPageResponse(
            data=_to_responses(result.items),
            meta=PageMeta.from_page(result),
        )

    if overdue:
        tasks = await service.get_overdue(list_id, user.id)
    elif completed is not None:
        tasks = await service.get_by_completion_status(list_id, user.id, completed)
    elif priority is not None:
        tasks = await service.get_by_priority(list_id, user.id, priority)
    elif title is not None:
        tasks = await service.search_by_title(list_id, user.id, title)
    else:
        tasks = await service.get_all_for_list(list_id, user.id)

    if completed is not None:
        tasks = [t for t in tasks if t.completed == completed]
    if priority is not None:
        tasks = [t for t in tasks if t.priority == priority]
    if title is not None:
        needle = title.lower()
        tasks = [t for t in tasks if needle in t.title.lower()]

    return TodoTaskListResponse(data=_to_responses(tasks), meta={"total": len(tasks)})


@router.get("/count", response_model=TaskCountDetailResponse, summary="Count tasks in a list")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def count_tasks(
    request: Request,
    list_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TaskCountDetailResponse:
    total = await service.count_for_list(list_id, user.id)
    completed = await service.count_completed_for_list(list_id, user.id)
    return TaskCountDetailResponse(data=TaskCountResponse(total=total, completed=completed))


@router.get(
    "/{task_id}",
    response_model=TodoTaskDetailResponse,
    summary="Get a task",
    responses={404: {"description": "List or task not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_task(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    task = await service.get_by_id(task_id, list_id, user.id)
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.post(
    "",
    response_model=TodoTaskDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
    responses={
        201: {"description": "Task created"},
        404: {"description": "List not found"},
        422: {"description": "Validation error, e.g. due date in the past"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_task(
    request: Request,
    list_id: UUID,
    body: TodoTaskCreate,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    """Add a task to the list. A due date, if given, must be in the future."""
    task = await service.create(
        list_id,
        user.id,
        title=body.title,
        description=body.description,
        due_date=body.due_date,
        priority=body.priority,
    )
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.put(
    "/{task_id}",
    response_model=TodoTaskDetailResponse,
    summary="Update a task",
    responses={
        200: {"description": "Task updated"},
        404: {"description": "List or task not found"},
        409: {"description": "Version conflict"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_task(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    body: TodoTaskUpdate,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    """Replace all editable fields of the task."""
    task = await service.update(
        task_id,
        list_id,
        user.id,
        title=body.title,
        description=body.description,
        completed=body.completed,
        due_date=body.due_date,
        priority=body.priority,
        expected_version=body.version,
    )
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.patch(
    "/{task_id}/toggle",
    response_model=TodoTaskDetailResponse,
    summary="Toggle a task's completion",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def toggle_task(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    task = await service.toggle_completion(task_id, list_id, user.id)
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.patch(
    "/{task_id}/priority",
    response_model=TodoTaskDetailResponse,
    summary="Change a task's priority",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_task_priority(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    body: PriorityUpdate,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    task = await service.set_priority(task_id, list_id, user.id, body.priority)
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.patch(
    "/{task_id}/due-date",
    response_model=TodoTaskDetailResponse,
    summary="Change or clear a task's due date",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_task_due_date(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    body: DueDateUpdate,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskDetailResponse:
    """Past dates are accepted here, unlike on creation."""
    task = await service.set_due_date(task_id, list_id, user.id, body.due_date)
    return TodoTaskDetailResponse(data=TodoTaskResponse.from_entity(task))


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a task",
    responses={
        204: {"description": "Task deleted"},
        404: {"description": "List or task not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_task(
    request: Request,
    list_id: UUID,
    task_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> None:
    await service.delete(task_id, list_id, user.id)


@router.delete(
    "",
    response_model=BulkDeleteResponse,
    summary="Delete every task in a list",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_all_tasks(
    request: Request,
    list_id: UUID,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> BulkDeleteResponse:
    return BulkDeleteResponse(deleted=await service.delete_all_for_list(list_id, user.id))


@user_tasks_router.get(
    "",
    response_model=TodoTaskListResponse,
    summary="List the caller's tasks across all lists",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_user_tasks(
    request: Request,
    user: CurrentUser,
    service: TodoTaskService = Depends(get_todo_task_service),
) -> TodoTaskListResponse:
    tasks = await service.get_all_for_user(user.id)
    return TodoTaskListResponse(data=_to_responses(tasks), meta={"total": len(tasks)})


def _to_responses(tasks: list[TodoTask]) -> list[TodoTaskResponse]:
    now = datetime.utcnow()
    return [TodoTaskResponse.from_entity(t, now) for t in tasks]
