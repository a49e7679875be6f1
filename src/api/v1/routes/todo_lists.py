"""TodoList API routes.

All lists are scoped to the authenticated caller; a list owned by anyone
else is reported as not found.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_todo_list_service
from api.v1.schemas.common import CountResponse, PageMeta
from api.v1.schemas.todo_list import (
    BulkDeleteResponse,
    TodoListCreate,
    TodoListDetailResponse,
    TodoListListResponse,
    TodoListPageResponse,
    TodoListResponse,
    TodoListUpdate,
)
from core.config import settings
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.pagination import PageRequest, SortDirection
from domain.entities.todo_list import TodoList
from domain.services.todo_list_service import TodoListService
from infrastructure.auth.provider import TokenUser

router = APIRouter(prefix="/todolists", tags=["todo-lists"])


@router.get(
    "",
    response_model=TodoListPageResponse,
    summary="List the caller's todo lists",
    responses={
        200: {"description": "One page of lists with task counts"},
        422: {"description": "Unsupported sort field"},
    },
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_todo_lists(
    request: Request,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    sort: str = Query("created_at", description="created_at, updated_at or title"),
    direction: SortDirection = Query(SortDirection.DESC),
) -> TodoListPageResponse:
    """Get one page of the caller's lists, each with task counts and progress."""
    result = await service.get_page_for_user(
        user.id, PageRequest(page=page, size=size, sort=sort, direction=direction)
    )
    return TodoListPageResponse(
        data=await _build_responses(service, result.items, user),
        meta=PageMeta.from_page(result),
    )


@router.get("/search", response_model=TodoListListResponse, summary="Search lists by title")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def search_todo_lists(
    request: Request,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
    title: str = Query(..., min_length=1, max_length=100, description="Case-insensitive substring"),
) -> TodoListListResponse:
    lists = await service.search_by_title(user.id, title)
    return TodoListListResponse(
        data=await _build_responses(service, lists, user),
        meta={"total": len(lists)},
    )


@router.get(
    "/progress",
    response_model=TodoListPageResponse,
    summary="Lists ranked by completion percentage",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_by_progress(
    request: Request,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
    page: int = Query(0, ge=0),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
) -> TodoListPageResponse:
    """Most complete lists first. Lists without tasks count as 0%."""
    result = await service.get_by_completion_percentage(
        user.id, PageRequest(page=page, size=size)
    )
    return TodoListPageResponse(
        data=await _build_responses(service, result.items, user),
        meta=PageMeta.from_page(result),
    )


@router.get("/count", response_model=CountResponse, summary="Count the caller's lists")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def count_todo_lists(
    request: Request,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> CountResponse:
    return CountResponse(data=await service.count_for_user(user.id))


@router.get(
    "/{list_id}",
    response_model=TodoListDetailResponse,
    summary="Get a todo list",
    responses={404: {"description": "List not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_todo_list(
    request: Request,
    list_id: UUID,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> TodoListDetailResponse:
    todo_list = await service.get_by_id(list_id, user.id)
    return TodoListDetailResponse(data=await _build_response(service, todo_list, user))


@router.post(
    "",
    response_model=TodoListDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a todo list",
    responses={
        201: {"description": "List created"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_todo_list(
    request: Request,
    body: TodoListCreate,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> TodoListDetailResponse:
    """Create a list owned by the caller."""
    todo_list = await service.create(user.id, body.title, body.description)
    return TodoListDetailResponse(data=await _build_response(service, todo_list, user))


@router.put(
    "/{list_id}",
    response_model=TodoListDetailResponse,
    summary="Update a todo list",
    responses={
        200: {"description": "List updated"},
        404: {"description": "List not found"},
        409: {"description": "Version conflict"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_todo_list(
    request: Request,
    list_id: UUID,
    body: TodoListUpdate,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> TodoListDetailResponse:
    """Replace title and description. The owner cannot be changed."""
    todo_list = await service.update(
        list_id,
        user.id,
        title=body.title,
        description=body.description,
        expected_version=body.version,
    )
    return TodoListDetailResponse(data=await _build_response(service, todo_list, user))


@router.delete(
    "/{list_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a todo list and its tasks",
    responses={
        204: {"description": "List deleted"},
        404: {"description": "List not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_todo_list(
    request: Request,
    list_id: UUID,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> None:
    await service.delete(list_id, user.id)


@router.delete(
    "",
    response_model=BulkDeleteResponse,
    summary="Delete all of the caller's todo lists",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_all_todo_lists(
    request: Request,
    user: CurrentUser,
    service: TodoListService = Depends(get_todo_list_service),
) -> BulkDeleteResponse:
    return BulkDeleteResponse(deleted=await service.delete_all_for_user(user.id))


async def _build_responses(
    service: TodoListService, lists: list[TodoList], user: TokenUser
) -> list[TodoListResponse]:
    summaries = await service.summarize(lists, user.id)
    return [TodoListResponse.from_summary(s) for s in summaries]


async def _build_response(
    service: TodoListService, todo_list: TodoList, user: TokenUser
) -> TodoListResponse:
    return (await _build_responses(service, [todo_list], user))[0]
