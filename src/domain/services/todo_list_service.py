"""TodoList service layer with business logic."""

from collections.abc import Callable
from uuid import UUID

import structlog

from core.exceptions import (
    StaleVersionError,
    TodoListNotFoundError,
    UserInactiveError,
    UserNotFoundError,
    ValidationError,
)
from domain.entities.pagination import Page, PageRequest
from domain.entities.todo_list import TodoList, TodoListSummary, progress_percentage
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

SORTABLE_FIELDS = frozenset({"created_at", "updated_at", "title"})


class TodoListService:
    """Service layer for TodoList business logic.

    Every operation resolves the owning user first, so nothing can be
    read or written on behalf of a user that does not exist.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_by_id(self, list_id: UUID, user_id: UUID) -> TodoList:
        """Get a list by ID, scoped to its owner.

        A list that exists but belongs to another user is reported exactly
        like a list that does not exist.
        """
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await self._require_owned_list(uow, list_id, user_id)

    async def get_all_for_user(self, user_id: UUID) -> list[TodoList]:
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_lists.get_all_for_owner(user_id)

    async def get_page_for_user(self, user_id: UUID, page_request: PageRequest) -> Page[TodoList]:
        _check_sort_field(page_request)
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_lists.get_page_for_owner(user_id, page_request)

    async def search_by_title(self, user_id: UUID, title_part: str) -> list[TodoList]:
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_lists.search_by_title(user_id, title_part)

    async def get_by_completion_percentage(
        self, user_id: UUID, page_request: PageRequest
    ) -> Page[TodoList]:
        """Get the user's lists ranked by completion percentage, highest first."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_lists.get_page_by_completion_percentage(user_id, page_request)

    async def count_for_user(self, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_lists.count_for_owner(user_id)

    async def summarize(self, lists: list[TodoList], user_id: UUID) -> list[TodoListSummary]:
        """Attach the owner's current username and task counts to each list.

        The username is read from the store, so a rename shows up on the
        next read.
        """
        async with self._uow_factory() as uow:
            owner = await self._require_user(uow, user_id)
            counts = (
                await uow.todo_lists.get_task_counts_batch([tl.id for tl in lists])
                if lists
                else {}
            )

        summaries = []
        for todo_list in lists:
            total, completed = counts.get(todo_list.id, (0, 0))
            summaries.append(
                TodoListSummary(
                    todo_list=todo_list,
                    owner_username=owner.username,
                    task_count=total,
                    completed_count=completed,
                )
            )
        return summaries

    async def get_progress_percentage(self, list_id: UUID, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            await self._require_owned_list(uow, list_id, user_id)
            counts = await uow.todo_lists.get_task_counts_batch([list_id])
            total, completed = counts.get(list_id, (0, 0))
            return progress_percentage(total, completed)

    async def create(self, user_id: UUID, title: str, description: str | None = None) -> TodoList:
        """Create a list owned by ``user_id``."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)

            todo_list = TodoList(owner_id=user_id, title=title, description=description)
            created = await uow.todo_lists.create(todo_list)
            await uow.commit()

        logger.info("todo_list_created", todo_list_id=str(created.id), user_id=str(user_id))
        return created

    async def update(
        self,
        list_id: UUID,
        user_id: UUID,
        title: str,
        description: str | None = None,
        expected_version: int | None = None,
    ) -> TodoList:
        """Replace a list's title and description. Ownership never changes."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            todo_list = await self._require_owned_list(uow, list_id, user_id)
            if expected_version is not None and expected_version != todo_list.version:
                raise StaleVersionError("todo_list", str(list_id))

            todo_list.rename(title, description)
            updated = await uow.todo_lists.update(todo_list)
            await uow.commit()
            return updated

    async def delete(self, list_id: UUID, user_id: UUID) -> None:
        """Delete a list together with all of its tasks."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            await self._require_owned_list(uow, list_id, user_id)

            removed_tasks = await uow.todo_tasks.delete_all_for_list(list_id)
            await uow.todo_lists.delete(list_id)
            await uow.commit()

        logger.info(
            "todo_list_deleted",
            todo_list_id=str(list_id),
            user_id=str(user_id),
            removed_tasks=removed_tasks,
        )

    async def delete_all_for_user(self, user_id: UUID) -> int:
        """Delete every list of a user, and their tasks. Returns the list count."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)

            await uow.todo_tasks.delete_all_for_owner(user_id)
            removed = await uow.todo_lists.delete_all_for_owner(user_id)
            await uow.commit()

        logger.info("todo_lists_cleared", user_id=str(user_id), removed_lists=removed)
        return removed

    async def _require_user(self, uow: IUnitOfWork, user_id: UUID) -> User:
        user = await uow.users.get(user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        if not user.active:
            raise UserInactiveError(str(user_id))
        return user

    async def _require_owned_list(
        self, uow: IUnitOfWork, list_id: UUID, user_id: UUID
    ) -> TodoList:
        todo_list = await uow.todo_lists.get_by_id_and_owner(list_id, user_id)
        if not todo_list:
            raise TodoListNotFoundError(str(list_id))
        return todo_list


def _check_sort_field(page_request: PageRequest) -> None:
    if page_request.sort not in SORTABLE_FIELDS:
        raise ValidationError(
            f"Cannot sort todo lists by '{page_request.sort}'. "
            f"Allowed: {', '.join(sorted(SORTABLE_FIELDS))}",
            field="sort",
        )
