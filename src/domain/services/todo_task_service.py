"""TodoTask service layer with business logic."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    StaleVersionError,
    TodoListNotFoundError,
    TodoTaskNotFoundError,
    UserInactiveError,
    UserNotFoundError,
    ValidationError,
)
from domain.entities.pagination import Page, PageRequest
from domain.entities.todo_list import TodoList
from domain.entities.todo_task import TaskPriority, TodoTask
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()

SORTABLE_FIELDS = frozenset({"created_at", "updated_at", "title", "due_date"})


class TodoTaskService:
    """Service layer for TodoTask business logic.

    Tasks are only reachable through their list: every call resolves
    user -> owned list -> task-in-list and fails at the first broken link.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_by_id(self, task_id: UUID, list_id: UUID, user_id: UUID) -> TodoTask:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await self._require_task(uow, task_id, list_id)

    async def get_all_for_list(self, list_id: UUID, user_id: UUID) -> list[TodoTask]:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.get_all_for_list(list_id)

    async def get_page_for_list(
        self, list_id: UUID, user_id: UUID, page_request: PageRequest
    ) -> Page[TodoTask]:
        if page_request.sort not in SORTABLE_FIELDS:
            raise ValidationError(
                f"Cannot sort tasks by '{page_request.sort}'. "
                f"Allowed: {', '.join(sorted(SORTABLE_FIELDS))}",
                field="sort",
            )
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.get_page_for_list(list_id, page_request)

    async def get_by_completion_status(
        self, list_id: UUID, user_id: UUID, completed: bool
    ) -> list[TodoTask]:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.get_by_completed(list_id, completed)

    async def get_by_priority(
        self, list_id: UUID, user_id: UUID, priority: TaskPriority
    ) -> list[TodoTask]:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.get_by_priority(list_id, priority)

    async def get_overdue(self, list_id: UUID, user_id: UUID) -> list[TodoTask]:
        """Pending tasks whose due date is already in the past."""
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.get_pending_due_before(list_id, datetime.utcnow())

    async def search_by_title(
        self, list_id: UUID, user_id: UUID, title_part: str
    ) -> list[TodoTask]:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.search_by_title(list_id, title_part)

    async def get_all_for_user(self, user_id: UUID) -> list[TodoTask]:
        """Every task in every list the user owns."""
        async with self._uow_factory() as uow:
            await self._require_user(uow, user_id)
            return await uow.todo_tasks.get_all_for_owner(user_id)

    async def count_for_list(self, list_id: UUID, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.count_for_list(list_id)

    async def count_completed_for_list(self, list_id: UUID, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            return await uow.todo_tasks.count_for_list(list_id, completed=True)

    async def create(
        self,
        list_id: UUID,
        user_id: UUID,
        title: str,
        description: str | None = None,
        due_date: datetime | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
    ) -> TodoTask:
        """Create a task in the given list.

        A due date supplied at creation time must lie in the future.
        """
        if due_date is not None and due_date <= datetime.utcnow():
            raise ValidationError("Due date must be in the future", field="due_date")

        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)

            task = TodoTask(
                todo_list_id=list_id,
                title=title,
                description=description,
                due_date=due_date,
                priority=priority,
            )
            created = await uow.todo_tasks.create(task)
            await uow.commit()

        logger.info("todo_task_created", task_id=str(created.id), todo_list_id=str(list_id))
        return created

    async def update(
        self,
        task_id: UUID,
        list_id: UUID,
        user_id: UUID,
        title: str,
        description: str | None = None,
        completed: bool = False,
        due_date: datetime | None = None,
        priority: TaskPriority = TaskPriority.MEDIUM,
        expected_version: int | None = None,
    ) -> TodoTask:
        """Replace all editable fields of a task (not a partial patch)."""
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            task = await self._require_task(uow, task_id, list_id)
            if expected_version is not None and expected_version != task.version:
                raise StaleVersionError("task", str(task_id))

            task.title = title
            task.description = description
            task.completed = completed
            task.due_date = due_date
            task.priority = priority
            task.updated_at = datetime.utcnow()

            updated = await uow.todo_tasks.update(task)
            await uow.commit()
            return updated

    async def toggle_completion(self, task_id: UUID, list_id: UUID, user_id: UUID) -> TodoTask:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            task = await self._require_task(uow, task_id, list_id)

            task.toggle_completion()
            updated = await uow.todo_tasks.update(task)
            await uow.commit()
            return updated

    async def set_priority(
        self, task_id: UUID, list_id: UUID, user_id: UUID, priority: TaskPriority
    ) -> TodoTask:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            task = await self._require_task(uow, task_id, list_id)

            task.priority = priority
            task.updated_at = datetime.utcnow()
            updated = await uow.todo_tasks.update(task)
            await uow.commit()
            return updated

    async def set_due_date(
        self, task_id: UUID, list_id: UUID, user_id: UUID, due_date: datetime | None
    ) -> TodoTask:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            task = await self._require_task(uow, task_id, list_id)

            task.due_date = due_date
            task.updated_at = datetime.utcnow()
            updated = await uow.todo_tasks.update(task)
            await uow.commit()
            return updated

    async def delete(self, task_id: UUID, list_id: UUID, user_id: UUID) -> None:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)
            await self._require_task(uow, task_id, list_id)

            await uow.todo_tasks.delete(task_id)
            await uow.commit()

    async def delete_all_for_list(self, list_id: UUID, user_id: UUID) -> int:
        async with self._uow_factory() as uow:
            await self._require_list(uow, list_id, user_id)

            removed = await uow.todo_tasks.delete_all_for_list(list_id)
            await uow.commit()

        logger.info("todo_tasks_cleared", todo_list_id=str(list_id), removed_tasks=removed)
        return removed

    async def _require_user(self, uow: IUnitOfWork, user_id: UUID) -> None:
        user = await uow.users.get(user_id)
        if not user:
            raise UserNotFoundError(str(user_id))
        if not user.active:
            raise UserInactiveError(str(user_id))

    async def _require_list(self, uow: IUnitOfWork, list_id: UUID, user_id: UUID) -> TodoList:
        await self._require_user(uow, user_id)
        todo_list = await uow.todo_lists.get_by_id_and_owner(list_id, user_id)
        if not todo_list:
            raise TodoListNotFoundError(str(list_id))
        return todo_list

    async def _require_task(self, uow: IUnitOfWork, task_id: UUID, list_id: UUID) -> TodoTask:
        task = await uow.todo_tasks.get_by_id_and_list(task_id, list_id)
        if not task:
            raise TodoTaskNotFoundError(str(task_id))
        return task
