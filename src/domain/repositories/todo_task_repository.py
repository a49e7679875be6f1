"""TodoTask repository protocol."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from domain.entities.pagination import Page, PageRequest
from domain.entities.todo_task import TaskPriority, TodoTask


class ITodoTaskRepository(Protocol):
    """Repository interface for TodoTask entities, scoped by parent list."""

    async def get_by_id_and_list(self, id: UUID, todo_list_id: UUID) -> TodoTask | None:
        """Get a task only if it belongs to ``todo_list_id``."""
        ...

    async def get_all_for_list(self, todo_list_id: UUID) -> list[TodoTask]:
        ...

    async def get_page_for_list(
        self, todo_list_id: UUID, page_request: PageRequest
    ) -> Page[TodoTask]:
        ...

    async def get_by_completed(self, todo_list_id: UUID, completed: bool) -> list[TodoTask]:
        ...

    async def get_by_priority(self, todo_list_id: UUID, priority: TaskPriority) -> list[TodoTask]:
        ...

    async def get_pending_due_before(self, todo_list_id: UUID, moment: datetime) -> list[TodoTask]:
        """Tasks not completed whose due date is strictly before ``moment``."""
        ...

    async def search_by_title(self, todo_list_id: UUID, title_part: str) -> list[TodoTask]:
        """Case-insensitive substring match on title."""
        ...

    async def get_all_for_owner(self, owner_id: UUID) -> list[TodoTask]:
        """Tasks in every list owned by ``owner_id``."""
        ...

    async def count_for_list(self, todo_list_id: UUID, completed: bool | None = None) -> int:
        ...

    async def create(self, task: TodoTask) -> TodoTask:
        ...

    async def update(self, task: TodoTask) -> TodoTask:
        """Update a task, bumping its version.

        Raises StaleVersionError when the stored version no longer
        matches ``task.version``.
        """
        ...

    async def delete(self, id: UUID) -> bool:
        ...

    async def delete_all_for_list(self, todo_list_id: UUID) -> int:
        """Delete every task of a list; returns the number removed."""
        ...

    async def delete_all_for_owner(self, owner_id: UUID) -> int:
        """Delete every task in every list of ``owner_id``."""
        ...
