"""TodoList repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.pagination import Page, PageRequest
from domain.entities.todo_list import TodoList


class ITodoListRepository(Protocol):
    """Repository interface for TodoList entities.

    Every query except ``get_task_counts_batch`` is parameterised by
    the owning user.
    """

    async def get_by_id_and_owner(self, id: UUID, owner_id: UUID) -> TodoList | None:
        """Get a list only if it exists and belongs to ``owner_id``."""
        ...

    async def get_all_for_owner(self, owner_id: UUID) -> list[TodoList]:
        ...

    async def get_page_for_owner(self, owner_id: UUID, page_request: PageRequest) -> Page[TodoList]:
        ...

    async def search_by_title(self, owner_id: UUID, title_part: str) -> list[TodoList]:
        """Case-insensitive substring match on title."""
        ...

    async def get_page_by_completion_percentage(
        self, owner_id: UUID, page_request: PageRequest
    ) -> Page[TodoList]:
        """Lists ranked by completion percentage, highest first."""
        ...

    async def count_for_owner(self, owner_id: UUID) -> int:
        ...

    async def get_task_counts_batch(self, list_ids: list[UUID]) -> dict[UUID, tuple[int, int]]:
        """Get task counts for multiple lists in a single query.

        Returns a mapping of list_id -> (task_count, completed_task_count).
        """
        ...

    async def create(self, todo_list: TodoList) -> TodoList:
        ...

    async def update(self, todo_list: TodoList) -> TodoList:
        """Update a list, bumping its version.

        Raises StaleVersionError when the stored version no longer
        matches ``todo_list.version``.
        """
        ...

    async def delete(self, id: UUID) -> bool:
        ...

    async def delete_all_for_owner(self, owner_id: UUID) -> int:
        """Delete every list of ``owner_id``; returns the number removed."""
        ...
