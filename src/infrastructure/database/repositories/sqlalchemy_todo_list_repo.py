"""SQLAlchemy implementation of TodoList repository."""

from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StaleVersionError
from domain.entities.pagination import Page, PageRequest, SortDirection
from domain.entities.todo_list import TodoList
from infrastructure.database.models import TodoListModel, TodoTaskModel

_SORT_COLUMNS = {
    "created_at": TodoListModel.created_at,
    "updated_at": TodoListModel.updated_at,
    "title": TodoListModel.title,
}


class SQLAlchemyTodoListRepository:
    """SQLAlchemy implementation of ITodoListRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id_and_owner(self, id: UUID, owner_id: UUID) -> TodoList | None:
        """Get a list by ID, only if it belongs to the given owner."""
        stmt = select(TodoListModel).where(
            TodoListModel.id == id,
            TodoListModel.owner_id == owner_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all_for_owner(self, owner_id: UUID) -> list[TodoList]:
        stmt = (
            select(TodoListModel)
            .where(TodoListModel.owner_id == owner_id)
            .order_by(TodoListModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_page_for_owner(self, owner_id: UUID, page_request: PageRequest) -> Page[TodoList]:
        column = _SORT_COLUMNS.get(page_request.sort, TodoListModel.created_at)
        order = column.asc() if page_request.direction == SortDirection.ASC else column.desc()
        stmt = (
            select(TodoListModel)
            .where(TodoListModel.owner_id == owner_id)
            .order_by(order, TodoListModel.id)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        result = await self._session.execute(stmt)
        items = [self._to_entity(model) for model in result.scalars()]
        total = await self.count_for_owner(owner_id)
        return Page(items=items, total=total, page=page_request.page, size=page_request.size)

    async def search_by_title(self, owner_id: UUID, title_part: str) -> list[TodoList]:
        """Case-insensitive substring search on title."""
        stmt = (
            select(TodoListModel)
            .where(
                TodoListModel.owner_id == owner_id,
                func.lower(TodoListModel.title).contains(title_part.lower(), autoescape=True),
            )
            .order_by(TodoListModel.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_page_by_completion_percentage(
        self, owner_id: UUID, page_request: PageRequest
    ) -> Page[TodoList]:
        """Rank lists by floor(100 * completed / total), highest first.

        Lists without tasks are included and rank as 0%.
        """
        total = func.count(TodoTaskModel.id)
        completed = func.coalesce(
            func.sum(case((TodoTaskModel.completed == True, 1), else_=0)),  # noqa: E712
            0,
        )
        percentage = case((total == 0, 0), else_=(completed * 100) // total)

        stmt = (
            select(TodoListModel)
            .outerjoin(TodoTaskModel, TodoTaskModel.todo_list_id == TodoListModel.id)
            .where(TodoListModel.owner_id == owner_id)
            .group_by(TodoListModel.id)
            .order_by(percentage.desc(), TodoListModel.created_at.desc(), TodoListModel.id)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        result = await self._session.execute(stmt)
        items = [self._to_entity(model) for model in result.scalars()]
        count = await self.count_for_owner(owner_id)
        return Page(items=items, total=count, page=page_request.page, size=page_request.size)

    async def count_for_owner(self, owner_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TodoListModel)
            .where(TodoListModel.owner_id == owner_id)
        )
        return int(await self._session.scalar(stmt) or 0)

    async def get_task_counts_batch(self, list_ids: list[UUID]) -> dict[UUID, tuple[int, int]]:
        """Get task counts for multiple lists in a single query."""
        if not list_ids:
            return {}

        stmt = (
            select(
                TodoTaskModel.todo_list_id,
                func.count().label("task_count"),
                func.sum(
                    case((TodoTaskModel.completed == True, 1), else_=0)  # noqa: E712
                ).label("completed_count"),
            )
            .where(TodoTaskModel.todo_list_id.in_(list_ids))
            .group_by(TodoTaskModel.todo_list_id)
        )
        result = await self._session.execute(stmt)
        return {
            row.todo_list_id: (row.task_count, row.completed_count or 0)
            for row in result
        }

    async def create(self, todo_list: TodoList) -> TodoList:
        """Create a new todo list."""
        model = self._to_model(todo_list)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, todo_list: TodoList) -> TodoList:
        """Write title/description if the list's version is still current."""
        stmt = (
            update(TodoListModel)
            .where(
                TodoListModel.id == todo_list.id,
                TodoListModel.version == todo_list.version,
            )
            .values(
                title=todo_list.title,
                description=todo_list.description,
                updated_at=todo_list.updated_at,
                version=TodoListModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise StaleVersionError("todo_list", str(todo_list.id))

        todo_list.version += 1
        return todo_list

    async def delete(self, id: UUID) -> bool:
        stmt = (
            delete(TodoListModel)
            .where(TodoListModel.id == id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def delete_all_for_owner(self, owner_id: UUID) -> int:
        stmt = (
            delete(TodoListModel)
            .where(TodoListModel.owner_id == owner_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    def _to_entity(self, model: TodoListModel) -> TodoList:
        """Convert ORM model to domain entity."""
        return TodoList(
            id=model.id,
            owner_id=model.owner_id,
            title=model.title,
            description=model.description,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: TodoList) -> TodoListModel:
        """Convert domain entity to ORM model."""
        return TodoListModel(
            id=entity.id,
            owner_id=entity.owner_id,
            title=entity.title,
            description=entity.description,
            version=entity.version,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
