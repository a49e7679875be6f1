"""SQLAlchemy implementation of TodoTask repository."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import StaleVersionError
from domain.entities.pagination import Page, PageRequest, SortDirection
from domain.entities.todo_task import TaskPriority, TodoTask
from infrastructure.database.models import TodoListModel, TodoTaskModel

_SORT_COLUMNS = {
    "created_at": TodoTaskModel.created_at,
    "updated_at": TodoTaskModel.updated_at,
    "title": TodoTaskModel.title,
    "due_date": TodoTaskModel.due_date,
}

_PRIORITY_RANK = case(
    {p.value: p.rank for p in TaskPriority},
    value=TodoTaskModel.priority,
    else_=len(TaskPriority),
)

# Most urgent first, then earliest due date with undated tasks last
_DEFAULT_ORDER: tuple[Any, ...] = (
    _PRIORITY_RANK,
    TodoTaskModel.due_date.is_(None),
    TodoTaskModel.due_date,
    TodoTaskModel.created_at,
)


class SQLAlchemyTodoTaskRepository:
    """SQLAlchemy implementation of ITodoTaskRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id_and_list(self, id: UUID, todo_list_id: UUID) -> TodoTask | None:
        """Get a task by ID, only if it belongs to the given list."""
        stmt = select(TodoTaskModel).where(
            TodoTaskModel.id == id,
            TodoTaskModel.todo_list_id == todo_list_id,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all_for_list(self, todo_list_id: UUID) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .where(TodoTaskModel.todo_list_id == todo_list_id)
            .order_by(*_DEFAULT_ORDER)
        )
        return await self._fetch(stmt)

    async def get_page_for_list(
        self, todo_list_id: UUID, page_request: PageRequest
    ) -> Page[TodoTask]:
        column = _SORT_COLUMNS.get(page_request.sort, TodoTaskModel.created_at)
        order = column.asc() if page_request.direction == SortDirection.ASC else column.desc()
        stmt = (
            select(TodoTaskModel)
            .where(TodoTaskModel.todo_list_id == todo_list_id)
            .order_by(order, TodoTaskModel.id)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        items = await self._fetch(stmt)
        total = await self.count_for_list(todo_list_id)
        return Page(items=items, total=total, page=page_request.page, size=page_request.size)

    async def get_by_completed(self, todo_list_id: UUID, completed: bool) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .where(
                TodoTaskModel.todo_list_id == todo_list_id,
                TodoTaskModel.completed == completed,
            )
            .order_by(*_DEFAULT_ORDER)
        )
        return await self._fetch(stmt)

    async def get_by_priority(self, todo_list_id: UUID, priority: TaskPriority) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .where(
                TodoTaskModel.todo_list_id == todo_list_id,
                TodoTaskModel.priority == priority.value,
            )
            .order_by(*_DEFAULT_ORDER)
        )
        return await self._fetch(stmt)

    async def get_pending_due_before(self, todo_list_id: UUID, moment: datetime) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .where(
                TodoTaskModel.todo_list_id == todo_list_id,
                TodoTaskModel.completed == False,  # noqa: E712
                TodoTaskModel.due_date.is_not(None),
                TodoTaskModel.due_date < moment,
            )
            .order_by(TodoTaskModel.due_date)
        )
        return await self._fetch(stmt)

    async def search_by_title(self, todo_list_id: UUID, title_part: str) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .where(
                TodoTaskModel.todo_list_id == todo_list_id,
                func.lower(TodoTaskModel.title).contains(title_part.lower(), autoescape=True),
            )
            .order_by(*_DEFAULT_ORDER)
        )
        return await self._fetch(stmt)

    async def get_all_for_owner(self, owner_id: UUID) -> list[TodoTask]:
        stmt = (
            select(TodoTaskModel)
            .join(TodoListModel, TodoListModel.id == TodoTaskModel.todo_list_id)
            .where(TodoListModel.owner_id == owner_id)
            .order_by(*_DEFAULT_ORDER)
        )
        return await self._fetch(stmt)

    async def count_for_list(self, todo_list_id: UUID, completed: bool | None = None) -> int:
        stmt = (
            select(func.count())
            .select_from(TodoTaskModel)
            .where(TodoTaskModel.todo_list_id == todo_list_id)
        )
        if completed is not None:
            stmt = stmt.where(TodoTaskModel.completed == completed)
        return int(await self._session.scalar(stmt) or 0)

    async def create(self, task: TodoTask) -> TodoTask:
        """Create a new task."""
        model = self._to_model(task)
        self._session.add(model)
        await self._session.flush()
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, task: TodoTask) -> TodoTask:
        """Write the task's fields if its version is still current."""
        stmt = (
            update(TodoTaskModel)
            .where(
                TodoTaskModel.id == task.id,
                TodoTaskModel.version == task.version,
            )
            .values(
                title=task.title,
                description=task.description,
                completed=task.completed,
                due_date=task.due_date,
                priority=task.priority.value,
                updated_at=task.updated_at,
                version=TodoTaskModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise StaleVersionError("task", str(task.id))

        task.version += 1
        return task

    async def delete(self, id: UUID) -> bool:
        stmt = (
            delete(TodoTaskModel)
            .where(TodoTaskModel.id == id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    async def delete_all_for_list(self, todo_list_id: UUID) -> int:
        stmt = (
            delete(TodoTaskModel)
            .where(TodoTaskModel.todo_list_id == todo_list_id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def delete_all_for_owner(self, owner_id: UUID) -> int:
        owned_lists = select(TodoListModel.id).where(TodoListModel.owner_id == owner_id)
        stmt = (
            delete(TodoTaskModel)
            .where(TodoTaskModel.todo_list_id.in_(owned_lists))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return int(result.rowcount or 0)  # type: ignore[attr-defined]

    async def _fetch(self, stmt: Any) -> list[TodoTask]:
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    def _to_entity(self, model: TodoTaskModel) -> TodoTask:
        """Convert ORM model to domain entity."""
        return TodoTask(
            id=model.id,
            todo_list_id=model.todo_list_id,
            title=model.title,
            description=model.description,
            completed=model.completed,
            due_date=model.due_date,
            priority=TaskPriority(model.priority),
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: TodoTask) -> TodoTaskModel:
        """Convert domain entity to ORM model."""
        return TodoTaskModel(
            id=entity.id,
            todo_list_id=entity.todo_list_id,
            title=entity.title,
            description=entity.description,
            completed=entity.completed,
            due_date=entity.due_date,
            priority=entity.priority.value,
            version=entity.version,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
