"""Dependency injection factories for API v1."""

from functools import lru_cache
from typing import Callable

from domain.services.todo_list_service import TodoListService
from domain.services.todo_task_service import TodoTaskService
from domain.services.user_service import UserService
from infrastructure.database.session import async_session_factory
from infrastructure.database.sqlalchemy_uow import SQLAlchemyUnitOfWork


def get_uow_factory() -> Callable[[], SQLAlchemyUnitOfWork]:
    """Factory for creating Unit of Work instances."""

    def factory() -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(async_session_factory)

    return factory


@lru_cache
def get_user_service() -> UserService:
    """Get User service instance."""
    return UserService(get_uow_factory())


@lru_cache
def get_todo_list_service() -> TodoListService:
    """Get TodoList service instance."""
    return TodoListService(get_uow_factory())


@lru_cache
def get_todo_task_service() -> TodoTaskService:
    """Get TodoTask service instance."""
    return TodoTaskService(get_uow_factory())
