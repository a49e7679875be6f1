"""Pydantic schemas for TodoList API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from api.v1.schemas.common import PageMeta
from domain.entities.todo_list import TodoListSummary


class TodoListBase(BaseModel):
    """Base schema for TodoList."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=500)


class TodoListCreate(TodoListBase):
    """Schema for creating a TodoList. The owner is always the caller."""

    pass


class TodoListUpdate(TodoListBase):
    """Schema for replacing a TodoList's title and description."""

    version: int | None = Field(None, ge=1, description="Expected current version")


class TodoListResponse(BaseModel):
    """Schema for TodoList response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "title": "Groceries",
                "description": "Weekly shopping",
                "owner_id": "456e4567-e89b-12d3-a456-426614174000",
                "owner_username": "alice",
                "version": 1,
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
                "task_count": 4,
                "completed_task_count": 1,
                "progress_percentage": 25,
            }
        },
    )

    id: UUID
    title: str
    description: str | None
    owner_id: UUID
    owner_username: str | None = None
    version: int
    created_at: datetime
    updated_at: datetime
    task_count: int = 0
    completed_task_count: int = 0
    progress_percentage: int = 0

    @classmethod
    def from_summary(cls, summary: TodoListSummary) -> "TodoListResponse":
        todo_list = summary.todo_list
        return cls(
            id=todo_list.id,
            title=todo_list.title,
            description=todo_list.description,
            owner_id=todo_list.owner_id,
            owner_username=summary.owner_username,
            version=todo_list.version,
            created_at=todo_list.created_at,
            updated_at=todo_list.updated_at,
            task_count=summary.task_count,
            completed_task_count=summary.completed_count,
            progress_percentage=summary.progress_percentage,
        )


class TodoListListResponse(BaseModel):
    """Schema for a collection of TodoLists."""

    data: list[TodoListResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TodoListPageResponse(BaseModel):
    """Schema for one page of TodoLists."""

    data: list[TodoListResponse]
    meta: PageMeta


class TodoListDetailResponse(BaseModel):
    """Schema for single TodoList response."""

    data: TodoListResponse


class BulkDeleteResponse(BaseModel):
    """Number of rows removed by a bulk delete."""

    deleted: int
