"""Pydantic schemas for TodoTask API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from api.v1.schemas.common import PageMeta, to_naive_utc
from domain.entities.todo_task import TaskPriority, TodoTask


class TodoTaskBase(BaseModel):
    """Base schema for TodoTask."""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.MEDIUM

    @field_validator("due_date")
    @classmethod
    def normalise_due_date(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class TodoTaskCreate(TodoTaskBase):
    """Schema for creating a task. The list comes from the URL."""

    pass


class TodoTaskUpdate(TodoTaskBase):
    """Schema for replacing a task's editable fields."""

    completed: bool = False
    version: int | None = Field(None, ge=1, description="Expected current version")


class PriorityUpdate(BaseModel):
    """Schema for changing only the priority."""

    priority: TaskPriority


class DueDateUpdate(BaseModel):
    """Schema for changing only the due date. ``null`` clears it."""

    due_date: datetime | None = None

    @field_validator("due_date")
    @classmethod
    def normalise_due_date(cls, v: datetime | None) -> datetime | None:
        return to_naive_utc(v)


class TodoTaskResponse(BaseModel):
    """Schema for TodoTask response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "todo_list_id": "456e4567-e89b-12d3-a456-426614174000",
                "title": "Milk",
                "description": None,
                "completed": False,
                "due_date": "2026-02-01T09:00:00",
                "priority": "HIGH",
                "overdue": False,
                "version": 1,
                "created_at": "2026-01-28T10:00:00",
                "updated_at": "2026-01-28T10:00:00",
            }
        },
    )

    id: UUID
    todo_list_id: UUID
    title: str
    description: str | None
    completed: bool
    due_date: datetime | None
    priority: TaskPriority
    overdue: bool = False
    version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, task: TodoTask, now: datetime | None = None) -> "TodoTaskResponse":
        return cls(
            id=task.id,
            todo_list_id=task.todo_list_id,
            title=task.title,
            description=task.description,
            completed=task.completed,
            due_date=task.due_date,
            priority=task.priority,
            overdue=task.is_overdue(now),
            version=task.version,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class TodoTaskListResponse(BaseModel):
    """Schema for a collection of tasks."""

    data: list[TodoTaskResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class TodoTaskPageResponse(BaseModel):
    """Schema for one page of tasks."""

    data: list[TodoTaskResponse]
    meta: PageMeta


class TodoTaskDetailResponse(BaseModel):
    """Schema for single TodoTask response."""

    data: TodoTaskResponse


class TaskCountResponse(BaseModel):
    """Task totals for one list."""

    total: int
    completed: int


class TaskCountDetailResponse(BaseModel):
    data: TaskCountResponse

