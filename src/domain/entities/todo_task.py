"""TodoTask domain entity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4


class TaskPriority(StrEnum):
    """Priority levels for a task, lowest first."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        """Sort key placing the most urgent priority first."""
        return _PRIORITY_RANK[self]


_PRIORITY_RANK = {
    TaskPriority.URGENT: 0,
    TaskPriority.HIGH: 1,
    TaskPriority.MEDIUM: 2,
    TaskPriority.LOW: 3,
}


@dataclass
class TodoTask:
    """Domain entity for a task inside a todo list.

    A task has no owner of its own; ownership is inherited from the
    parent list referenced by ``todo_list_id``.
    """

    todo_list_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    completed: bool = False
    due_date: datetime | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def toggle_completion(self) -> None:
        """Flip the completion flag."""
        self.completed = not self.completed
        self.updated_at = datetime.utcnow()

    def is_overdue(self, now: datetime | None = None) -> bool:
        """True when the task is pending and its due date has passed."""
        now = now or datetime.utcnow()
        return not self.completed and self.due_date is not None and self.due_date < now

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at
