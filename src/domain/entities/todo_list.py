"""TodoList domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID, uuid4


def progress_percentage(task_count: int, completed_count: int) -> int:
    """Whole-number completion percentage, rounded down. Empty lists are 0%."""
    if task_count <= 0:
        return 0
    return (completed_count * 100) // task_count


@dataclass
class TodoList:
    """Domain entity for a todo list (aggregate root of its tasks)."""

    owner_id: UUID
    title: str
    id: UUID = field(default_factory=uuid4)
    description: str | None = None
    version: int = 1
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def rename(self, title: str, description: str | None) -> None:
        """Replace the editable fields. The owner is never touched."""
        self.title = title
        self.description = description
        self.updated_at = datetime.utcnow()

    def __post_init__(self) -> None:
        """Ensure updated_at is always at least as recent as created_at."""
        if self.updated_at < self.created_at:
            self.updated_at = self.created_at


@dataclass
class TodoListSummary:
    """A todo list together with its read-time owner name and task counts."""

    todo_list: TodoList
    owner_username: str | None = None
    task_count: int = 0
    completed_count: int = 0

    @property
    def progress_percentage(self) -> int:
        return progress_percentage(self.task_count, self.completed_count)
