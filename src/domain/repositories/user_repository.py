"""User repository protocol."""

from typing import Protocol
from uuid import UUID

from domain.entities.user import User


class IUserRepository(Protocol):
    """Repository interface for User entities."""

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        ...

    async def get_by_username(self, username: str) -> User | None:
        """Get a user by exact username."""
        ...

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by exact email."""
        ...

    async def get_all(self) -> list[User]:
        """Get all users."""
        ...

    async def get_by_active(self, active: bool) -> list[User]:
        """Get users with the given active flag."""
        ...

    async def exists_by_username(self, username: str) -> bool:
        ...

    async def exists_by_email(self, email: str) -> bool:
        ...

    async def create(self, user: User) -> User:
        """Create a new user."""
        ...

    async def update(self, user: User) -> User:
        """Update a user, bumping its version.

        Raises StaleVersionError when the stored version no longer
        matches ``user.version``.
        """
        ...

    async def delete(self, id: UUID) -> bool:
        """Delete a user and return success status."""
        ...
