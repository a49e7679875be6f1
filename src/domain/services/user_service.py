"""User directory service."""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

import structlog

from core.exceptions import (
    EmailTakenError,
    StaleVersionError,
    UserHasTodoListsError,
    UsernameTakenError,
    UserNotFoundError,
)
from core.security import hash_password, verify_password
from domain.entities.user import User
from domain.repositories.unit_of_work import IUnitOfWork

logger = structlog.get_logger()


class UserService:
    """Service layer for user identity records.

    Read lookups return ``None`` for absent users; only mutations raise
    ``UserNotFoundError``.
    """

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]) -> None:
        self._uow_factory = uow_factory

    async def get_by_id(self, user_id: UUID) -> User | None:
        async with self._uow_factory() as uow:
            return await uow.users.get(user_id)

    async def get_by_username(self, username: str) -> User | None:
        async with self._uow_factory() as uow:
            return await uow.users.get_by_username(username)

    async def get_by_email(self, email: str) -> User | None:
        async with self._uow_factory() as uow:
            return await uow.users.get_by_email(email)

    async def get_all(self) -> list[User]:
        async with self._uow_factory() as uow:
            return await uow.users.get_all()

    async def get_all_active(self) -> list[User]:
        async with self._uow_factory() as uow:
            return await uow.users.get_by_active(True)

    async def is_username_taken(self, username: str) -> bool:
        async with self._uow_factory() as uow:
            return await uow.users.exists_by_username(username)

    async def is_email_registered(self, email: str) -> bool:
        async with self._uow_factory() as uow:
            return await uow.users.exists_by_email(email)

    async def register(
        self,
        username: str,
        email: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
    ) -> User:
        """Register a new user, storing only a hash of the password.

        Raises:
            UsernameTakenError: If the username already exists.
            EmailTakenError: If the email is already registered.
        """
        async with self._uow_factory() as uow:
            if await uow.users.exists_by_username(username):
                raise UsernameTakenError(username)
            if await uow.users.exists_by_email(email):
                raise EmailTakenError(email)

            user = User(
                username=username,
                email=email,
                password_hash=hash_password(password),
                first_name=first_name,
                last_name=last_name,
            )
            created = await uow.users.create(user)
            await uow.commit()

        logger.info("user_registered", user_id=str(created.id), username=created.username)
        return created

    async def update(
        self,
        user_id: UUID,
        username: str,
        email: str,
        first_name: str | None = None,
        last_name: str | None = None,
        expected_version: int | None = None,
    ) -> User:
        """Replace a user's profile fields.

        The new username/email may equal the user's own current values;
        they may not belong to anybody else.
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))
            if expected_version is not None and expected_version != user.version:
                raise StaleVersionError("user", str(user_id))

            holder = await uow.users.get_by_username(username)
            if holder and holder.id != user_id:
                raise UsernameTakenError(username)
            holder = await uow.users.get_by_email(email)
            if holder and holder.id != user_id:
                raise EmailTakenError(email)

            user.username = username
            user.email = email
            user.first_name = first_name
            user.last_name = last_name
            user.updated_at = datetime.utcnow()

            updated = await uow.users.update(user)
            await uow.commit()
            return updated

    async def change_password(self, user_id: UUID, new_password: str) -> None:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))

            user.password_hash = hash_password(new_password)
            user.updated_at = datetime.utcnow()
            await uow.users.update(user)
            await uow.commit()

        logger.info("user_password_changed", user_id=str(user_id))

    async def set_active(self, user_id: UUID, active: bool) -> User:
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))

            user.active = active
            user.updated_at = datetime.utcnow()
            updated = await uow.users.update(user)
            await uow.commit()

        logger.info("user_active_changed", user_id=str(user_id), active=active)
        return updated

    async def authenticate(self, username: str, password: str) -> User | None:
        """Return the user if the credentials match an active account."""
        async with self._uow_factory() as uow:
            user = await uow.users.get_by_username(username)

        if not user or not user.active:
            return None
        if not verify_password(password, user.password_hash):
            return None
        return user

    async def delete(self, user_id: UUID) -> None:
        """Delete a user.

        Deletion does not cascade: a user who still owns todo lists is
        rejected with ``UserHasTodoListsError``.
        """
        async with self._uow_factory() as uow:
            user = await uow.users.get(user_id)
            if not user:
                raise UserNotFoundError(str(user_id))

            list_count = await uow.todo_lists.count_for_owner(user_id)
            if list_count:
                raise UserHasTodoListsError(str(user_id), list_count)

            await uow.users.delete(user_id)
            await uow.commit()

        logger.info("user_deleted", user_id=str(user_id))
