"""SQLAlchemy implementation of User repository."""

from uuid import UUID

from sqlalchemy import delete, exists, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.exceptions import EmailTakenError, StaleVersionError, UsernameTakenError
from domain.entities.user import User
from infrastructure.database.models import UserModel


class SQLAlchemyUserRepository:
    """SQLAlchemy implementation of IUserRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, id: UUID) -> User | None:
        """Get a user by ID."""
        stmt = select(UserModel).where(UserModel.id == id)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_username(self, username: str) -> User | None:
        stmt = select(UserModel).where(UserModel.username == username)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_by_email(self, email: str) -> User | None:
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def get_all(self) -> list[User]:
        stmt = select(UserModel).order_by(UserModel.created_at)
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def get_by_active(self, active: bool) -> list[User]:
        stmt = (
            select(UserModel)
            .where(UserModel.active == active)
            .order_by(UserModel.created_at)
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(model) for model in result.scalars()]

    async def exists_by_username(self, username: str) -> bool:
        stmt = select(exists().where(UserModel.username == username))
        return bool(await self._session.scalar(stmt))

    async def exists_by_email(self, email: str) -> bool:
        stmt = select(exists().where(UserModel.email == email))
        return bool(await self._session.scalar(stmt))

    async def create(self, user: User) -> User:
        """Create a new user.

        A unique-constraint violation (two registrations racing for the
        same username or email) is reported as the matching conflict.
        """
        model = self._to_model(user)
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise self._conflict_from(e, user) from e
        await self._session.refresh(model)
        return self._to_entity(model)

    async def update(self, user: User) -> User:
        """Write the user's fields if its version is still current."""
        stmt = (
            update(UserModel)
            .where(UserModel.id == user.id, UserModel.version == user.version)
            .values(
                username=user.username,
                email=user.email,
                password_hash=user.password_hash,
                first_name=user.first_name,
                last_name=user.last_name,
                active=user.active,
                updated_at=user.updated_at,
                version=UserModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        try:
            result = await self._session.execute(stmt)
        except IntegrityError as e:
            raise self._conflict_from(e, user) from e

        if result.rowcount == 0:  # type: ignore[attr-defined]
            raise StaleVersionError("user", str(user.id))

        user.version += 1
        return user

    async def delete(self, id: UUID) -> bool:
        stmt = (
            delete(UserModel)
            .where(UserModel.id == id)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)  # type: ignore[attr-defined]

    @staticmethod
    def _conflict_from(error: IntegrityError, user: User) -> Exception:
        if "username" in str(error.orig).lower():
            return UsernameTakenError(user.username)
        return EmailTakenError(user.email)

    def _to_entity(self, model: UserModel) -> User:
        """Convert ORM model to domain entity."""
        return User(
            id=model.id,
            username=model.username,
            email=model.email,
            password_hash=model.password_hash,
            first_name=model.first_name,
            last_name=model.last_name,
            active=model.active,
            version=model.version,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: User) -> UserModel:
        """Convert domain entity to ORM model."""
        return UserModel(
            id=entity.id,
            username=entity.username,
            email=entity.email,
            password_hash=entity.password_hash,
            first_name=entity.first_name,
            last_name=entity.last_name,
            active=entity.active,
            version=entity.version,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )
