"""Unit tests for UserService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    AppException,
    EmailTakenError,
    StaleVersionError,
    UserHasTodoListsError,
    UsernameTakenError,
    UserNotFoundError,
)
from core.security import hash_password, verify_password
from domain.entities.user import User
from domain.services.user_service import UserService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> UserService:
    return UserService(lambda: uow)


def _user(user_id: UUID | None = None, **kwargs) -> User:
    defaults = {
        "username": "alice",
        "email": "alice@example.com",
        "password_hash": "hash",
    }
    defaults.update(kwargs)
    return User(id=user_id or uuid4(), **defaults)


# --- lookups ---


class TestLookups:
    @pytest.mark.asyncio
    async def test_get_by_id_returns_none_when_absent(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = None

        assert await service.get_by_id(user_id) is None

    @pytest.mark.asyncio
    async def test_get_all_active_filters_on_flag(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.get_by_active.return_value = [_user()]

        result = await service.get_all_active()

        assert len(result) == 1
        uow.users.get_by_active.assert_called_once_with(True)

    @pytest.mark.asyncio
    async def test_is_username_taken(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.exists_by_username.return_value = True

        assert await service.is_username_taken("alice") is True
        uow.users.exists_by_username.assert_called_once_with("alice")


# --- register ---


class TestRegister:
    @pytest.mark.asyncio
    async def test_stores_hash_not_password(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.exists_by_username.return_value = False
        uow.users.exists_by_email.return_value = False
        uow.users.create.side_effect = lambda u: u

        result = await service.register("alice", "alice@example.com", "s3cret-pass", "Alice", None)

        assert result.username == "alice"
        assert result.password_hash != "s3cret-pass"
        assert verify_password("s3cret-pass", result.password_hash)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_duplicate_username_conflicts(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.exists_by_username.return_value = True

        with pytest.raises(UsernameTakenError) as exc_info:
            await service.register("alice", "new@example.com", "s3cret-pass")

        assert exc_info.value.status_code == 409
        uow.users.create.assert_not_called()
        assert not uow.committed

    @pytest.mark.asyncio
    async def test_duplicate_email_conflicts(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.exists_by_username.return_value = False
        uow.users.exists_by_email.return_value = True

        with pytest.raises(EmailTakenError):
            await service.register("alice2", "alice@example.com", "s3cret-pass")

        uow.users.create.assert_not_called()


# --- update ---


class TestUpdate:
    @pytest.mark.asyncio
    async def test_replaces_all_profile_fields(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        user = _user(user_id, first_name="Alice", last_name="Smith")
        uow.users.get.return_value = user
        uow.users.get_by_username.return_value = None
        uow.users.get_by_email.return_value = None
        uow.users.update.side_effect = lambda u: u

        result = await service.update(user_id, "alicia", "alicia@example.com", None, None)

        assert result.username == "alicia"
        assert result.email == "alicia@example.com"
        assert result.first_name is None
        assert result.last_name is None
        assert uow.committed

    @pytest.mark.asyncio
    async def test_allows_keeping_own_username_and_email(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        user = _user(user_id)
        uow.users.get.return_value = user
        uow.users.get_by_username.return_value = user
        uow.users.get_by_email.return_value = user
        uow.users.update.side_effect = lambda u: u

        result = await service.update(user_id, "alice", "alice@example.com", "Al", None)

        assert result.first_name == "Al"

    @pytest.mark.asyncio
    async def test_rejects_username_of_another_user(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = _user(user_id)
        uow.users.get_by_username.return_value = _user(username="bob")

        with pytest.raises(UsernameTakenError):
            await service.update(user_id, "bob", "alice@example.com")

        uow.users.update.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_email_of_another_user(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = _user(user_id)
        uow.users.get_by_username.return_value = None
        uow.users.get_by_email.return_value = _user(email="bob@example.com")

        with pytest.raises(EmailTakenError):
            await service.update(user_id, "alice", "bob@example.com")

    @pytest.mark.asyncio
    async def test_raises_not_found(self, service: UserService, uow: FakeUnitOfWork, user_id: UUID):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError) as exc_info:
            await service.update(user_id, "alice", "alice@example.com")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_rejects_stale_expected_version(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        user = _user(user_id)
        user.version = 3
        uow.users.get.return_value = user

        with pytest.raises(StaleVersionError):
            await service.update(user_id, "alice", "alice@example.com", expected_version=2)

        uow.users.update.assert_not_called()


# --- password / active ---


class TestPasswordAndActive:
    @pytest.mark.asyncio
    async def test_change_password_rehashes(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        user = _user(user_id, password_hash=hash_password("old-password"))
        uow.users.get.return_value = user

        await service.change_password(user_id, "new-password")

        saved = uow.users.update.call_args.args[0]
        assert verify_password("new-password", saved.password_hash)
        assert not verify_password("old-password", saved.password_hash)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_change_password_not_found(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.change_password(user_id, "new-password")

    @pytest.mark.asyncio
    async def test_set_active(self, service: UserService, uow: FakeUnitOfWork, user_id: UUID):
        uow.users.get.return_value = _user(user_id)
        uow.users.update.side_effect = lambda u: u

        result = await service.set_active(user_id, False)

        assert result.active is False
        assert uow.committed


# --- authenticate ---


class TestAuthenticate:
    @pytest.mark.asyncio
    async def test_returns_user_on_match(self, service: UserService, uow: FakeUnitOfWork):
        user = _user(password_hash=hash_password("s3cret-pass"))
        uow.users.get_by_username.return_value = user

        assert await service.authenticate("alice", "s3cret-pass") is user

    @pytest.mark.asyncio
    async def test_wrong_password(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.get_by_username.return_value = _user(password_hash=hash_password("s3cret-pass"))

        assert await service.authenticate("alice", "wrong-pass") is None

    @pytest.mark.asyncio
    async def test_inactive_user(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.get_by_username.return_value = _user(
            password_hash=hash_password("s3cret-pass"), active=False
        )

        assert await service.authenticate("alice", "s3cret-pass") is None

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: UserService, uow: FakeUnitOfWork):
        uow.users.get_by_username.return_value = None

        assert await service.authenticate("nobody", "s3cret-pass") is None


# --- delete ---


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_user_without_lists(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = _user(user_id)
        uow.todo_lists.count_for_owner.return_value = 0

        await service.delete(user_id)

        uow.users.delete.assert_called_once_with(user_id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_refuses_user_with_lists(
        self, service: UserService, uow: FakeUnitOfWork, user_id: UUID
    ):
        uow.users.get.return_value = _user(user_id)
        uow.todo_lists.count_for_owner.return_value = 2

        with pytest.raises(UserHasTodoListsError) as exc_info:
            await service.delete(user_id)

        assert exc_info.value.details["todo_list_count"] == 2
        uow.users.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_not_found(self, service: UserService, uow: FakeUnitOfWork, user_id: UUID):
        uow.users.get.return_value = None

        with pytest.raises(AppException) as exc_info:
            await service.delete(user_id)

        assert exc_info.value.status_code == 404
