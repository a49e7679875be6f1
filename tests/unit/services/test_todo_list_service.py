"""Unit tests for TodoListService."""

from uuid import UUID, uuid4

import pytest

from core.exceptions import (
    StaleVersionError,
    TodoListNotFoundError,
    UserInactiveError,
    UserNotFoundError,
    ValidationError,
)
from domain.entities.pagination import Page, PageRequest
from domain.entities.todo_list import TodoList
from domain.entities.user import User
from domain.services.todo_list_service import TodoListService
from tests.unit.conftest import FakeUnitOfWork


@pytest.fixture
def service(uow: FakeUnitOfWork) -> TodoListService:
    return TodoListService(lambda: uow)


@pytest.fixture
def owner(uow: FakeUnitOfWork, user_id: UUID) -> User:
    user = User(id=user_id, username="alice", email="alice@example.com", password_hash="x")
    uow.users.get.return_value = user
    return user


class TestGetById:
    @pytest.mark.asyncio
    async def test_returns_owned_list(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        todo_list = TodoList(id=list_id, owner_id=owner.id, title="Groceries")
        uow.todo_lists.get_by_id_and_owner.return_value = todo_list

        result = await service.get_by_id(list_id, owner.id)

        assert result is todo_list
        uow.todo_lists.get_by_id_and_owner.assert_called_once_with(list_id, owner.id)

    @pytest.mark.asyncio
    async def test_missing_and_foreign_lists_raise_same_error(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        # The owner-scoped lookup returns None both for a missing list and
        # for a list that belongs to somebody else.
        uow.todo_lists.get_by_id_and_owner.return_value = None

        with pytest.raises(TodoListNotFoundError) as exc_info:
            await service.get_by_id(list_id, owner.id)

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == "TODO_LIST_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: TodoListService, uow: FakeUnitOfWork, list_id: UUID):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.get_by_id(list_id, uuid4())

        uow.todo_lists.get_by_id_and_owner.assert_not_called()


class TestOwnerQueries:
    @pytest.mark.asyncio
    async def test_get_all_for_user(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        lists = [TodoList(owner_id=owner.id, title="Groceries")]
        uow.todo_lists.get_all_for_owner.return_value = lists

        assert await service.get_all_for_user(owner.id) == lists
        uow.todo_lists.get_all_for_owner.assert_called_once_with(owner.id)

    @pytest.mark.asyncio
    async def test_search_is_scoped_to_owner(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        uow.todo_lists.search_by_title.return_value = []

        await service.search_by_title(owner.id, "groc")

        uow.todo_lists.search_by_title.assert_called_once_with(owner.id, "groc")

    @pytest.mark.asyncio
    async def test_count_for_user(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        uow.todo_lists.count_for_owner.return_value = 3

        assert await service.count_for_user(owner.id) == 3

    @pytest.mark.asyncio
    async def test_unknown_user_cannot_list(self, service: TodoListService, uow: FakeUnitOfWork):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.get_all_for_user(uuid4())


class TestPaging:
    @pytest.mark.asyncio
    async def test_get_page_passes_request_through(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        request = PageRequest(page=1, size=5, sort="title")
        uow.todo_lists.get_page_for_owner.return_value = Page(items=[], total=7, page=1, size=5)

        page = await service.get_page_for_user(owner.id, request)

        assert page.total_pages == 2
        uow.todo_lists.get_page_for_owner.assert_called_once_with(owner.id, request)

    @pytest.mark.asyncio
    async def test_rejects_unknown_sort_field(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        with pytest.raises(ValidationError) as exc_info:
            await service.get_page_for_user(owner.id, PageRequest(sort="owner_id"))

        assert exc_info.value.status_code == 422
        assert exc_info.value.details == {"field": "sort"}

    @pytest.mark.asyncio
    async def test_completion_ranking_delegates(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        uow.todo_lists.get_page_by_completion_percentage.return_value = Page(
            items=[], total=0, page=0, size=10
        )

        await service.get_by_completion_percentage(owner.id, PageRequest())

        uow.todo_lists.get_page_by_completion_percentage.assert_called_once()


class TestProgress:
    @pytest.mark.asyncio
    async def test_empty_list_is_zero(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        uow.todo_lists.get_by_id_and_owner.return_value = TodoList(
            id=list_id, owner_id=owner.id, title="Empty"
        )
        uow.todo_lists.get_task_counts_batch.return_value = {}

        assert await service.get_progress_percentage(list_id, owner.id) == 0

    @pytest.mark.asyncio
    async def test_rounds_down(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        uow.todo_lists.get_by_id_and_owner.return_value = TodoList(
            id=list_id, owner_id=owner.id, title="Chores"
        )
        uow.todo_lists.get_task_counts_batch.return_value = {list_id: (3, 2)}

        assert await service.get_progress_percentage(list_id, owner.id) == 66


class TestSummarize:
    @pytest.mark.asyncio
    async def test_uses_stored_username_and_counts(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        owner.username = "alicia"
        busy = TodoList(owner_id=owner.id, title="Groceries")
        empty = TodoList(owner_id=owner.id, title="Chores")
        uow.todo_lists.get_task_counts_batch.return_value = {busy.id: (4, 1)}

        summaries = await service.summarize([busy, empty], owner.id)

        assert [s.owner_username for s in summaries] == ["alicia", "alicia"]
        assert [(s.task_count, s.completed_count) for s in summaries] == [(4, 1), (0, 0)]
        assert summaries[0].progress_percentage == 25

    @pytest.mark.asyncio
    async def test_no_lists_skips_counting(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        assert await service.summarize([], owner.id) == []
        uow.todo_lists.get_task_counts_batch.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_owner(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        owner.active = False

        with pytest.raises(UserInactiveError) as exc_info:
            await service.create(owner.id, "Groceries")

        assert exc_info.value.error_code == "USER_INACTIVE"
        uow.todo_lists.create.assert_not_called()


class TestCreate:
    @pytest.mark.asyncio
    async def test_binds_owner_from_caller(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        uow.todo_lists.create.side_effect = lambda tl: tl

        result = await service.create(owner.id, "Groceries", "Weekly")

        assert result.owner_id == owner.id
        assert result.title == "Groceries"
        assert uow.committed

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: TodoListService, uow: FakeUnitOfWork):
        uow.users.get.return_value = None

        with pytest.raises(UserNotFoundError):
            await service.create(uuid4(), "Groceries")

        uow.todo_lists.create.assert_not_called()


class TestUpdate:
    @pytest.mark.asyncio
    async def test_never_changes_owner(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        todo_list = TodoList(id=list_id, owner_id=owner.id, title="Old")
        uow.todo_lists.get_by_id_and_owner.return_value = todo_list
        uow.todo_lists.update.side_effect = lambda tl: tl

        result = await service.update(list_id, owner.id, "New", "desc")

        assert result.title == "New"
        assert result.description == "desc"
        assert result.owner_id == owner.id
        assert uow.committed

    @pytest.mark.asyncio
    async def test_stale_version(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        todo_list = TodoList(id=list_id, owner_id=owner.id, title="Old", version=4)
        uow.todo_lists.get_by_id_and_owner.return_value = todo_list

        with pytest.raises(StaleVersionError) as exc_info:
            await service.update(list_id, owner.id, "New", expected_version=3)

        assert exc_info.value.status_code == 409
        uow.todo_lists.update.assert_not_called()


class TestDelete:
    @pytest.mark.asyncio
    async def test_deletes_tasks_then_list_in_one_commit(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        uow.todo_lists.get_by_id_and_owner.return_value = TodoList(
            id=list_id, owner_id=owner.id, title="Groceries"
        )
        uow.todo_tasks.delete_all_for_list.return_value = 3

        await service.delete(list_id, owner.id)

        uow.todo_tasks.delete_all_for_list.assert_called_once_with(list_id)
        uow.todo_lists.delete.assert_called_once_with(list_id)
        assert uow.committed

    @pytest.mark.asyncio
    async def test_foreign_list_not_deleted(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User, list_id: UUID
    ):
        uow.todo_lists.get_by_id_and_owner.return_value = None

        with pytest.raises(TodoListNotFoundError):
            await service.delete(list_id, owner.id)

        uow.todo_tasks.delete_all_for_list.assert_not_called()
        uow.todo_lists.delete.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_all_for_user(
        self, service: TodoListService, uow: FakeUnitOfWork, owner: User
    ):
        uow.todo_tasks.delete_all_for_owner.return_value = 5
        uow.todo_lists.delete_all_for_owner.return_value = 2

        removed = await service.delete_all_for_user(owner.id)

        assert removed == 2
        uow.todo_tasks.delete_all_for_owner.assert_called_once_with(owner.id)
        assert uow.committed
