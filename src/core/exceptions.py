"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    USER_INACTIVE = "USER_INACTIVE"

    # Not found errors (404)
    USER_NOT_FOUND = "USER_NOT_FOUND"
    TODO_LIST_NOT_FOUND = "TODO_LIST_NOT_FOUND"
    TASK_NOT_FOUND = "TASK_NOT_FOUND"

    # Validation errors (422)
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Conflict errors (409)
    USERNAME_TAKEN = "USERNAME_TAKEN"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    VERSION_CONFLICT = "VERSION_CONFLICT"
    USER_HAS_TODO_LISTS = "USER_HAS_TODO_LISTS"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class ForbiddenError(AppException):
    """The caller is authenticated but may not act on this resource."""

    def __init__(self, message: str = "Not allowed to modify another user") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class UserInactiveError(AppException):
    """A deactivated user tried to read or change todo lists or tasks."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.USER_INACTIVE,
            message="User account is deactivated",
            status_code=403,
            details={"user_id": user_id},
        )


class NotFoundError(AppException):
    """A referenced entity does not exist or is not reachable by the caller."""

    def __init__(self, error_code: ErrorCode, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=404,
            details=details,
        )


class UserNotFoundError(NotFoundError):
    """User not found."""

    def __init__(self, user_id: str) -> None:
        super().__init__(
            ErrorCode.USER_NOT_FOUND,
            f"User not found: {user_id}",
            {"user_id": user_id},
        )


class TodoListNotFoundError(NotFoundError):
    """Todo list not found, or not owned by the caller.

    Both cases produce the same error so callers cannot probe for
    lists belonging to other users.
    """

    def __init__(self, todo_list_id: str) -> None:
        super().__init__(
            ErrorCode.TODO_LIST_NOT_FOUND,
            f"Todo list not found: {todo_list_id}",
            {"todo_list_id": todo_list_id},
        )


class TodoTaskNotFoundError(NotFoundError):
    """Task not found in the given todo list."""

    def __init__(self, task_id: str) -> None:
        super().__init__(
            ErrorCode.TASK_NOT_FOUND,
            f"Task not found: {task_id}",
            {"task_id": task_id},
        )


class ConflictError(AppException):
    """The request conflicts with the current state of the store."""

    def __init__(self, error_code: ErrorCode, message: str, details: Any | None = None) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=409,
            details=details,
        )


class UsernameTakenError(ConflictError):
    """Username is already taken."""

    def __init__(self, username: str) -> None:
        super().__init__(
            ErrorCode.USERNAME_TAKEN,
            "Username is already taken",
            {"username": username},
        )


class EmailTakenError(ConflictError):
    """Email is already registered."""

    def __init__(self, email: str) -> None:
        super().__init__(
            ErrorCode.EMAIL_TAKEN,
            "Email is already registered",
            {"email": email},
        )


class StaleVersionError(ConflictError):
    """An update was attempted against an outdated version of an entity."""

    def __init__(self, entity_type: str, entity_id: str) -> None:
        super().__init__(
            ErrorCode.VERSION_CONFLICT,
            f"The {entity_type} was modified by another request; reload and retry",
            {"entity_type": entity_type, "entity_id": entity_id},
        )


class UserHasTodoListsError(ConflictError):
    """User still owns todo lists and cannot be deleted."""

    def __init__(self, user_id: str, list_count: int) -> None:
        super().__init__(
            ErrorCode.USER_HAS_TODO_LISTS,
            "Delete the user's todo lists before deleting the user",
            {"user_id": user_id, "todo_list_count": list_count},
        )


class ValidationError(AppException):
    """A domain-level field rule was violated."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(
            error_code=ErrorCode.VALIDATION_ERROR,
            message=message,
            status_code=422,
            details={"field": field} if field else None,
        )
