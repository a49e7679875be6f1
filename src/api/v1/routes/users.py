"""User directory API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_user_service
from api.v1.schemas.user import (
    PasswordChange,
    UserCreate,
    UserDetailResponse,
    UserExistsResponse,
    UserListResponse,
    UserResponse,
    UserUpdate,
)
from core.exceptions import ForbiddenError, UserNotFoundError
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.user import User
from domain.services.user_service import UserService
from infrastructure.auth.provider import TokenUser

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User registered"},
        409: {"description": "Username or email already in use"},
        422: {"description": "Validation error"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def register_user(
    request: Request,
    body: UserCreate,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    """Create an account. This is the only endpoint that needs no token besides `/auth/token`."""
    user = await service.register(
        username=body.username,
        email=body.email,
        password=body.password,
        first_name=body.first_name,
        last_name=body.last_name,
    )
    return UserDetailResponse(data=UserResponse.from_entity(user))


@router.get("", response_model=UserListResponse, summary="List all users")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_users(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    return _list_response(await service.get_all())


@router.get("/active", response_model=UserListResponse, summary="List active users")
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_active_users(
    request: Request,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserListResponse:
    return _list_response(await service.get_all_active())


@router.get(
    "/exists",
    response_model=UserExistsResponse,
    summary="Check whether a username or email is in use",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def check_user_exists(
    request: Request,
    service: UserService = Depends(get_user_service),
    username: str | None = Query(None, min_length=1, max_length=50),
    email: str | None = Query(None, min_length=1, max_length=100),
) -> UserExistsResponse:
    """
    Availability check used by sign-up forms.

    Only the flags for the parameters actually supplied are filled in.
    """
    result = UserExistsResponse()
    if username is not None:
        result.username_taken = await service.is_username_taken(username)
    if email is not None:
        result.email_registered = await service.is_email_registered(email.strip().lower())
    return result


@router.get(
    "/username/{username}",
    response_model=UserDetailResponse,
    summary="Get a user by username",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_user_by_username(
    request: Request,
    username: str,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    found = await service.get_by_username(username)
    if not found:
        raise UserNotFoundError(username)
    return UserDetailResponse(data=UserResponse.from_entity(found))


@router.get(
    "/email/{email}",
    response_model=UserDetailResponse,
    summary="Get a user by email",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_user_by_email(
    request: Request,
    email: str,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    found = await service.get_by_email(email.strip().lower())
    if not found:
        raise UserNotFoundError(email)
    return UserDetailResponse(data=UserResponse.from_entity(found))


@router.get(
    "/{user_id}",
    response_model=UserDetailResponse,
    summary="Get a user",
    responses={404: {"description": "User not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_user(
    request: Request,
    user_id: UUID,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    found = await service.get_by_id(user_id)
    if not found:
        raise UserNotFoundError(str(user_id))
    return UserDetailResponse(data=UserResponse.from_entity(found))


@router.put(
    "/{user_id}",
    response_model=UserDetailResponse,
    summary="Update a user",
    responses={
        200: {"description": "User updated"},
        403: {"description": "Attempt to modify another user"},
        404: {"description": "User not found"},
        409: {"description": "Username/email taken or version conflict"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def update_user(
    request: Request,
    user_id: UUID,
    body: UserUpdate,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    """
    Replace username, email and names (all fields are written).

    Send the `version` last read to reject the update if someone else
    changed the user in between.
    """
    _require_self(user, user_id)
    updated = await service.update(
        user_id=user_id,
        username=body.username,
        email=body.email,
        first_name=body.first_name,
        last_name=body.last_name,
        expected_version=body.version,
    )
    return UserDetailResponse(data=UserResponse.from_entity(updated))


@router.patch(
    "/{user_id}/active",
    response_model=UserDetailResponse,
    summary="Activate or deactivate a user",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def set_user_active(
    request: Request,
    user_id: UUID,
    user: CurrentUser,
    active: bool = Query(..., description="New value of the active flag"),
    service: UserService = Depends(get_user_service),
) -> UserDetailResponse:
    _require_self(user, user_id)
    updated = await service.set_active(user_id, active)
    return UserDetailResponse(data=UserResponse.from_entity(updated))


@router.patch(
    "/{user_id}/password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change a user's password",
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def change_password(
    request: Request,
    user_id: UUID,
    body: PasswordChange,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> None:
    _require_self(user, user_id)
    await service.change_password(user_id, body.new_password)


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a user",
    responses={
        204: {"description": "User deleted"},
        404: {"description": "User not found"},
        409: {"description": "User still owns todo lists"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_user(
    request: Request,
    user_id: UUID,
    user: CurrentUser,
    service: UserService = Depends(get_user_service),
) -> None:
    """Delete an account. Its todo lists must be deleted first."""
    _require_self(user, user_id)
    await service.delete(user_id)


def _require_self(caller: TokenUser, user_id: UUID) -> None:
    if caller.id != user_id:
        raise ForbiddenError()


def _list_response(users: list[User]) -> UserListResponse:
    return UserListResponse(
        data=[UserResponse.from_entity(u) for u in users],
        meta={"total": len(users)},
    )
