"""Token issuing endpoint."""

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import get_auth_provider
from api.v1.dependencies import get_user_service
from api.v1.schemas.auth import TokenRequest, TokenResponse
from core.exceptions import AuthenticationError, ErrorCode
from core.rate_limit import WRITE_LIMIT, limiter
from domain.services.user_service import UserService
from infrastructure.auth.jwt_provider import JWTAuthProvider
from infrastructure.auth.provider import TokenUser

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/token",
    response_model=TokenResponse,
    summary="Exchange credentials for an access token",
    responses={
        200: {"description": "Token issued"},
        401: {"description": "Unknown user, wrong password or inactive account"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def issue_token(
    request: Request,
    body: TokenRequest,
    service: UserService = Depends(get_user_service),
    auth_provider: JWTAuthProvider = Depends(get_auth_provider),
) -> TokenResponse:
    """
    Authenticate with username and password.

    The returned bearer token identifies the caller on every other endpoint.
    """
    user = await service.authenticate(body.username, body.password)
    if not user:
        raise AuthenticationError(
            message="Invalid username or password",
            error_code=ErrorCode.INVALID_CREDENTIALS,
        )

    token = auth_provider.create_token(
        TokenUser(
            id=user.id,
            username=user.username,
            email=user.email,
            display_name=user.full_name,
        )
    )
    return TokenResponse(access_token=token, expires_in=auth_provider.expire_minutes * 60)
