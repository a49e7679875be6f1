"""Pydantic schemas for the token endpoint."""

from pydantic import BaseModel, Field


class TokenRequest(BaseModel):
    """Credentials exchanged for an access token."""

    username: str = Field(..., min_length=1, max_length=50)
    password: str = Field(..., min_length=1, max_length=128)


class TokenResponse(BaseModel):
    """Bearer token issued to an authenticated user."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int
