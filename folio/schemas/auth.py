"""Request/response schemas for auth endpoints."""

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from folio.core.security import PASSWORD_MAX_LEN
from folio.models import User


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="Email")
    # No minimum here: a short password is simply wrong, not a validation error.
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1, description="Refresh token from login")


class UserWithRole(BaseModel):
    """User summary with role details (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: str
    name: str
    role_id: uuid.UUID
    role_slug: str
    role_name: str

    @classmethod
    def from_user(cls, user: User) -> "UserWithRole":
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role_id=user.role_id,
            role_slug=user.role.slug,
            role_name=user.role.name,
        )


class LoginResponse(BaseModel):
    """Token pair returned after successful login."""

    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")
    token_type: str = Field(default="Bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserWithRole


class RefreshTokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int


class CurrentUser(BaseModel):
    """Authenticated principal and its role's permissions."""

    id: uuid.UUID
    email: str | None = None
    role_id: uuid.UUID | None = None
    role_slug: str
    permissions: list[str]
