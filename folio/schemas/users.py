"""Request/response schemas for user administration."""

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from folio.core.security import NAME_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from folio.models import User
from folio.schemas.auth import UserWithRole


class CreateUserRequest(BaseModel):
    # email-validator caps addresses at 254 characters, under the column size.
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LEN)
    role_id: uuid.UUID


class UserResponse(UserWithRole):
    created_at: datetime | None = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        base = UserWithRole.from_user(user)
        return cls(**base.model_dump(), created_at=user.created_at)
