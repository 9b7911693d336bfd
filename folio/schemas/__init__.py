"""Pydantic request/response schemas."""

from folio.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    UserWithRole,
)
from folio.schemas.common import ApiResponse, ErrorBody, MessageResponse, Meta
from folio.schemas.health import HealthResponse
from folio.schemas.roles import (
    AssignPermissionRequest,
    CreateRoleRequest,
    PermissionResponse,
    RoleResponse,
    UpdateRoleRequest,
)
from folio.schemas.users import CreateUserRequest, UserResponse

__all__ = [
    "ApiResponse",
    "AssignPermissionRequest",
    "CreateRoleRequest",
    "CreateUserRequest",
    "CurrentUser",
    "ErrorBody",
    "HealthResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "Meta",
    "PermissionResponse",
    "RefreshTokenRequest",
    "RefreshTokenResponse",
    "RoleResponse",
    "UpdateRoleRequest",
    "UserResponse",
    "UserWithRole",
]
