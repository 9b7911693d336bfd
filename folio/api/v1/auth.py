"""JWT login/refresh/logout routes and auth dependencies (get_current_principal, require_permission)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from folio.core.database import get_db
from folio.core.errors import DenyReason, FolioError, NotAuthenticated, PermissionDenied, RoleNotFound
from folio.core.tokens import Principal
from folio.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    RefreshTokenResponse,
    UserWithRole,
)
from folio.schemas.common import ApiResponse, MessageResponse, ok
from folio.services.auth_service import AuthService
from folio.services.authorization import authorize
from folio.services.permission_catalog import PermissionCatalog

logger = logging.getLogger(__name__)
router = APIRouter()
security = HTTPBearer(auto_error=False)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_permission_catalog(request: Request) -> PermissionCatalog:
    return request.app.state.permission_catalog


def _bearer_token(credentials: HTTPAuthorizationCredentials | None) -> str:
    if credentials is None or not credentials.credentials:
        raise NotAuthenticated()
    return credentials.credentials


def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> Principal:
    """Dependency: require a valid Bearer access token. Raises 401 if missing, invalid or expired."""
    return auth_service.authenticate(_bearer_token(credentials))


def require_permission(permission: str) -> Callable[..., Principal]:
    """
    Build a dependency that lets the request through only if the caller's role
    holds `permission`. Raises 401 without a valid token, 403 when denied and
    500 when the permission lookup itself failed.
    """

    def dependency(
        principal: Annotated[Principal, Depends(get_current_principal)],
        db: Annotated[Session, Depends(get_db)],
        catalog: Annotated[PermissionCatalog, Depends(get_permission_catalog)],
    ) -> Principal:
        decision = authorize(db, principal, permission, catalog)
        if decision.allowed:
            return principal
        if decision.error is not None:
            if isinstance(decision.error, FolioError):
                raise decision.error
            raise FolioError(cause=decision.error)
        logger.info(
            "Permission denied",
            extra={
                "user_id": str(principal.user_id),
                "role_slug": principal.role_slug,
                "permission": permission,
                "reason": decision.reason.value if decision.reason else None,
            },
        )
        raise PermissionDenied(decision.reason, permission)

    dependency.__name__ = f"require_{permission.replace(':', '_')}"
    return dependency


@router.post("/login", response_model=ApiResponse[LoginResponse])
def login(
    body: LoginRequest,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[LoginResponse]:
    """
    Authenticate with email and password; returns access and refresh tokens.
    Include the access token in the Authorization header as: Bearer <access_token>
    """
    result = auth_service.login(db, body.email, body.password)
    return ok(
        LoginResponse(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            expires_in=result.expires_in,
            user=UserWithRole.from_user(result.user),
        )
    )


@router.post("/refresh", response_model=ApiResponse[RefreshTokenResponse])
def refresh_token(
    body: RefreshTokenRequest,
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[RefreshTokenResponse]:
    """Exchange a refresh token for a new access token carrying the user's current role."""
    result = auth_service.refresh(db, body.refresh_token)
    return ok(RefreshTokenResponse(access_token=result.access_token, expires_in=result.expires_in))


@router.post("/logout", response_model=ApiResponse[MessageResponse])
def logout(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[MessageResponse]:
    """Acknowledge logout. Tokens are not revoked server-side; the client must discard them."""
    auth_service.logout(_bearer_token(credentials))
    return ok(MessageResponse(message="Successfully logged out"))


@router.get("/me", response_model=ApiResponse[CurrentUser])
def me(
    principal: Annotated[Principal, Depends(get_current_principal)],
    db: Annotated[Session, Depends(get_db)],
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> ApiResponse[CurrentUser]:
    """Return the caller's identity and the permissions of their role."""
    try:
        permissions = auth_service.permissions_for(db, principal)
    except RoleNotFound as e:
        raise PermissionDenied(DenyReason.NO_SUCH_ROLE, message="Role no longer exists") from e
    return ok(
        CurrentUser(
            id=principal.user_id,
            email=principal.email,
            role_id=principal.role_id,
            role_slug=principal.role_slug or "",
            permissions=sorted(permissions),
        )
    )
