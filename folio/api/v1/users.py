"""User administration routes, gated by users:* permissions."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from folio.api.v1.auth import require_permission
from folio.core import rbac
from folio.core.database import get_db
from folio.core.tokens import Principal
from folio.schemas.common import ApiResponse, MessageResponse, Meta, ok
from folio.schemas.users import CreateUserRequest, UserResponse
from folio.services import user_admin

router = APIRouter()

MAX_PER_PAGE = 100


@router.get("", response_model=ApiResponse[list[UserResponse]])
def list_users(
    _principal: Annotated[Principal, Depends(require_permission(rbac.USERS_READ))],
    db: Annotated[Session, Depends(get_db)],
    page: Annotated[int, Query(ge=1)] = 1,
    per_page: Annotated[int, Query(ge=1, le=MAX_PER_PAGE)] = 20,
) -> ApiResponse[list[UserResponse]]:
    """List active users, newest first, with pagination metadata."""
    users, total = user_admin.list_users(db, page=page, per_page=per_page)
    return ok(
        [UserResponse.from_user(u) for u in users],
        meta=Meta.build(page=page, per_page=per_page, total=total),
    )


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
def get_user(
    user_id: uuid.UUID,
    _principal: Annotated[Principal, Depends(require_permission(rbac.USERS_READ))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserResponse]:
    return ok(UserResponse.from_user(user_admin.get_user(db, user_id)))


@router.post("", response_model=ApiResponse[UserResponse], status_code=201)
def create_user(
    body: CreateUserRequest,
    _principal: Annotated[Principal, Depends(require_permission(rbac.USERS_CREATE))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[UserResponse]:
    user = user_admin.create_user(
        db,
        email=body.email,
        password=body.password,
        name=body.name,
        role_id=body.role_id,
    )
    return ok(UserResponse.from_user(user))


@router.delete("/{user_id}", response_model=ApiResponse[MessageResponse])
def delete_user(
    user_id: uuid.UUID,
    principal: Annotated[Principal, Depends(require_permission(rbac.USERS_DELETE))],
    db: Annotated[Session, Depends(get_db)],
) -> ApiResponse[MessageResponse]:
    """Soft-delete a user. Their content keeps referencing them."""
    user_admin.delete_user(db, actor_id=principal.user_id, user_id=user_id)
    return ok(MessageResponse(message="User deleted successfully"))
