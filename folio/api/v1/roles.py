"""Role and permission administration routes, gated by roles:* permissions."""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from folio.api.v1.auth import get_permission_catalog, require_permission
from folio.core import rbac
from folio.core.database import get_db
from folio.core.tokens import Principal
from folio.repositories import list_permissions as repo_list_permissions, list_roles as repo_list_roles
from folio.schemas.common import ApiResponse, MessageResponse, ok
from folio.schemas.roles import (
    AssignPermissionRequest,
    CreateRoleRequest,
    PermissionResponse,
    RoleResponse,
    UpdateRoleRequest,
)
from folio.services import role_admin
from folio.services.permission_catalog import PermissionCatalog

router = APIRouter()
permissions_router = APIRouter()

CanRead = Annotated[Principal, Depends(require_permission(rbac.ROLES_READ))]
CanUpdate = Annotated[Principal, Depends(require_permission(rbac.ROLES_UPDATE))]
DbSession = Annotated[Session, Depends(get_db)]
Catalog = Annotated[PermissionCatalog, Depends(get_permission_catalog)]


@router.get("", response_model=ApiResponse[list[RoleResponse]])
def list_roles(_principal: CanRead, db: DbSession) -> ApiResponse[list[RoleResponse]]:
    return ok([RoleResponse.model_validate(r) for r in repo_list_roles(db)])


@router.get("/{role_id}", response_model=ApiResponse[RoleResponse])
def get_role(role_id: uuid.UUID, _principal: CanRead, db: DbSession) -> ApiResponse[RoleResponse]:
    return ok(RoleResponse.model_validate(role_admin.get_role(db, role_id)))


@router.post("", response_model=ApiResponse[RoleResponse], status_code=201)
def create_role(
    body: CreateRoleRequest,
    _principal: Annotated[Principal, Depends(require_permission(rbac.ROLES_CREATE))],
    db: DbSession,
) -> ApiResponse[RoleResponse]:
    """Create a role; the slug is derived from the name when omitted."""
    role = role_admin.create_role(db, name=body.name, slug=body.slug, description=body.description)
    return ok(RoleResponse.model_validate(role))


@router.put("/{role_id}", response_model=ApiResponse[RoleResponse])
def update_role(
    role_id: uuid.UUID,
    body: UpdateRoleRequest,
    _principal: CanUpdate,
    db: DbSession,
    catalog: Catalog,
) -> ApiResponse[RoleResponse]:
    role = role_admin.update_role(
        db,
        catalog,
        role_id,
        name=body.name,
        slug=body.slug,
        description=body.description,
    )
    return ok(RoleResponse.model_validate(role))


@router.delete("/{role_id}", response_model=ApiResponse[MessageResponse])
def delete_role(
    role_id: uuid.UUID,
    _principal: Annotated[Principal, Depends(require_permission(rbac.ROLES_DELETE))],
    db: DbSession,
    catalog: Catalog,
) -> ApiResponse[MessageResponse]:
    """Soft-delete a custom role. Built-in roles cannot be deleted."""
    role_admin.delete_role(db, catalog, role_id)
    return ok(MessageResponse(message="Role deleted successfully"))


@router.get("/{role_id}/permissions", response_model=ApiResponse[list[str]])
def get_role_permissions(role_id: uuid.UUID, _principal: CanRead, db: DbSession) -> ApiResponse[list[str]]:
    return ok(role_admin.get_role_permissions(db, role_id))


@router.post("/{role_id}/permissions", response_model=ApiResponse[MessageResponse])
def assign_permission(
    role_id: uuid.UUID,
    body: AssignPermissionRequest,
    _principal: CanUpdate,
    db: DbSession,
    catalog: Catalog,
) -> ApiResponse[MessageResponse]:
    assigned = role_admin.assign_permission(db, catalog, role_id, body.permission_id)
    message = "Permission assigned to role" if assigned else "Permission already assigned to role"
    return ok(MessageResponse(message=message))


@router.delete("/{role_id}/permissions/{permission_id}", response_model=ApiResponse[MessageResponse])
def remove_permission(
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
    _principal: CanUpdate,
    db: DbSession,
    catalog: Catalog,
) -> ApiResponse[MessageResponse]:
    removed = role_admin.remove_permission(db, catalog, role_id, permission_id)
    message = "Permission removed from role" if removed else "Permission was not assigned to role"
    return ok(MessageResponse(message=message))


@permissions_router.get("", response_model=ApiResponse[list[PermissionResponse]])
def list_permissions(_principal: CanRead, db: DbSession) -> ApiResponse[list[PermissionResponse]]:
    """List the permission catalog, ordered by resource then action."""
    return ok([PermissionResponse.model_validate(p) for p in repo_list_permissions(db)])
