"""Role administration: CRUD on roles and their permission grants.

Every write bumps the shared grants version inside its transaction, then
invalidates the local permission cache for the affected role before
returning, so the next authorization check in any process sees the new
grants.
"""

import logging
import re
import uuid

from sqlalchemy.orm import Session

from folio.core.errors import ConflictError, NotFoundError, RoleNotFound, ValidationFailed
from folio.core.rbac import BUILTIN_ROLE_SLUGS
from folio.models import Permission, Role, User
from folio.repositories import (
    bump_grants_version,
    create_role as repo_create_role,
    delete_role_permission,
    find_permission_by_id,
    find_role_by_id,
    find_role_by_slug,
    insert_role_permission,
    role_permissions,
    soft_delete_role,
    update_role as repo_update_role,
)
from folio.repositories.base import storage_errors, transaction
from folio.services.permission_catalog import PermissionCatalog

logger = logging.getLogger(__name__)

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def slugify(text: str) -> str:
    """Lowercase, replace runs of non-alphanumerics with '-', trim dashes."""
    return "-".join(part for part in re.split(r"[^a-z0-9]+", text.lower()) if part)


def _validate_slug(slug: str) -> str:
    slug = slug.strip()
    if not slug or len(slug) > 100 or not SLUG_PATTERN.match(slug):
        raise ValidationFailed("Role slug must be lowercase letters, digits and dashes.")
    return slug


def get_role(db: Session, role_id: uuid.UUID) -> Role:
    role = find_role_by_id(db, role_id)
    if role is None:
        raise RoleNotFound()
    return role


def get_role_permissions(db: Session, role_id: uuid.UUID) -> list[str]:
    get_role(db, role_id)
    return role_permissions(db, role_id)


def create_role(
    db: Session,
    name: str,
    slug: str | None = None,
    description: str | None = None,
) -> Role:
    name = name.strip()
    if not name:
        raise ValidationFailed("Role name must not be empty.")
    slug = _validate_slug(slug if slug is not None else slugify(name))
    if find_role_by_slug(db, slug) is not None:
        raise ConflictError("Role slug already exists")
    with transaction(db, "create_role"):
        role = repo_create_role(db, name=name, slug=slug, description=description)
        bump_grants_version(db)
    logger.info("Role created", extra={"role_id": str(role.id), "role_slug": slug})
    return role


def update_role(
    db: Session,
    catalog: PermissionCatalog,
    role_id: uuid.UUID,
    name: str | None = None,
    slug: str | None = None,
    description: str | None = None,
) -> Role:
    role = get_role(db, role_id)
    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationFailed("Role name must not be empty.")
    if slug is not None:
        slug = _validate_slug(slug)
        if role.slug in BUILTIN_ROLE_SLUGS and slug != role.slug:
            raise ValidationFailed("Cannot change the slug of a built-in role")
        existing = find_role_by_slug(db, slug)
        if existing is not None and existing.id != role.id:
            raise ConflictError("Role slug already exists")
    with transaction(db, "update_role"):
        repo_update_role(db, role, name=name, slug=slug, description=description)
        bump_grants_version(db)
    catalog.invalidate(role_id)
    logger.info("Role updated", extra={"role_id": str(role_id)})
    return role


def delete_role(db: Session, catalog: PermissionCatalog, role_id: uuid.UUID) -> None:
    """Soft-delete a custom role. Built-in roles and roles still assigned to users are kept."""
    role = get_role(db, role_id)
    if role.slug in BUILTIN_ROLE_SLUGS:
        raise ValidationFailed("Cannot delete built-in roles")
    with storage_errors("count_role_users"):
        assigned = (
            db.query(User)
            .filter(User.role_id == role_id, User.deleted_at.is_(None))
            .count()
        )
    if assigned:
        raise ConflictError(f"Role is assigned to {assigned} user(s)")
    with transaction(db, "delete_role"):
        soft_delete_role(db, role_id)
        bump_grants_version(db)
    catalog.invalidate(role_id)
    logger.info("Role deleted", extra={"role_id": str(role_id)})


def _get_permission(db: Session, permission_id: uuid.UUID) -> Permission:
    permission = find_permission_by_id(db, permission_id)
    if permission is None:
        raise NotFoundError("Permission not found")
    return permission


def assign_permission(
    db: Session,
    catalog: PermissionCatalog,
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
) -> bool:
    """Grant a permission to a role. Returns False if it was already granted."""
    get_role(db, role_id)
    permission = _get_permission(db, permission_id)
    with transaction(db, "assign_permission"):
        assigned = insert_role_permission(db, role_id, permission_id)
        if assigned:
            bump_grants_version(db)
    catalog.invalidate(role_id)
    logger.info(
        "Permission assigned",
        extra={"role_id": str(role_id), "permission": permission.name, "changed": assigned},
    )
    return assigned


def remove_permission(
    db: Session,
    catalog: PermissionCatalog,
    role_id: uuid.UUID,
    permission_id: uuid.UUID,
) -> bool:
    """Revoke a permission from a role. Returns False if it was not granted."""
    get_role(db, role_id)
    permission = _get_permission(db, permission_id)
    with transaction(db, "remove_permission"):
        removed = delete_role_permission(db, role_id, permission_id)
        if removed:
            bump_grants_version(db)
    catalog.invalidate(role_id)
    logger.info(
        "Permission removed",
        extra={"role_id": str(role_id), "permission": permission.name, "changed": removed},
    )
    return removed
