"""Idempotent seeding of built-in roles, the permission catalog and default grants."""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from folio.core.rbac import DEFAULT_PERMISSIONS, DEFAULT_ROLE_GRANTS, DEFAULT_ROLES, split_permission_name
from folio.models import Permission, Role
from folio.repositories import (
    bump_grants_version,
    create_role,
    find_permission_by_name,
    find_role_by_slug,
    insert_role_permission,
)
from folio.repositories.base import storage_errors, transaction
from folio.services.permission_catalog import PermissionCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedSummary:
    roles_created: int = 0
    permissions_created: int = 0
    grants_created: int = 0


def seed_rbac(db: Session, catalog: PermissionCatalog | None = None) -> SeedSummary:
    """
    Insert whatever built-in roles, permissions and default grants are missing.

    Existing rows are left alone, and grants an administrator removed from a
    built-in role are not re-added unless the role itself was just created.
    """
    roles_created = permissions_created = grants_created = 0
    with transaction(db, "seed_rbac"):
        permissions: dict[str, Permission] = {}
        for name, description in DEFAULT_PERMISSIONS:
            permission = find_permission_by_name(db, name)
            if permission is None:
                resource, action = split_permission_name(name)
                permission = Permission(
                    name=name,
                    resource=resource,
                    action=action,
                    description=description,
                )
                with storage_errors("seed_permission"):
                    db.add(permission)
                    db.flush()
                permissions_created += 1
            permissions[name] = permission

        for slug, name, description in DEFAULT_ROLES:
            role: Role | None = find_role_by_slug(db, slug)
            if role is not None:
                continue
            role = create_role(db, name=name, slug=slug, description=description)
            roles_created += 1
            for permission_name in sorted(DEFAULT_ROLE_GRANTS[slug]):
                if insert_role_permission(db, role.id, permissions[permission_name].id):
                    grants_created += 1

        if roles_created or permissions_created or grants_created:
            bump_grants_version(db)

    if catalog is not None:
        catalog.invalidate_all()
    summary = SeedSummary(roles_created, permissions_created, grants_created)
    logger.info(
        "RBAC seed completed",
        extra={
            "roles_created": summary.roles_created,
            "permissions_created": summary.permissions_created,
            "grants_created": summary.grants_created,
        },
    )
    return summary
