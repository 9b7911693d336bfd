"""Role lookups and writes, including the role_permissions junction."""

import uuid
from datetime import UTC, datetime

from sqlalchemy import and_, delete, insert, select, update
from sqlalchemy.orm import Session

from folio.models import GrantsVersion, Permission, Role, role_permissions as role_permissions_table
from folio.repositories.base import storage_errors


def find_role_by_id(db: Session, role_id: uuid.UUID) -> Role | None:
    with storage_errors("find_role_by_id"):
        return (
            db.query(Role)
            .filter(Role.id == role_id, Role.deleted_at.is_(None))
            .first()
        )


def find_role_by_slug(db: Session, slug: str) -> Role | None:
    with storage_errors("find_role_by_slug"):
        return (
            db.query(Role)
            .filter(Role.slug == slug, Role.deleted_at.is_(None))
            .first()
        )


def list_roles(db: Session) -> list[Role]:
    with storage_errors("list_roles"):
        return db.query(Role).filter(Role.deleted_at.is_(None)).order_by(Role.name).all()


def create_role(db: Session, name: str, slug: str, description: str | None = None) -> Role:
    role = Role(name=name, slug=slug, description=description)
    with storage_errors("create_role"):
        db.add(role)
        db.flush()
    return role


def update_role(
    db: Session,
    role: Role,
    name: str | None = None,
    slug: str | None = None,
    description: str | None = None,
) -> Role:
    """Apply the given fields; None leaves a field unchanged."""
    if name is not None:
        role.name = name
    if slug is not None:
        role.slug = slug
    if description is not None:
        role.description = description
    with storage_errors("update_role"):
        db.flush()
    return role


def soft_delete_role(db: Session, role_id: uuid.UUID) -> bool:
    with storage_errors("soft_delete_role"):
        updated = (
            db.query(Role)
            .filter(Role.id == role_id, Role.deleted_at.is_(None))
            .update({Role.deleted_at: datetime.now(UTC)}, synchronize_session=False)
        )
        return updated > 0


def role_permissions(db: Session, role_id: uuid.UUID) -> list[str]:
    """Permission names granted to a role, sorted."""
    stmt = (
        select(Permission.name)
        .join(role_permissions_table, role_permissions_table.c.permission_id == Permission.id)
        .where(role_permissions_table.c.role_id == role_id)
        .order_by(Permission.name)
    )
    with storage_errors("role_permissions"):
        return list(db.execute(stmt).scalars().all())


def insert_role_permission(db: Session, role_id: uuid.UUID, permission_id: uuid.UUID) -> bool:
    """Grant a permission. Returns False if the pair already existed."""
    exists_stmt = select(role_permissions_table.c.role_id).where(
        and_(
            role_permissions_table.c.role_id == role_id,
            role_permissions_table.c.permission_id == permission_id,
        )
    )
    with storage_errors("insert_role_permission"):
        if db.execute(exists_stmt).first() is not None:
            return False
        db.execute(
            insert(role_permissions_table).values(role_id=role_id, permission_id=permission_id)
        )
        db.flush()
        return True


def delete_role_permission(db: Session, role_id: uuid.UUID, permission_id: uuid.UUID) -> bool:
    """Revoke a permission. Returns False if the pair was not present."""
    stmt = delete(role_permissions_table).where(
        and_(
            role_permissions_table.c.role_id == role_id,
            role_permissions_table.c.permission_id == permission_id,
        )
    )
    with storage_errors("delete_role_permission"):
        result = db.execute(stmt)
        return result.rowcount > 0


GRANTS_VERSION_ROW = 1


def get_grants_version(db: Session) -> int:
    """Current shared grants version (0 before the first role or grant change)."""
    stmt = select(GrantsVersion.version).where(GrantsVersion.id == GRANTS_VERSION_ROW)
    with storage_errors("get_grants_version"):
        version = db.execute(stmt).scalar_one_or_none()
    return version or 0


def bump_grants_version(db: Session) -> None:
    """Increment the shared grants version inside the caller's transaction."""
    stmt = (
        update(GrantsVersion)
        .where(GrantsVersion.id == GRANTS_VERSION_ROW)
        .values(version=GrantsVersion.version + 1)
    )
    with storage_errors("bump_grants_version"):
        result = db.execute(stmt)
        if result.rowcount == 0:
            db.add(GrantsVersion(id=GRANTS_VERSION_ROW, version=1))
        db.flush()
