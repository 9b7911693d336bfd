"""Permission catalog reads."""

import uuid

from sqlalchemy.orm import Session

from folio.models import Permission
from folio.repositories.base import storage_errors


def list_permissions(db: Session) -> list[Permission]:
    with storage_errors("list_permissions"):
        return db.query(Permission).order_by(Permission.resource, Permission.action).all()


def find_permission_by_id(db: Session, permission_id: uuid.UUID) -> Permission | None:
    with storage_errors("find_permission_by_id"):
        return db.query(Permission).filter(Permission.id == permission_id).first()


def find_permission_by_name(db: Session, name: str) -> Permission | None:
    with storage_errors("find_permission_by_name"):
        return db.query(Permission).filter(Permission.name == name).first()
