"""User lookups and writes. Soft-deleted users (or users of a soft-deleted role) are invisible."""

import uuid
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from folio.models import Role, User
from folio.repositories.base import normalize_email, storage_errors


def _active_users(db: Session):
    return (
        db.query(User)
        .join(Role, User.role_id == Role.id)
        .filter(User.deleted_at.is_(None), Role.deleted_at.is_(None))
    )


def find_user_by_email(db: Session, email: str) -> User | None:
    with storage_errors("find_user_by_email"):
        return _active_users(db).filter(User.email == normalize_email(email)).first()


def find_user_by_id(db: Session, user_id: uuid.UUID) -> User | None:
    with storage_errors("find_user_by_id"):
        return _active_users(db).filter(User.id == user_id).first()


def list_users(db: Session, offset: int = 0, limit: int = 20) -> tuple[list[User], int]:
    """Return one page of active users (newest first) and the total count."""
    with storage_errors("list_users"):
        query = _active_users(db)
        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.email)
            .offset(offset)
            .limit(limit)
            .all()
        )
        return users, total


def create_user(
    db: Session,
    email: str,
    password_hash: str,
    name: str,
    role_id: uuid.UUID,
) -> User:
    user = User(
        email=normalize_email(email),
        password_hash=password_hash,
        name=name.strip(),
        role_id=role_id,
    )
    with storage_errors("create_user"):
        db.add(user)
        db.flush()
    return user


def soft_delete_user(db: Session, user_id: uuid.UUID) -> bool:
    """Mark a user deleted. Returns False if no active user had that id."""
    with storage_errors("soft_delete_user"):
        updated = (
            db.query(User)
            .filter(User.id == user_id, User.deleted_at.is_(None))
            .update({User.deleted_at: datetime.now(UTC)}, synchronize_session=False)
        )
        return updated > 0


def update_user_password_hash(db: Session, user: User, password_hash: str) -> None:
    with storage_errors("update_user_password_hash"):
        user.password_hash = password_hash
        db.flush()
