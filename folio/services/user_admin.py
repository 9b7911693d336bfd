"""User administration: create, list, fetch and soft-delete users."""

import logging
import uuid

from sqlalchemy.orm import Session

from folio.core.errors import ConflictError, NotFoundError, RoleNotFound, ValidationFailed
from folio.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, hash_password
from folio.models import User
from folio.repositories import (
    create_user as repo_create_user,
    find_role_by_id,
    find_user_by_email,
    find_user_by_id,
    list_users as repo_list_users,
    soft_delete_user,
)
from folio.repositories.base import transaction

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = find_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def list_users(db: Session, page: int = 1, per_page: int = 20) -> tuple[list[User], int]:
    if page < 1 or per_page < 1:
        raise ValidationFailed("page and per_page must be positive")
    return repo_list_users(db, offset=(page - 1) * per_page, limit=per_page)


def create_user(
    db: Session,
    email: str,
    password: str,
    name: str,
    role_id: uuid.UUID,
) -> User:
    """Create a user with a hashed password. Emails stay reserved after soft-delete."""
    if not (PASSWORD_MIN_LEN <= len(password) <= PASSWORD_MAX_LEN):
        raise ValidationFailed("Invalid password length.")
    if not name.strip():
        raise ValidationFailed("Name must not be empty.")
    if find_role_by_id(db, role_id) is None:
        raise RoleNotFound()
    if find_user_by_email(db, email) is not None:
        raise ConflictError("Email already registered")
    with transaction(db, "create_user"):
        user = repo_create_user(
            db,
            email=email,
            password_hash=hash_password(password),
            name=name,
            role_id=role_id,
        )
    logger.info("User created", extra={"user_id": str(user.id), "role_id": str(role_id)})
    return get_user(db, user.id)


def delete_user(db: Session, actor_id: uuid.UUID, user_id: uuid.UUID) -> None:
    """Soft-delete a user; an administrator cannot delete their own account."""
    if actor_id == user_id:
        raise ValidationFailed("Cannot delete yourself")
    with transaction(db, "delete_user"):
        deleted = soft_delete_user(db, user_id)
        if not deleted:
            raise NotFoundError("User not found")
    logger.info("User deleted", extra={"user_id": str(user_id), "actor_id": str(actor_id)})
