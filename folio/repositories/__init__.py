"""Persistence functions over SQLAlchemy sessions. Callers own the transaction."""

from folio.repositories.permissions import (
    find_permission_by_id,
    find_permission_by_name,
    list_permissions,
)
from folio.repositories.roles import (
    bump_grants_version,
    create_role,
    delete_role_permission,
    find_role_by_id,
    find_role_by_slug,
    get_grants_version,
    insert_role_permission,
    list_roles,
    role_permissions,
    soft_delete_role,
    update_role,
)
from folio.repositories.users import (
    create_user,
    find_user_by_email,
    find_user_by_id,
    list_users,
    soft_delete_user,
    update_user_password_hash,
)

__all__ = [
    "bump_grants_version",
    "create_role",
    "create_user",
    "delete_role_permission",
    "find_permission_by_id",
    "find_permission_by_name",
    "find_role_by_id",
    "find_role_by_slug",
    "find_user_by_email",
    "find_user_by_id",
    "get_grants_version",
    "insert_role_permission",
    "list_permissions",
    "list_roles",
    "list_users",
    "role_permissions",
    "soft_delete_role",
    "soft_delete_user",
    "update_role",
    "update_user_password_hash",
]
