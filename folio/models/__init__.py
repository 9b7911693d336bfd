"""SQLAlchemy ORM models."""

from folio.models.base import Base
from folio.models.role import GrantsVersion, Permission, Role, role_permissions
from folio.models.user import User

__all__ = ["Base", "GrantsVersion", "Permission", "Role", "User", "role_permissions"]
