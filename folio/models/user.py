"""ORM model for application users (auth and RBAC)."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid, func
from sqlalchemy.orm import relationship

from folio.models.base import Base


class User(Base):
    """
    User account for JWT authentication and permission-based access control.

    Never physically deleted: posts keep referencing their author, so removal
    sets deleted_at and the user disappears from every lookup.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    role_id = Column(Uuid, ForeignKey("roles.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    role = relationship("Role", back_populates="users", lazy="joined")
