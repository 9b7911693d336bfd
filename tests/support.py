"""Shared fixtures: an in-memory SQLite database seeded with the built-in RBAC catalog."""

import uuid

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from folio.core.config import Settings
from folio.models import Base, Permission, User
from folio.repositories import find_permission_by_name, find_role_by_slug
from folio.services import user_admin
from folio.services.seed import seed_rbac

TEST_SECRET = "test-secret-with-enough-bytes-for-hs256"
DEFAULT_PASSWORD = "correct-horse-battery"


def make_settings(**overrides: object) -> Settings:
    values = {
        "APP_ENV": "test",
        "DATABASE_URL": "sqlite://",
        "JWT_SECRET": TEST_SECRET,
        "JWT_ACCESS_EXPIRE_MINUTES": 60,
        "JWT_REFRESH_EXPIRE_DAYS": 7,
        "LOG_LEVEL": "WARNING",
    }
    values.update(overrides)
    return Settings(**values)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database with all tables and the default roles/permissions."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = factory()
    try:
        seed_rbac(db)
    finally:
        db.close()
    return factory


def add_user(
    db: Session,
    email: str,
    role_slug: str,
    password: str = DEFAULT_PASSWORD,
    name: str = "Test User",
) -> User:
    role = find_role_by_slug(db, role_slug)
    assert role is not None, role_slug
    return user_admin.create_user(db, email=email, password=password, name=name, role_id=role.id)


def role_id(db: Session, slug: str) -> uuid.UUID:
    role = find_role_by_slug(db, slug)
    assert role is not None, slug
    return role.id


def permission(db: Session, name: str) -> Permission:
    found = find_permission_by_name(db, name)
    assert found is not None, name
    return found
