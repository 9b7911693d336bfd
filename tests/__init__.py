"""Test package. Point settings at SQLite before any folio module builds its engine."""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("JWT_SECRET", "test-secret-with-enough-bytes-for-hs256")
