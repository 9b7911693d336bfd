"""Translate SQLAlchemy failures into domain errors and scope write transactions."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from folio.core.errors import ConflictError, StorageError

logger = logging.getLogger(__name__)


@contextmanager
def storage_errors(operation: str) -> Iterator[None]:
    """Re-raise IntegrityError as ConflictError and any other DB error as StorageError."""
    try:
        yield
    except IntegrityError as e:
        raise ConflictError("Record already exists", cause=e) from e
    except SQLAlchemyError as e:
        logger.error(
            "Database operation failed",
            extra={"operation": operation, "error_type": type(e).__name__},
        )
        raise StorageError(cause=e) from e


@contextmanager
def transaction(db: Session, operation: str) -> Iterator[None]:
    """Commit the block's writes as one unit; roll back on any failure."""
    try:
        yield
        with storage_errors(operation):
            db.commit()
    except Exception:
        db.rollback()
        raise


def normalize_email(email: str) -> str:
    return email.strip().lower()
