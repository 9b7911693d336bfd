"""Authorization decisions: does a principal hold a permission?

Deny by default. Every path that does not positively find the permission in
the role's grants, including unexpected exceptions, yields Deny.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from folio.core.errors import DenyReason, RoleNotFound, StorageError
from folio.core.tokens import Principal, TokenKind
from folio.services.permission_catalog import PermissionCatalog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    # Set when the deny came from a failing backend rather than the grants.
    error: Exception | None = None

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(allowed=True)


def deny(reason: DenyReason, error: Exception | None = None) -> Decision:
    return Decision(allowed=False, reason=reason, error=error)


def authorize(
    db: Session,
    principal: Principal | None,
    required_permission: str,
    catalog: PermissionCatalog,
) -> Decision:
    """Return ALLOW iff required_permission is granted to the principal's role."""
    if principal is None or principal.kind is not TokenKind.ACCESS or not principal.role_slug:
        return deny(DenyReason.PRINCIPAL_MISSING)

    try:
        grants = catalog.grants_for_role(db, principal.role_slug)
    except RoleNotFound:
        return deny(DenyReason.NO_SUCH_ROLE)
    except StorageError as e:
        logger.error(
            "Permission lookup failed; denying",
            extra={"role_slug": principal.role_slug, "permission": required_permission},
        )
        return deny(DenyReason.PERMISSION_NOT_GRANTED, error=e)
    except Exception as e:
        logger.exception(
            "Unexpected error during permission lookup; denying",
            extra={"role_slug": principal.role_slug, "permission": required_permission},
        )
        return deny(DenyReason.PERMISSION_NOT_GRANTED, error=e)

    if principal.role_id is not None and grants.role_id != principal.role_id:
        # The slug now names a different role than the one the token was issued for.
        logger.info(
            "Token role no longer matches its slug; denying",
            extra={"role_slug": principal.role_slug, "permission": required_permission},
        )
        return deny(DenyReason.NO_SUCH_ROLE)

    if required_permission in grants.permissions:
        return ALLOW
    return deny(DenyReason.PERMISSION_NOT_GRANTED)
