"""Login, refresh and logout: composes credential checks, tokens and the permission catalog."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from folio.core.errors import InvalidCredentials, RoleNotFound, StorageError
from folio.core.security import dummy_verify, hash_password, needs_rehash, verify_password
from folio.core.tokens import Principal, TokenKind, TokenService
from folio.models import User
from folio.repositories import find_user_by_email, find_user_by_id, update_user_password_hash
from folio.repositories.base import transaction
from folio.services.permission_catalog import PermissionCatalog

if TYPE_CHECKING:
    from folio.core.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    access_token: str
    refresh_token: str
    expires_in: int
    user: User


@dataclass(frozen=True)
class RefreshResult:
    access_token: str
    expires_in: int


class AuthService:
    """
    Session lifecycle.

    Tokens are stateless: logout only acknowledges, and a token stays valid
    until it expires. Refresh tokens are not rotated.
    """

    def __init__(
        self,
        settings: "Settings",
        tokens: TokenService,
        catalog: PermissionCatalog,
    ) -> None:
        self.settings = settings
        self.tokens = tokens
        self.catalog = catalog

    @property
    def access_expires_in(self) -> int:
        """Access token lifetime in seconds, as reported to clients."""
        return int(self.tokens.access_ttl.total_seconds())

    def _issue_access_token(self, user: User) -> str:
        return self.tokens.issue_access_token(
            user.id,
            user.role.slug,
            role_id=user.role_id,
            email=user.email,
        )

    def login(self, db: Session, email: str, password: str) -> LoginResult:
        """
        Verify credentials and issue an access + refresh token pair.

        Unknown email and wrong password raise the same InvalidCredentials.
        """
        user = find_user_by_email(db, email)
        if user is None:
            dummy_verify(password)
            logger.info("Login failed", extra={"reason": "invalid_credentials"})
            raise InvalidCredentials()
        if not verify_password(user.password_hash, password):
            logger.info("Login failed", extra={"reason": "invalid_credentials"})
            raise InvalidCredentials()

        if needs_rehash(user.password_hash):
            self._upgrade_password_hash(db, user, password)

        result = LoginResult(
            access_token=self._issue_access_token(user),
            refresh_token=self.tokens.issue_refresh_token(user.id),
            expires_in=self.access_expires_in,
            user=user,
        )
        logger.info(
            "Login succeeded",
            extra={"user_id": str(user.id), "role_slug": user.role.slug},
        )
        return result

    def _upgrade_password_hash(self, db: Session, user: User, password: str) -> None:
        """Rehash with current parameters. Failure is logged; the login still succeeds."""
        user_id = str(user.id)
        try:
            with transaction(db, "upgrade_password_hash"):
                update_user_password_hash(db, user, hash_password(password))
        except StorageError:
            logger.warning("Password hash upgrade failed", extra={"user_id": user_id})
            return
        logger.info("Upgraded password hash", extra={"user_id": user_id})

    def refresh(self, db: Session, refresh_token: str) -> RefreshResult:
        """
        Exchange a refresh token for a new access token.

        The role is read from storage, not from any token, so role changes
        take effect here. Raises TokenExpired/TokenMalformed/TokenWrongKind,
        or InvalidCredentials if the user no longer exists.
        """
        principal = self.tokens.validate(refresh_token, TokenKind.REFRESH)
        user = find_user_by_id(db, principal.user_id)
        if user is None:
            logger.info("Refresh rejected: user not found", extra={"user_id": str(principal.user_id)})
            raise InvalidCredentials()
        return RefreshResult(
            access_token=self._issue_access_token(user),
            expires_in=self.access_expires_in,
        )

    def authenticate(self, access_token: str) -> Principal:
        """Validate an access token and return its principal. No database access."""
        return self.tokens.validate(access_token, TokenKind.ACCESS)

    def logout(self, access_token: str) -> bool:
        """
        Acknowledge a logout for a valid access token.

        There is no server-side revocation: the client discards its tokens and
        they lapse at expiry.
        """
        principal = self.authenticate(access_token)
        logger.info(
            "Logout acknowledged",
            extra={"user_id": str(principal.user_id), "token_id": principal.token_id},
        )
        return True

    def permissions_for(self, db: Session, principal: Principal) -> frozenset[str]:
        """
        Permission names of the principal's role (empty for refresh principals).

        Raises RoleNotFound if the token's role was deleted, or its slug now
        belongs to a different role.
        """
        if not principal.role_slug:
            return frozenset()
        grants = self.catalog.grants_for_role(db, principal.role_slug)
        if principal.role_id is not None and grants.role_id != principal.role_id:
            raise RoleNotFound()
        return grants.permissions
