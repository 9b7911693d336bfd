"""JWT access and refresh token issuance and validation.

Validation runs signature -> expiry -> kind and stops at the first failure:
a forged token is TokenMalformed even when it is also expired, an expired
token with a good signature is TokenExpired, and only a fully valid token of
the wrong kind is TokenWrongKind.

Access tokens embed the role slug so authorized requests need no user lookup.
The cost is a staleness window: a role change reaches the token holder only
when the access token is refreshed, at most ``access_ttl`` later.
"""

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any

import jwt

from folio.core.errors import TokenExpired, TokenMalformed, TokenWrongKind

if TYPE_CHECKING:
    from folio.core.config import Settings

TOKEN_TYPE_CLAIM = "token_type"
REQUIRED_CLAIMS = ["sub", "exp", "iat", "jti", TOKEN_TYPE_CLAIM]


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class Principal:
    """Identity recovered from a validated token."""

    user_id: uuid.UUID
    kind: TokenKind
    token_id: str
    issued_at: datetime
    expires_at: datetime
    role_slug: str | None = None
    role_id: uuid.UUID | None = None
    email: str | None = None


def _utcnow() -> datetime:
    return datetime.now(UTC)


class TokenService:
    """Mints and verifies signed session tokens."""

    def __init__(
        self,
        settings: "Settings",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._secret = settings.JWT_SECRET.get_secret_value()
        self._algorithm = settings.JWT_ALGORITHM
        self._issuer = settings.JWT_ISSUER
        self._leeway = settings.JWT_LEEWAY_SECONDS
        self._access_ttl = timedelta(minutes=settings.JWT_ACCESS_EXPIRE_MINUTES)
        self._refresh_ttl = timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS)
        self._clock = clock or _utcnow

    @property
    def access_ttl(self) -> timedelta:
        """Lifetime of access tokens; also the upper bound on role staleness."""
        return self._access_ttl

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def _encode(self, sub: uuid.UUID | str, kind: TokenKind, ttl: timedelta, **claims: Any) -> str:
        now = self._clock()
        payload: dict[str, Any] = {
            "sub": str(sub),
            "iss": self._issuer,
            "iat": now,
            "exp": now + ttl,
            "jti": uuid.uuid4().hex,
            TOKEN_TYPE_CLAIM: kind.value,
        }
        payload.update({k: v for k, v in claims.items() if v is not None})
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def issue_access_token(
        self,
        user_id: uuid.UUID | str,
        role_slug: str,
        role_id: uuid.UUID | str | None = None,
        email: str | None = None,
    ) -> str:
        """Create an access token carrying subject, role slug and a short expiry."""
        return self._encode(
            user_id,
            TokenKind.ACCESS,
            self._access_ttl,
            role=role_slug,
            role_id=str(role_id) if role_id is not None else None,
            email=email,
        )

    def issue_refresh_token(self, user_id: uuid.UUID | str) -> str:
        """Create a refresh token carrying the subject only, with a long expiry."""
        return self._encode(user_id, TokenKind.REFRESH, self._refresh_ttl)

    def validate(self, token: str, expected_kind: TokenKind) -> Principal:
        """
        Verify token signature, expiry and kind; return the Principal.

        Raises TokenMalformed, TokenExpired or TokenWrongKind.
        """
        if not token or not isinstance(token, str):
            raise TokenMalformed()
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
                leeway=self._leeway,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired(cause=e) from e
        except jwt.PyJWTError as e:
            raise TokenMalformed(cause=e) from e

        kind_claim = payload.get(TOKEN_TYPE_CLAIM)
        try:
            kind = TokenKind(kind_claim)
        except ValueError as e:
            raise TokenMalformed(cause=e) from e
        if kind is not expected_kind:
            raise TokenWrongKind()

        return _principal_from_payload(payload, kind)


def _principal_from_payload(payload: dict[str, Any], kind: TokenKind) -> Principal:
    try:
        user_id = uuid.UUID(str(payload["sub"]))
        role_id = uuid.UUID(payload["role_id"]) if payload.get("role_id") else None
        issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
        expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
    except (KeyError, TypeError, ValueError) as e:
        raise TokenMalformed(cause=e) from e

    role_slug = payload.get("role")
    if kind is TokenKind.ACCESS and not role_slug:
        raise TokenMalformed("Invalid token payload")

    return Principal(
        user_id=user_id,
        kind=kind,
        token_id=str(payload["jti"]),
        issued_at=issued_at,
        expires_at=expires_at,
        role_slug=role_slug,
        role_id=role_id,
        email=payload.get("email"),
    )
