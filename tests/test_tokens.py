"""Unit tests for folio.core.tokens: issuance, validation order and token kinds."""

import unittest
import uuid
from datetime import UTC, datetime, timedelta

import jwt

from folio.core.errors import TokenExpired, TokenMalformed, TokenWrongKind
from folio.core.tokens import TokenKind, TokenService

from tests.support import TEST_SECRET, make_settings


def _two_hours_ago() -> datetime:
    return datetime.now(UTC) - timedelta(hours=2)


class TestIssueAndValidate(unittest.TestCase):
    """Freshly issued tokens validate as their own kind."""

    def setUp(self) -> None:
        self.tokens = TokenService(make_settings())
        self.user_id = uuid.uuid4()
        self.role_id = uuid.uuid4()

    def test_access_token_carries_identity_and_role(self) -> None:
        token = self.tokens.issue_access_token(
            self.user_id, "writer", role_id=self.role_id, email="w@example.com"
        )
        principal = self.tokens.validate(token, TokenKind.ACCESS)
        self.assertEqual(principal.user_id, self.user_id)
        self.assertIs(principal.kind, TokenKind.ACCESS)
        self.assertEqual(principal.role_slug, "writer")
        self.assertEqual(principal.role_id, self.role_id)
        self.assertEqual(principal.email, "w@example.com")
        self.assertTrue(principal.token_id)

    def test_access_token_lifetime_matches_settings(self) -> None:
        principal = self.tokens.validate(
            self.tokens.issue_access_token(self.user_id, "viewer"), TokenKind.ACCESS
        )
        self.assertEqual(principal.expires_at - principal.issued_at, timedelta(minutes=60))
        self.assertEqual(self.tokens.access_ttl, timedelta(minutes=60))

    def test_refresh_token_carries_subject_only(self) -> None:
        principal = self.tokens.validate(
            self.tokens.issue_refresh_token(self.user_id), TokenKind.REFRESH
        )
        self.assertEqual(principal.user_id, self.user_id)
        self.assertIs(principal.kind, TokenKind.REFRESH)
        self.assertIsNone(principal.role_slug)
        self.assertEqual(principal.expires_at - principal.issued_at, timedelta(days=7))

    def test_each_token_has_unique_id(self) -> None:
        a = self.tokens.validate(self.tokens.issue_refresh_token(self.user_id), TokenKind.REFRESH)
        b = self.tokens.validate(self.tokens.issue_refresh_token(self.user_id), TokenKind.REFRESH)
        self.assertNotEqual(a.token_id, b.token_id)


class TestTokenKinds(unittest.TestCase):
    """A valid token of the wrong kind is rejected as TokenWrongKind."""

    def setUp(self) -> None:
        self.tokens = TokenService(make_settings())

    def test_refresh_token_rejected_as_access(self) -> None:
        token = self.tokens.issue_refresh_token(uuid.uuid4())
        with self.assertRaises(TokenWrongKind):
            self.tokens.validate(token, TokenKind.ACCESS)

    def test_access_token_rejected_as_refresh(self) -> None:
        token = self.tokens.issue_access_token(uuid.uuid4(), "admin")
        with self.assertRaises(TokenWrongKind):
            self.tokens.validate(token, TokenKind.REFRESH)


class TestValidationFailures(unittest.TestCase):
    """Signature is checked before expiry, and expiry before kind."""

    def setUp(self) -> None:
        self.settings = make_settings()
        self.tokens = TokenService(self.settings)
        self.stale_tokens = TokenService(self.settings, clock=_two_hours_ago)

    def test_expired_access_token(self) -> None:
        token = self.stale_tokens.issue_access_token(uuid.uuid4(), "writer")
        with self.assertRaises(TokenExpired) as ctx:
            self.tokens.validate(token, TokenKind.ACCESS)
        self.assertEqual(ctx.exception.code, "TOKEN_EXPIRED")

    def test_expired_token_of_wrong_kind_reports_expiry(self) -> None:
        token = self.stale_tokens.issue_access_token(uuid.uuid4(), "writer")
        with self.assertRaises(TokenExpired):
            self.tokens.validate(token, TokenKind.REFRESH)

    def test_forged_signature_is_malformed(self) -> None:
        forger = TokenService(make_settings(JWT_SECRET="some-other-secret-of-decent-length"))
        token = forger.issue_access_token(uuid.uuid4(), "admin")
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(token, TokenKind.ACCESS)

    def test_forged_and_expired_is_malformed(self) -> None:
        forger = TokenService(
            make_settings(JWT_SECRET="some-other-secret-of-decent-length"),
            clock=_two_hours_ago,
        )
        token = forger.issue_access_token(uuid.uuid4(), "admin")
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(token, TokenKind.ACCESS)

    def test_tampered_payload_is_malformed(self) -> None:
        token = self.tokens.issue_access_token(uuid.uuid4(), "viewer")
        header, payload, signature = token.split(".")
        forged_payload = payload[:-2] + ("AA" if payload[-2:] != "AA" else "BB")
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(".".join([header, forged_payload, signature]), TokenKind.ACCESS)

    def test_garbage_and_empty_tokens_are_malformed(self) -> None:
        for token in ("", "not-a-token", "a.b.c"):
            with self.subTest(token=token):
                with self.assertRaises(TokenMalformed):
                    self.tokens.validate(token, TokenKind.ACCESS)

    def test_wrong_issuer_is_malformed(self) -> None:
        other = TokenService(make_settings(JWT_ISSUER="someone-else"))
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(other.issue_access_token(uuid.uuid4(), "admin"), TokenKind.ACCESS)

    def test_access_token_without_role_is_malformed(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "iss": self.settings.JWT_ISSUER,
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "jti": uuid.uuid4().hex,
                "token_type": "access",
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(token, TokenKind.ACCESS)

    def test_unknown_token_type_is_malformed(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "iss": self.settings.JWT_ISSUER,
                "iat": now,
                "exp": now + timedelta(minutes=5),
                "jti": uuid.uuid4().hex,
                "token_type": "id",
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(token, TokenKind.ACCESS)

    def test_missing_required_claim_is_malformed(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {
                "sub": str(uuid.uuid4()),
                "iss": self.settings.JWT_ISSUER,
                "exp": now + timedelta(minutes=5),
                "token_type": "refresh",
            },
            TEST_SECRET,
            algorithm="HS256",
        )
        with self.assertRaises(TokenMalformed):
            self.tokens.validate(token, TokenKind.REFRESH)


if __name__ == "__main__":
    unittest.main()
