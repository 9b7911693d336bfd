"""Password hashing and verification.

New hashes are Argon2id. Hashes created with bcrypt by earlier versions are
still accepted and flagged for rehash, so they are upgraded on next login.
"""

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

# Min/max lengths for password and display-name validation.
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128
NAME_MAX_LEN = 255

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")

# argon2-cffi defaults (RFC 9106 low-memory profile).
_hasher = PasswordHasher()

# Verified against when the email is unknown so both failure paths cost the same.
_DUMMY_HASH = _hasher.hash("folio-dummy-password")


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    return _hasher.hash(plain_password)


def _is_bcrypt_hash(hashed: str) -> bool:
    return hashed.startswith(BCRYPT_PREFIXES)


def verify_password(hashed: str | None, plain_password: str) -> bool:
    """
    Verify a plain password against a stored hash.

    A missing or malformed hash is a failed verification, never an exception.
    """
    if not hashed or plain_password is None:
        return False
    if _is_bcrypt_hash(hashed):
        # bcrypt has a 72-byte limit; hashes were created from the truncated bytes.
        pw_bytes = plain_password.encode("utf-8")[:72]
        try:
            return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False
    try:
        return _hasher.verify(hashed, plain_password)
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(hashed: str) -> bool:
    """True for legacy bcrypt hashes and Argon2 hashes with outdated parameters."""
    if _is_bcrypt_hash(hashed):
        return True
    try:
        return _hasher.check_needs_rehash(hashed)
    except (InvalidHashError, ValueError):
        return False


def dummy_verify(plain_password: str) -> None:
    """Spend one verification on a fixed hash (used when no user matched)."""
    verify_password(_DUMMY_HASH, plain_password)
