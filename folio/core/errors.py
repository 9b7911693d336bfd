"""Domain errors raised by services and rendered by the API error handler.

Credential and token errors map to 401, permission errors to 403 and storage
failures to 500, so that "the database is down" is never reported as "denied".
"""

from enum import Enum


class FolioError(Exception):
    """Base class for errors that carry an HTTP status and a stable error code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None, cause: Exception | None = None) -> None:
        self.message = message or self.default_message
        self.cause = cause
        super().__init__(self.message)


class AuthError(FolioError):
    """Credential or token problem: the caller is not authenticated."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class NotAuthenticated(AuthError):
    """No bearer token was presented."""

    default_message = "Not authenticated"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password. The message never says which."""

    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class TokenError(AuthError):
    code = "INVALID_TOKEN"
    default_message = "Invalid token"


class TokenExpired(TokenError):
    code = "TOKEN_EXPIRED"
    default_message = "Token has expired"


class TokenMalformed(TokenError):
    """Bad signature, undecodable token or missing claims."""

    code = "TOKEN_MALFORMED"
    default_message = "Invalid token"


class TokenWrongKind(TokenError):
    """An access token was used where a refresh token was expected, or vice versa."""

    code = "TOKEN_WRONG_KIND"
    default_message = "Invalid token type"


class DenyReason(str, Enum):
    """Why the authorization evaluator refused a request."""

    NO_SUCH_ROLE = "no_such_role"
    PERMISSION_NOT_GRANTED = "permission_not_granted"
    PRINCIPAL_MISSING = "principal_missing"


class PermissionDenied(FolioError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Access denied"

    def __init__(
        self,
        reason: DenyReason,
        permission: str | None = None,
        message: str | None = None,
    ) -> None:
        self.reason = reason
        self.permission = permission
        if message is None and permission:
            message = f"Missing permission: {permission}"
        super().__init__(message)


class NotFoundError(FolioError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class RoleNotFound(NotFoundError):
    code = "ROLE_NOT_FOUND"
    default_message = "Role not found"


class ConflictError(FolioError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class ValidationFailed(FolioError):
    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class StorageError(FolioError):
    """The backing store failed (unreachable, constraint, driver error)."""

    status_code = 500
    code = "DATABASE_ERROR"
    default_message = "Database error"
