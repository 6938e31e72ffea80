"""
Error taxonomy shared by services, access control and the HTTP boundary.

Every operational error carries an HTTP status and a stable machine-readable
code. Services raise these; a single set of exception handlers in
newsdesk.main turns them into the response envelope.
"""

from typing import Any


class AppError(Exception):
    """Base class for expected, operational errors (4xx and controlled 5xx)."""

    status_code: int = 500
    default_code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        code: str | None = None,
        errors: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.errors = errors
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or out-of-bounds input."""

    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class AuthenticationError(AppError):
    """Missing, invalid or expired credential, unverified email, suspended account."""

    status_code = 401
    default_code = "AUTH_REQUIRED"
    default_message = "Authentication required"


class AuthorizationError(AppError):
    """Authenticated but not allowed to perform the action."""

    status_code = 403
    default_code = "INSUFFICIENT_PERMISSIONS"
    default_message = "Insufficient permissions"


class SubscriptionRequiredError(AuthorizationError):
    """
    The token's subscriber flag is false. The flag is frozen when the token is minted,
    so the error tells clients that signing in again picks up a new subscription.
    """

    default_code = "SUBSCRIPTION_REQUIRED"
    default_message = "Subscription required to access this feature"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message,
            errors=[
                {
                    "field": "token",
                    "message": "If you subscribed recently, sign in again to refresh your access.",
                    "code": "REAUTHENTICATE",
                }
            ],
        )


class NotFoundError(AppError):
    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    default_code = "CONFLICT"
    default_message = "Resource already exists"


class InternalError(AppError):
    """Collaborator failure (email delivery, storage) not attributable to the caller."""

    status_code = 500
    default_code = "INTERNAL_ERROR"
    default_message = "Internal server error. Please try again later."


class ConfigError(Exception):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenError(Exception):
    """Base for session token verification failures."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class TokenExpired(TokenError):
    pass


class TokenInvalid(TokenError):
    """Signature, format or claim-shape check failed."""

    pass
