# food_delivery_api/app/core/exceptions.py


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    `message` is safe to show to the caller; `status_code` is the HTTP status
    the API layer answers with.
    """
    status_code: int = 400
    default_message: str = "request failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.message


class InvalidCredentials(ServiceError):
    status_code = 401
    default_message = "Invalid credentials"

    @property
    def public_message(self) -> str:
        return "Invalid credentials"


class UserNotFound(ServiceError):
    status_code = 404
    default_message = "user not found"


class UserAlreadyExists(ServiceError):
    default_message = "user with this email already exists"


# --- Token errors ---
class TokenInvalid(ServiceError):
    status_code = 401
    default_message = "token is invalid"

    @property
    def public_message(self) -> str:
        return "Token is expired"


class TokenExpired(TokenInvalid):
    default_message = "token is expired"


class TokenMalformed(TokenInvalid):
    default_message = "token payload is malformed"


class SessionNotFound(TokenInvalid):
    """No token identifiers stored for the user (not logged in)."""
    default_message = "session not found"
# --- End token errors ---


class ResetCodeExpiredOrInvalid(ServiceError):
    default_message = "invalid or expired reset code"


class InvalidResetCode(ServiceError):
    default_message = "invalid reset code"


class InvalidCurrentPassword(ServiceError):
    default_message = "invalid current password"


class StorageFailure(ServiceError):
    status_code = 500
    default_message = "internal server error"


class PasswordResetFailed(StorageFailure):
    default_message = "failed to initiate password reset"


class ProductNotFound(ServiceError):
    status_code = 404
    default_message = "product not found"


# Infrastructure errors, never shown to callers as-is
class CacheError(Exception):
    """Raised by a key-value store when the backend fails."""


class NotificationError(Exception):
    """Raised when a notification (email) could not be delivered."""
