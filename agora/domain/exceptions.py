"""Domain exceptions for the Agora application.

Defines domain-level exceptions for the passcode, mail and broadcast flows.
These are independent of infrastructure concerns; the presentation layer
maps them to HTTP responses in agora.core.exception_handlers.
"""

from typing import Any


class AgoraException(Exception):
    """Base exception for all Agora application errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, recipient).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON error responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class MissingInputException(AgoraException):
    """Raised when a required input (owner, code, subject, content) is empty."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required field: {field}", "MISSING_INPUT", {"field": field})


class ValidationException(AgoraException):
    """Raised when input validation fails (e.g. invalid format)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class InvalidRecipientException(AgoraException):
    """Raised when a recipient address is not syntactically an email."""

    def __init__(self, recipient: str) -> None:
        super().__init__(
            "Invalid recipient address",
            "INVALID_RECIPIENT",
            {"recipient": recipient},
        )


class NoRecipientsException(AgoraException):
    """Raised when a broadcast resolves to zero recipients."""

    def __init__(self) -> None:
        super().__init__("No recipients to send to", "NO_RECIPIENTS")


class PasscodeRejectedException(AgoraException):
    """Raised when a submitted passcode is wrong, used, unknown or expired.

    The message is identical for every cause so callers cannot tell which
    one occurred.
    """

    def __init__(self) -> None:
        super().__init__("Invalid or expired code", "PASSCODE_REJECTED")


class AccountNotFoundException(AgoraException):
    """Raised when an OTP is requested for an address with no matching account."""

    def __init__(self) -> None:
        super().__init__("Account not found", "ACCOUNT_NOT_FOUND")


class InvalidTokenException(AgoraException):
    """Raised when a session token is missing, malformed, badly signed or expired."""

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message, "INVALID_TOKEN")


class AuthorizationException(AgoraException):
    """Raised when an authenticated owner lacks the required role."""

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message, "PERMISSION_DENIED")


class ConfigurationException(AgoraException):
    """Raised when the mail relay or another required collaborator is misconfigured or unreachable."""

    def __init__(self, message: str) -> None:
        super().__init__(message, "CONFIGURATION_ERROR")


class DeliveryException(AgoraException):
    """Raised when the relay rejects or fails a single message."""

    def __init__(self, recipient: str, reason: str) -> None:
        super().__init__(
            f"Delivery to {recipient} failed: {reason}",
            "DELIVERY_ERROR",
            {"recipient": recipient, "reason": reason},
        )
        self.reason = reason


class StorageUnavailableException(AgoraException):
    """Raised when the persistence layer cannot be reached."""

    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(message, "STORAGE_UNAVAILABLE")
