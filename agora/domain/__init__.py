"""Domain layer: enums and exceptions. No infrastructure imports."""

from agora.domain.enums import AccountRole, PasscodePurpose, VerificationFailure
from agora.domain.exceptions import (
    AccountNotFoundException,
    AgoraException,
    AuthorizationException,
    ConfigurationException,
    DeliveryException,
    InvalidRecipientException,
    InvalidTokenException,
    MissingInputException,
    NoRecipientsException,
    PasscodeRejectedException,
    StorageUnavailableException,
    ValidationException,
)

__all__ = [
    "AccountRole",
    "PasscodePurpose",
    "VerificationFailure",
    "AgoraException",
    "AccountNotFoundException",
    "AuthorizationException",
    "ConfigurationException",
    "DeliveryException",
    "InvalidRecipientException",
    "InvalidTokenException",
    "MissingInputException",
    "NoRecipientsException",
    "PasscodeRejectedException",
    "StorageUnavailableException",
    "ValidationException",
]
