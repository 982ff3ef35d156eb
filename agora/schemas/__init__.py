"""API request and response schemas."""

from agora.schemas.broadcast import (
    AttachmentIn,
    BroadcastResultItem,
    BroadcastSendRequest,
    BroadcastSendResponse,
)
from agora.schemas.health import (
    HealthResponse,
    ReadinessErrorResponse,
    ReadinessResponse,
)
from agora.schemas.otp import (
    AccountSummary,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    OtpVerifyResponse,
)

__all__ = [
    "AccountSummary",
    "AttachmentIn",
    "BroadcastResultItem",
    "BroadcastSendRequest",
    "BroadcastSendResponse",
    "HealthResponse",
    "OtpRequest",
    "OtpRequestResponse",
    "OtpVerifyRequest",
    "OtpVerifyResponse",
    "ReadinessErrorResponse",
    "ReadinessResponse",
]
