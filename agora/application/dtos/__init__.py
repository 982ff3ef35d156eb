"""Application DTOs (no ORM dependency)."""

from agora.application.dtos.broadcast import (
    BroadcastAttachmentInput,
    DispatchReport,
    DispatchResult,
)
from agora.application.dtos.otp import IssuedCode, VerifiedOwner

__all__ = [
    "BroadcastAttachmentInput",
    "DispatchReport",
    "DispatchResult",
    "IssuedCode",
    "VerifiedOwner",
]
