"""Application services: passcode verification, OTP flows, broadcast dispatch."""

from agora.application.services.broadcast_dispatcher import BroadcastDispatcher
from agora.application.services.otp_service import OtpService
from agora.application.services.passcode_verifier import (
    PasscodeVerifier,
    VerificationOutcome,
)

__all__ = [
    "BroadcastDispatcher",
    "OtpService",
    "PasscodeVerifier",
    "VerificationOutcome",
]
