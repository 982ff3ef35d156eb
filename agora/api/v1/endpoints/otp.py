"""OTP endpoints: request a code by email, verify it."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from agora.api.v1.dependencies import get_otp_service
from agora.application.services.otp_service import OtpService
from agora.core.limiter import limit_otp_request, limit_otp_verify
from agora.domain.exceptions import PasscodeRejectedException
from agora.schemas.otp import (
    AccountSummary,
    OtpRequest,
    OtpRequestResponse,
    OtpVerifyRequest,
    OtpVerifyResponse,
)

router = APIRouter()


@router.post(
    "/request",
    response_model=OtpRequestResponse,
    responses={
        400: {"description": "Owner missing or not an email address"},
        404: {"description": "No matching account"},
        429: {"description": "Too many requests"},
        500: {"description": "Mail relay misconfigured or unreachable"},
        503: {"description": "Storage unavailable"},
    },
)
@limit_otp_request
async def request_otp(
    request: Request,
    payload: OtpRequest,
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
) -> OtpRequestResponse:
    """Issue a code for (owner, purpose) and email it. Any earlier code stops working."""
    issued = await otp_service.request_code(payload.owner, payload.purpose, payload.name)
    return OtpRequestResponse(expires_in=issued.expires_in)


@router.post(
    "/verify",
    response_model=OtpVerifyResponse,
    responses={400: {"description": "Missing fields, invalid or expired code"}},
)
@limit_otp_verify
async def verify_otp(
    request: Request,
    payload: OtpVerifyRequest,
    otp_service: Annotated[OtpService, Depends(get_otp_service)],
) -> OtpVerifyResponse | JSONResponse:
    """Verify a code. admin-login and login return a bearer token."""
    verified = await otp_service.verify_code(payload.owner, payload.code, payload.purpose)
    if verified is None:
        # Returned, not raised: the transaction must commit so an expired
        # record removed during verification stays removed.
        rejected = PasscodeRejectedException()
        return JSONResponse(status_code=400, content=rejected.to_dict())
    return OtpVerifyResponse(
        token=verified.token,
        token_type="bearer" if verified.token else None,
        account=AccountSummary(
            id=verified.owner_id,
            email=verified.owner_address,
            name=verified.name,
            role=verified.role,
            is_verified=verified.is_verified,
        ),
    )
