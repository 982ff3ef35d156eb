"""OTP API schemas."""

from pydantic import BaseModel, Field

from agora.domain.enums import PasscodePurpose


class OtpRequest(BaseModel):
    """Request body for POST /otp/request.

    owner defaults to "" so a missing value is answered with 400, not 422.
    """

    owner: str = Field(default="", max_length=320, description="Email address")
    purpose: PasscodePurpose = Field(default=PasscodePurpose.ADMIN_LOGIN)
    name: str | None = Field(
        default=None, max_length=200, description="Display name (required for registration)"
    )


class OtpRequestResponse(BaseModel):
    message: str = "OTP sent"
    expires_in: int = Field(..., description="Seconds until the code expires")


class OtpVerifyRequest(BaseModel):
    """Request body for POST /otp/verify."""

    owner: str = Field(default="", max_length=320)
    code: str = Field(default="", max_length=32)
    purpose: PasscodePurpose = Field(default=PasscodePurpose.ADMIN_LOGIN)


class AccountSummary(BaseModel):
    id: str
    email: str
    name: str
    role: str
    is_verified: bool


class OtpVerifyResponse(BaseModel):
    """200 response for POST /otp/verify. token is absent for registration."""

    message: str = "OTP verified"
    token: str | None = None
    token_type: str | None = None
    account: AccountSummary | None = None
