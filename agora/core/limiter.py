"""Rate limiter instance for SlowAPI.

Shared so both main (app.state.limiter) and route modules can use the same
instance without circular imports.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from agora.core.config import get_settings

limiter = Limiter(key_func=get_remote_address)

# Per client IP. Code requests send mail, so they are limited tighter than
# the other write endpoints.
VERIFY_LIMIT = "20/minute"
BROADCAST_LIMIT = "10/minute"


def otp_request_limit() -> str:
    """Limit string for POST /otp/request (OTP_REQUEST_LIMIT, default 5/minute)."""
    return get_settings().otp_request_limit


limit_otp_request = limiter.limit(otp_request_limit)
limit_otp_verify = limiter.limit(VERIFY_LIMIT)
limit_broadcast = limiter.limit(BROADCAST_LIMIT)
