"""Shared utilities: datetime, generators, normalization."""

from agora.shared.utils.datetime import (
    ensure_utc,
    expires_after,
    is_expired,
    utc_now,
)
from agora.shared.utils.generators import generate_cuid, generate_numeric_code
from agora.shared.utils.sanitization import (
    InputNormalizer,
    normalize_address,
    normalize_code,
    validate_address,
)

__all__ = [
    "generate_cuid",
    "generate_numeric_code",
    "utc_now",
    "ensure_utc",
    "expires_after",
    "is_expired",
    "InputNormalizer",
    "normalize_address",
    "normalize_code",
    "validate_address",
]
