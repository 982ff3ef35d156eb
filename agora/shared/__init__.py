"""Shared utilities: request context, telemetry, and cross-cutting helpers.

Used by domain services, infrastructure and the API. No business logic.
"""

from agora.shared.context import (
    OwnerContext,
    clear_current_owner,
    get_owner_context,
    get_request_id,
    set_current_owner,
    set_request_id,
)
from agora.shared.utils import (
    ensure_utc,
    generate_cuid,
    generate_numeric_code,
    utc_now,
)

__all__ = [
    "OwnerContext",
    "clear_current_owner",
    "get_owner_context",
    "get_request_id",
    "set_current_owner",
    "set_request_id",
    "ensure_utc",
    "generate_cuid",
    "generate_numeric_code",
    "utc_now",
]
