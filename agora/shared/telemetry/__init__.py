"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from agora.shared.telemetry.logging import get_logger, mask_address, setup_logging
from agora.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)
from agora.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "mask_address",
    "TelemetryConfig",
    "get_telemetry",
    "set_telemetry",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
