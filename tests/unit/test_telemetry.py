"""Tests for tracing exporter selection."""

import pytest
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace.export import ConsoleSpanExporter

from agora.core.config import get_settings
from agora.shared.telemetry.telemetry import TelemetryConfig, build_exporter


def test_none_exporter() -> None:
    assert build_exporter("none") is None


@pytest.mark.parametrize("kind", ["console", "CONSOLE", "jaeger", ""])
def test_console_is_the_fallback(kind: str) -> None:
    assert isinstance(build_exporter(kind), ConsoleSpanExporter)


def test_otlp_needs_an_endpoint() -> None:
    assert isinstance(build_exporter("otlp"), ConsoleSpanExporter)
    assert isinstance(build_exporter("otlp", "http://localhost:4317"), OTLPSpanExporter)


def test_config_from_settings_clamps_sample_rate() -> None:
    settings = get_settings().model_copy(update={"telemetry_sample_rate": 3.0})
    config = TelemetryConfig.from_settings(settings)
    assert config.service_name == settings.app_name
    assert config.sample_rate == 1.0
    assert config.tracer_provider is None
    config.shutdown()
