"""OpenTelemetry tracing for the API process.

Spans from the OTP and broadcast services (see tracing.traced) and the
FastAPI request spans go to one tracer provider. Exporter is chosen by
TELEMETRY_EXPORTER: "otlp" (gRPC collector), "console" or "none".
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

if TYPE_CHECKING:
    from agora.core.config import Settings

logger = logging.getLogger(__name__)

# Probes are polled constantly; keep them out of traces.
UNTRACED_URLS = "/api/v1/health,/api/v1/health/ready"


def build_exporter(kind: str, otlp_endpoint: str | None = None) -> SpanExporter | None:
    """Return the span exporter for `kind`, or None for "none".

    "otlp" without an endpoint and unknown kinds fall back to the console.
    """
    kind = (kind or "console").strip().lower()
    if kind == "none":
        return None
    if kind == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint,
                insecure=otlp_endpoint.startswith("http://"),
            )
        logger.warning("TELEMETRY_EXPORTER=otlp without an endpoint; using console")
    elif kind != "console":
        logger.warning("Unknown telemetry exporter %r; using console", kind)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Owns the tracer provider for the lifetime of the app."""

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
        exporter: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self.exporter = exporter
        self.otlp_endpoint = otlp_endpoint
        self.sample_rate = min(max(sample_rate, 0.0), 1.0)
        self.tracer_provider: TracerProvider | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> TelemetryConfig:
        return cls(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.environment,
            exporter=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )

    def start(self, app: FastAPI | None = None) -> TracerProvider | None:
        """Install the global tracer provider and instrument `app`.

        Tracing is best-effort: a failure here is logged and the app runs
        without it.
        """
        try:
            provider = TracerProvider(
                resource=Resource(
                    attributes={
                        SERVICE_NAME: self.service_name,
                        SERVICE_VERSION: self.service_version,
                        "deployment.environment": self.environment,
                    }
                ),
                sampler=TraceIdRatioBased(self.sample_rate),
            )
            exporter = build_exporter(self.exporter, self.otlp_endpoint)
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(provider)
            self.tracer_provider = provider
        except Exception:
            logger.exception("Failed to initialize telemetry")
            return None

        if app is not None:
            try:
                FastAPIInstrumentor.instrument_app(
                    app, tracer_provider=provider, excluded_urls=UNTRACED_URLS
                )
            except Exception:
                logger.exception("Failed to instrument FastAPI")
        logger.info(
            "Tracing enabled: service=%s exporter=%s sample_rate=%.2f",
            self.service_name,
            self.exporter,
            self.sample_rate,
        )
        return provider

    def shutdown(self) -> None:
        """Flush pending spans and release the exporter."""
        if self.tracer_provider is None:
            return
        try:
            self.tracer_provider.shutdown()
        except Exception:
            logger.exception("Error during telemetry shutdown")
        self.tracer_provider = None


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.RLock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the telemetry instance installed at startup, if any."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry
