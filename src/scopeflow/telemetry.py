"""OpenTelemetry instrumentation for the Scopeflow API.

Traces are exported via gRPC OTLP when ``OTEL_ENABLED=true`` and an endpoint
is configured. The FastAPI app is instrumented directly.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Iterator

if TYPE_CHECKING:
    from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Configuration from environment
OTEL_ENABLED = os.getenv("OTEL_ENABLED", "false").lower() == "true"
OTEL_SERVICE_NAME = os.getenv("OTEL_SERVICE_NAME", "scopeflow")
OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "")


def init_telemetry(app: FastAPI | None = None) -> bool:
    """Initialize OpenTelemetry tracing if enabled.

    Returns True when a tracer provider was installed.
    """
    if not OTEL_ENABLED:
        logger.info("OpenTelemetry tracing disabled (OTEL_ENABLED=false)")
        return False

    if not OTEL_EXPORTER_OTLP_ENDPOINT:
        logger.warning(
            "OTEL_ENABLED=true but OTEL_EXPORTER_OTLP_ENDPOINT not set. "
            "Skipping OpenTelemetry initialization."
        )
        return False

    try:
        from opentelemetry import trace
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.resources import Resource
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import BatchSpanProcessor
        from opentelemetry.semconv.resource import ResourceAttributes

        resource = Resource.create(
            {
                ResourceAttributes.SERVICE_NAME: OTEL_SERVICE_NAME,
                ResourceAttributes.DEPLOYMENT_ENVIRONMENT: os.getenv("ENVIRONMENT", "development"),
                ResourceAttributes.SERVICE_VERSION: os.getenv("APP_VERSION", "unknown"),
            }
        )

        provider = TracerProvider(resource=resource)
        exporter = OTLPSpanExporter(
            endpoint=OTEL_EXPORTER_OTLP_ENDPOINT,
            insecure=True,  # Within cluster, TLS not needed
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)

        if app is not None:
            from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

            FastAPIInstrumentor.instrument_app(app)
            logger.info("FastAPI instrumented with OpenTelemetry")

        logger.info(
            f"OpenTelemetry initialized: service={OTEL_SERVICE_NAME}, "
            f"endpoint={OTEL_EXPORTER_OTLP_ENDPOINT}"
        )
        return True

    except ImportError as e:
        logger.error(
            f"OpenTelemetry packages not installed: {e}. "
            "Install with: pip install 'scopeflow[telemetry]'"
        )
    except Exception as e:
        logger.error(f"Failed to initialize OpenTelemetry: {e}")
    return False


def shutdown_telemetry() -> None:
    """Shutdown OpenTelemetry tracer provider gracefully."""
    if not OTEL_ENABLED:
        return

    try:
        from opentelemetry import trace

        provider = trace.get_tracer_provider()
        if hasattr(provider, "shutdown"):
            provider.shutdown()
            logger.info("OpenTelemetry tracer provider shut down")
    except Exception as e:
        logger.warning(f"Error shutting down OpenTelemetry: {e}")


@contextmanager
def workflow_span(name: str, **attributes: Any) -> Iterator[Any]:
    """Span around a workflow operation; yields None when tracing is off."""
    if not OTEL_ENABLED:
        yield None
        return
    try:
        from opentelemetry import trace
    except ImportError:
        yield None
        return

    tracer = trace.get_tracer("scopeflow")
    with tracer.start_as_current_span(name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(f"scopeflow.{key}", value)
        yield span
