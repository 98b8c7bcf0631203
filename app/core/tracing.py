"""
OpenTelemetry tracing.

Off unless OTEL_ENABLED=true. When on, incoming requests (FastAPI) and
outbound calls (httpx) are instrumented, and the service adds its own spans
around generation calls and PDF rendering. Spans go to OTLP when
OTEL_EXPORTER_OTLP_ENDPOINT is set and to the console otherwise.

Environment Variables:
    OTEL_ENABLED: "true" to enable tracing (default: false)
    OTEL_SERVICE_NAME: Service name override (default: plusnote-health-journal)
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP gRPC endpoint (optional)
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
from opentelemetry.trace import Span

logger = logging.getLogger("Plusnote.Tracing")

DEFAULT_SERVICE_NAME = "plusnote-health-journal"
TRACER_NAME = "plusnote.health_journal"

_tracer_provider: Optional[TracerProvider] = None


def is_tracing_enabled() -> bool:
    return os.getenv("OTEL_ENABLED", "false").lower() == "true"


def _exporter() -> SpanExporter:
    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if not endpoint:
        return ConsoleSpanExporter()
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    except ImportError:
        logger.warning("OTLP endpoint set but the OTLP exporter is not installed; exporting to console")
        return ConsoleSpanExporter()
    logger.info(f"Exporting spans to OTLP endpoint {endpoint}")
    return OTLPSpanExporter(endpoint=endpoint)


def setup_tracing(service_name: Optional[str] = None) -> Optional[TracerProvider]:
    """Install the tracer provider; returns None when tracing is disabled."""
    global _tracer_provider

    if _tracer_provider is not None:
        return _tracer_provider
    if not is_tracing_enabled():
        logger.info("Tracing disabled (set OTEL_ENABLED=true to enable)")
        return None

    name = service_name or os.getenv("OTEL_SERVICE_NAME") or DEFAULT_SERVICE_NAME
    _tracer_provider = TracerProvider(resource=Resource.create({SERVICE_NAME: name}))
    _tracer_provider.add_span_processor(BatchSpanProcessor(_exporter()))
    trace.set_tracer_provider(_tracer_provider)

    logger.info(f"Tracing initialized for service: {name}")
    return _tracer_provider


@contextmanager
def traced(span_name: str, **attributes: Any) -> Iterator[Span]:
    """
    Wrap a block in a span. A no-op span is used while tracing is disabled.

        with traced("llm.generate", provider="gemini") as span:
            ...
            span.set_attribute("llm.attempts", 2)
    """
    tracer = trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(span_name) as span:
        for key, value in attributes.items():
            if value is not None:
                span.set_attribute(key, value)
        yield span


def instrument_app(app) -> None:
    """Instrument the FastAPI app and every httpx client."""
    if not is_tracing_enabled():
        return

    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()
    logger.info("FastAPI and httpx instrumentation enabled")


def shutdown_tracing() -> None:
    """Flush pending spans."""
    global _tracer_provider

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
        logger.info("Tracing shut down")
