from __future__ import annotations

import logging
import os

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.propagate import set_global_textmap
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, Sampler, TraceIdRatioBased
from opentelemetry.trace.propagation.tracecontext import TraceContextTextMapPropagator

_OTEL_CONFIGURED = False
logger = logging.getLogger(__name__)

# probes and scrapes would otherwise dominate the trace volume
EXCLUDED_URLS = "health/live,health/ready,metrics"


def build_sampler(raw_ratio: str | None) -> Sampler:
    """Parent-based ratio sampler from ``TRACE_SAMPLE_RATIO`` (default 1.0)."""
    try:
        ratio = float(raw_ratio) if raw_ratio else 1.0
    except ValueError:
        logger.warning("invalid_trace_sample_ratio", extra={"value": raw_ratio})
        ratio = 1.0
    return ParentBased(TraceIdRatioBased(min(max(ratio, 0.0), 1.0)))


def configure_otel(app: FastAPI) -> None:
    global _OTEL_CONFIGURED
    if _OTEL_CONFIGURED:
        return

    provider = TracerProvider(
        resource=Resource.create(
            {
                SERVICE_NAME: os.getenv("OTEL_SERVICE_NAME", "cafeorder-api"),
                "deployment.environment": os.getenv("APP_ENV", "dev"),
            }
        ),
        sampler=build_sampler(os.getenv("TRACE_SAMPLE_RATIO")),
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        try:
            provider.add_span_processor(
                BatchSpanProcessor(
                    OTLPSpanExporter(endpoint=endpoint, insecure=endpoint.startswith("http://"))
                )
            )
        except Exception:
            logger.exception("otel_exporter_setup_failed", extra={"endpoint": endpoint})

    trace.set_tracer_provider(provider)
    set_global_textmap(TraceContextTextMapPropagator())
    FastAPIInstrumentor.instrument_app(app, tracer_provider=provider, excluded_urls=EXCLUDED_URLS)
    _OTEL_CONFIGURED = True
