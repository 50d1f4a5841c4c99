import logging

from opentelemetry import trace, metrics
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from hotel_booking.config import settings

logger = logging.getLogger(__name__)


def parse_headers(raw: str) -> dict:
    """Parse exporter headers like ``Authorization=Basic YWRt...,X-Org=1``."""
    headers = {}
    for header in raw.split(","):
        if "=" in header:
            key, value = header.split("=", 1)
            headers[key.strip()] = value.strip()
    return headers


def setup_telemetry(app):
    """Configure OpenTelemetry tracing and metrics.

    With telemetry disabled the global no-op providers stay in place, so
    spans and counters still work but export nothing.
    """
    if not settings.otel_enabled:
        logger.info("OpenTelemetry export disabled")
        return trace.get_tracer(__name__), metrics.get_meter(__name__)

    # Create resource with service information
    resource = Resource(attributes={
        ResourceAttributes.SERVICE_NAME: settings.otel_service_name,
        ResourceAttributes.SERVICE_VERSION: settings.service_version,
    })

    # Setup tracing
    trace_provider = TracerProvider(resource=resource)
    trace_exporter = OTLPSpanExporter(
        endpoint=f"{settings.otel_exporter_otlp_endpoint}/v1/traces"
    )
    trace_provider.add_span_processor(BatchSpanProcessor(trace_exporter))
    trace.set_tracer_provider(trace_provider)

    # Setup metrics
    metric_headers = parse_headers(settings.otel_exporter_otlp_metrics_headers)
    metric_exporter = OTLPMetricExporter(
        endpoint=f"{settings.otel_exporter_otlp_metrics_endpoint}/v1/metrics",
        headers=metric_headers or None,
    )
    metric_reader = PeriodicExportingMetricReader(
        metric_exporter,
        export_interval_millis=10000,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)

    # Instrument FastAPI and the remote store's HTTP client
    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()

    return trace.get_tracer(__name__), metrics.get_meter(__name__)
