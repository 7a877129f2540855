"""OpenTelemetry tracing setup for the Vote API."""
import logging

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

TRACER_NAME = "vote-handler"


def init_tracing(settings) -> TracerProvider:
    """
    Build a tracer provider exporting spans to the OTLP collector.

    The provider is registered as the global tracer provider. Spans are
    batched and sent over insecure gRPC to OTEL_EXPORTER_OTLP_ENDPOINT.

    Args:
        settings: Application settings

    Returns:
        The configured TracerProvider; call shutdown() to flush it
    """
    provider = TracerProvider(
        resource=Resource.create({SERVICE_NAME: settings.SERVICE_NAME})
    )

    if settings.OTEL_ENABLED:
        exporter = OTLPSpanExporter(
            endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
            insecure=True,
        )
        provider.add_span_processor(BatchSpanProcessor(exporter))
        logger.info(
            f"Exporting traces to {settings.OTEL_EXPORTER_OTLP_ENDPOINT}"
        )
    else:
        logger.info("Trace export disabled")

    trace.set_tracer_provider(provider)
    return provider
