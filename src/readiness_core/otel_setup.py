from __future__ import annotations

import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)

# readiness-core keeps working without opentelemetry installed; these helpers
# then do nothing.
try:
    from opentelemetry import trace, metrics
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.metrics import MeterProvider
    from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

    _OTEL_AVAILABLE = True
except ImportError:  # pragma: no cover - OTEL SDK missing
    _OTEL_AVAILABLE = False

    TracerProvider = object  # type: ignore[assignment,misc]
    MeterProvider = object  # type: ignore[assignment,misc]


_tracer_provider: Optional[TracerProvider] = None
_meter_provider: Optional[MeterProvider] = None


def _build_resource(service_name: str) -> "Resource":
    service_version = os.getenv("READINESS_SERVICE_VERSION", "dev")
    return Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )


def _span_exporter(exporter: str):
    if exporter.lower() == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
    return OTLPSpanExporter()


def _metric_exporter(exporter: str):
    if exporter.lower() == "grpc":
        from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
    else:
        from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
    return OTLPMetricExporter()


# ---------------------------------------------------------------------------
# Traces
# ---------------------------------------------------------------------------


def init_tracer(service_name: str = "readiness-core", exporter: str = "http") -> None:
    """
    Initialize a TracerProvider + OTLP exporter.

    :param service_name: logical service name (appears in Jaeger, Tempo, etc.)
    :param exporter: "http" (default) or "grpc"
    """
    global _tracer_provider

    if not _OTEL_AVAILABLE or _tracer_provider is not None:
        return

    try:
        span_exporter = _span_exporter(exporter)
    except ImportError:
        logger.warning("OTLP %s trace exporter is not installed; tracing stays local", exporter)
        return

    provider = TracerProvider(resource=_build_resource(service_name))
    provider.add_span_processor(BatchSpanProcessor(span_exporter))

    trace.set_tracer_provider(provider)
    _tracer_provider = provider


def get_tracer(instrumentation_name: str = "readiness_core.otel_runtime"):
    """Tracer from our provider, or from the global (often no-op) one."""
    if _tracer_provider is None:
        from opentelemetry import trace as _trace

        return _trace.get_tracer(instrumentation_name)
    return _tracer_provider.get_tracer(instrumentation_name)


# ---------------------------------------------------------------------------
# Metrics
# ---------------------------------------------------------------------------


def init_metrics(service_name: str = "readiness-core", exporter: str = "http") -> None:
    """
    Initialize a MeterProvider + OTLP metrics exporter.

    :param service_name: logical service name
    :param exporter: "http" (default) or "grpc"
    """
    global _meter_provider

    if not _OTEL_AVAILABLE or _meter_provider is not None:
        return

    try:
        metric_exporter = _metric_exporter(exporter)
    except ImportError:
        logger.warning("OTLP %s metric exporter is not installed; metrics disabled", exporter)
        return

    reader = PeriodicExportingMetricReader(metric_exporter)
    provider = MeterProvider(resource=_build_resource(service_name), metric_readers=[reader])

    metrics.set_meter_provider(provider)
    _meter_provider = provider


def get_meter(instrumentation_name: str = "readiness_core.otel_runtime"):
    """
    Meter from our provider, else from the global one. Returns None when the
    OTEL API is not installed, so callers can simply skip recording metrics.
    """
    if _meter_provider is not None:
        return _meter_provider.get_meter(instrumentation_name)
    try:
        from opentelemetry import metrics as _metrics
    except ImportError:
        return None
    return _metrics.get_meter(instrumentation_name)
