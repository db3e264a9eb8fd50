"""OpenTelemetry wiring for the trade journal.

Exporters are installed only when ``telemetry_enabled`` is set. The journal
instruments (portfolio computation span and counters) are created against the
global API providers, so they are no-ops until exporters are installed.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from sqlalchemy.ext.asyncio import AsyncEngine

from trade_journal.config import JournalSettings

logger = logging.getLogger(__name__)

_INSTRUMENTATION_SCOPE = "trade_journal"
_METRIC_EXPORT_INTERVAL_MS = 15000
_installed = False

_tracer = trace.get_tracer(_INSTRUMENTATION_SCOPE)
_meter = metrics.get_meter(_INSTRUMENTATION_SCOPE)
_computations = _meter.create_counter(
    "journal.portfolio.computations",
    description="Full portfolio replays",
)
_computation_seconds = _meter.create_histogram(
    "journal.portfolio.duration",
    unit="s",
    description="Time spent replaying the trade history",
)
_imported_rows = _meter.create_counter(
    "journal.import.rows",
    description="CSV rows read by imports, by outcome",
)


@contextmanager
def portfolio_span(trade_count: int) -> Iterator[trace.Span]:
    """Trace one portfolio replay and record its duration."""

    started = time.perf_counter()
    with _tracer.start_as_current_span("journal.compute_portfolio") as span:
        span.set_attribute("journal.trade_count", trade_count)
        yield span
    _computations.add(1)
    _computation_seconds.record(time.perf_counter() - started)


def record_import(imported: int, skipped: int) -> None:
    _imported_rows.add(imported, {"outcome": "imported"})
    _imported_rows.add(skipped, {"outcome": "skipped"})


def _exporter_options(settings: JournalSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def _install_providers(settings: JournalSettings) -> tuple[TracerProvider, MeterProvider]:
    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "trade-journal",
        }
    )
    options = _exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**options)))
    trace.set_tracer_provider(tracer_provider)

    reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(**options),
        export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    return tracer_provider, meter_provider


def setup_telemetry(app: FastAPI, settings: JournalSettings, engine: AsyncEngine | None = None) -> bool:
    """Install OTLP exporters and instrument the app and database engine.

    Providers are process-global and installed once; later apps are only
    instrumented. Returns whether telemetry is active.
    """

    global _installed  # noqa: PLW0603

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    if not _installed:
        _install_providers(settings)
        _installed = True
        logger.info("OTLP exporters installed for %s", settings.telemetry_service_name)

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=trace.get_tracer_provider(),
        meter_provider=metrics.get_meter_provider(),
    )
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine, tracer_provider=trace.get_tracer_provider())
    return True


__all__ = ["portfolio_span", "record_import", "setup_telemetry"]
