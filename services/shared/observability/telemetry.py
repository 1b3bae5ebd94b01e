"""
Telemetry bootstrap utilities for the ledger service.

`setup_telemetry` wires JSON logging (with trace and ledger-session IDs) and,
when enabled through the environment, OpenTelemetry tracing. Library code only
calls `get_tracer`, which is a no-op until a tracer provider is installed.
"""

from __future__ import annotations

import logging
import os
from contextvars import ContextVar, Token
from uuid import uuid4

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Span, SpanContext, Tracer
from pythonjsonlogger import jsonlogger

SessionContextToken = Token

_logging_configured = False
_session_id_ctx_var: ContextVar[str | None] = ContextVar("ledger_session_id", default=None)


def setup_telemetry(service_name: str, *, level: int = logging.INFO) -> None:
    """
    Configure logging and (optionally) tracing for the running process.

    Args:
        service_name: Logical service identifier used for log records and OTLP resources.
        level: Root log level.
    """

    enable_traces = _parse_bool(os.getenv("ENABLE_TELEMETRY", "false"))
    enable_console_export = _parse_bool(os.getenv("OTEL_CONSOLE_EXPORT", "false"))
    service_label = os.getenv("OTEL_SERVICE_NAME", service_name)

    _configure_logging(service_label, enable_traces, level)

    if enable_traces:
        _configure_tracing(service_label, enable_console_export)
        LoggingInstrumentor().instrument(set_logging_format=False)


def get_tracer(name: str) -> Tracer:
    return trace.get_tracer(name)


def new_session_id() -> str:
    return os.getenv("LEDGER_SESSION_PREFIX", "") + uuid4().hex


def bind_session_context(session_id: str | None) -> SessionContextToken:
    """
    Store the ledger session ID in a ContextVar so log records can include it.
    """

    return _session_id_ctx_var.set(session_id)


def reset_session_context(token: SessionContextToken | None) -> None:
    """Reset the ContextVar token emitted by `bind_session_context`."""

    if token is not None:
        _session_id_ctx_var.reset(token)


def _configure_logging(service_name: str, enable_traces: bool, level: int) -> None:
    global _logging_configured
    if _logging_configured:
        return

    formatter = jsonlogger.JsonFormatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s %(trace_id)s %(span_id)s %(service_name)s %(ledger_session_id)s"
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(_TelemetryLogFilter(service_name, enable_traces))

    logging.basicConfig(level=level, handlers=[handler], force=True)
    _logging_configured = True


def _configure_tracing(service_name: str, enable_console_export: bool) -> None:
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        # Already configured globally; skip duplicate setup.
        return

    resource = Resource.create({SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    exporter = OTLPSpanExporter(endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4318/v1/traces"))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    if enable_console_export:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)


def _parse_bool(raw: str) -> bool:
    return raw.lower() in {"1", "true", "yes", "on"}


class _TelemetryLogFilter(logging.Filter):
    def __init__(self, service_name: str, traces_enabled: bool) -> None:
        super().__init__()
        self._service_name = service_name
        self._traces_enabled = traces_enabled

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.service_name = self._service_name
        record.ledger_session_id = _session_id_ctx_var.get()
        trace_id: str | None = None
        span_id: str | None = None

        if self._traces_enabled:
            span = trace.get_current_span()
            span_context = span.get_span_context() if isinstance(span, Span) else None
            if span_context and isinstance(span_context, SpanContext) and span_context.is_valid:
                trace_id = format(span_context.trace_id, "032x")
                span_id = format(span_context.span_id, "016x")

        record.trace_id = trace_id
        record.span_id = span_id
        return True
