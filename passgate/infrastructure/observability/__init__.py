"""Observability module providing OpenTelemetry tracing and structlog integration."""

from passgate.infrastructure.observability.setup import (
    configure_logging,
    init_observability,
    shutdown_observability,
)
from passgate.infrastructure.observability.structlog_processor import (
    add_trace_context,
    redact_credentials,
)
from passgate.infrastructure.observability.tracing import (
    add_span_attributes,
    get_tracer,
    traced,
)

__all__ = [
    "add_span_attributes",
    "add_trace_context",
    "configure_logging",
    "get_tracer",
    "init_observability",
    "redact_credentials",
    "shutdown_observability",
    "traced",
]
