"""Structlog processors: trace correlation and credential redaction."""

from collections.abc import MutableMapping
from typing import Any

from opentelemetry import trace

REDACTED = "[redacted]"

# Event keys that may carry credentials
SENSITIVE_KEYS = frozenset(
    {
        "password",
        "current_password",
        "new_password",
        "hashed_password",
        "token",
        "authorization",
        "jwt_secret_key",
    }
)

EventDict = MutableMapping[str, Any]


def add_trace_context(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Tag log events with the active span's trace_id and span_id."""
    span_context = trace.get_current_span().get_span_context()
    if not span_context.is_valid:
        return event_dict

    event_dict.setdefault("trace_id", trace.format_trace_id(span_context.trace_id))
    event_dict.setdefault("span_id", trace.format_span_id(span_context.span_id))
    return event_dict


def redact_credentials(_logger: Any, _method_name: str, event_dict: EventDict) -> EventDict:
    """Replace the values of credential-bearing keys before rendering.

    Matching is case-insensitive and only applies to top-level keys.
    """
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict
