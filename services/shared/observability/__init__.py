"""
Shared observability helpers (telemetry, privacy utilities, etc.).

The ledger service imports from this package so logging, tracing and the
privacy guardrails stay consistent between the engine and the storage layer.
"""

from .privacy import hash_payload, redact_fields
from .telemetry import (
    SessionContextToken,
    bind_session_context,
    get_tracer,
    new_session_id,
    reset_session_context,
    setup_telemetry,
)

__all__ = [
    "hash_payload",
    "redact_fields",
    "SessionContextToken",
    "bind_session_context",
    "get_tracer",
    "new_session_id",
    "reset_session_context",
    "setup_telemetry",
]
