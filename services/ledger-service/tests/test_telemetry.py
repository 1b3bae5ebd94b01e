import logging
from typing import Any, Dict

import pytest
from pythonjsonlogger import jsonlogger
from shared.observability import telemetry
from shared.observability.privacy import REDACTED, hash_payload, redact_fields


@pytest.fixture
def captured_basic_config(monkeypatch) -> Dict[str, Any]:
    captured: Dict[str, Any] = {}
    monkeypatch.setattr(telemetry, "_logging_configured", False)
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: captured.update(kwargs))
    monkeypatch.delenv("ENABLE_TELEMETRY", raising=False)
    monkeypatch.delenv("OTEL_SERVICE_NAME", raising=False)
    return captured


def _record() -> logging.LogRecord:
    return logging.LogRecord("ledger_engine", logging.INFO, __file__, 1, {"event": "x"}, None, None)


def test_setup_telemetry_installs_json_handler(captured_basic_config) -> None:
    telemetry.setup_telemetry("ledger-service")

    (handler,) = captured_basic_config["handlers"]
    assert isinstance(handler.formatter, jsonlogger.JsonFormatter)
    assert captured_basic_config["level"] == logging.INFO
    assert captured_basic_config["force"] is True


def test_log_records_carry_service_and_session(captured_basic_config) -> None:
    telemetry.setup_telemetry("ledger-service")
    (handler,) = captured_basic_config["handlers"]

    token = telemetry.bind_session_context("session-abc")
    try:
        record = _record()
        assert handler.filter(record)
    finally:
        telemetry.reset_session_context(token)

    assert record.service_name == "ledger-service"
    assert record.ledger_session_id == "session-abc"
    assert record.trace_id is None

    after = _record()
    handler.filter(after)
    assert after.ledger_session_id is None


def test_setup_telemetry_runs_once(captured_basic_config) -> None:
    telemetry.setup_telemetry("ledger-service")
    captured_basic_config.clear()

    telemetry.setup_telemetry("ledger-service")

    assert captured_basic_config == {}


def test_new_session_id_honours_prefix(monkeypatch) -> None:
    monkeypatch.setenv("LEDGER_SESSION_PREFIX", "phone-")

    session_id = telemetry.new_session_id()

    assert session_id.startswith("phone-")
    assert session_id != telemetry.new_session_id()


def test_privacy_helpers() -> None:
    redacted = redact_fields({"id": "t1", "amount": 5.0, "description": "private note"})

    assert redacted == {"id": "t1", "amount": 5.0, "description": REDACTED}
    assert hash_payload("abc") == hash_payload(b"abc")
    assert hash_payload({"b": 1, "a": 2}) == hash_payload({"a": 2, "b": 1})
    assert len(hash_payload(None)) == 64
