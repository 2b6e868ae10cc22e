"""
Unit tests for JSON logging and session event logging.
"""

import json
import logging
import sys
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from middleware.request_id import request_id_var
from telemetry.service import (
    JSONFormatter,
    TelemetryService,
    get_telemetry_service,
    initialize_telemetry,
)


def make_record(message="Session lifetime extended", extra_data=None, level=logging.INFO):
    record = logging.LogRecord(
        name="session.handler",
        level=level,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=(),
        exc_info=None,
        func="read",
    )
    if extra_data is not None:
        record.extra_data = extra_data
    return record


@pytest.fixture
def log_settings():
    return SimpleNamespace(log_level="DEBUG")


@pytest.fixture
def root_logger_restored():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestJSONFormatter:
    """Tests for the JSONFormatter class."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["message"] == "Session lifetime extended"
        assert data["logger"] == "session.handler"
        assert data["function"] == "read"
        assert data["line"] == 42
        assert data["timestamp"].endswith("Z")

    def test_extra_data_is_merged(self):
        record = make_record(extra_data={"remaining_ttl": 3600, "new_ttl": 2_592_000})

        data = json.loads(JSONFormatter().format(record))

        assert data["remaining_ttl"] == 3600
        assert data["new_ttl"] == 2_592_000

    def test_request_id_from_context(self):
        token = request_id_var.set("req-77")
        try:
            data = json.loads(JSONFormatter().format(make_record()))
        finally:
            request_id_var.reset(token)

        assert data["request_id"] == "req-77"

    def test_request_id_empty_outside_request(self):
        assert json.loads(JSONFormatter().format(make_record()))["request_id"] == ""

    def test_exception_is_formatted(self):
        try:
            raise ConnectionError("redis down")
        except ConnectionError:
            record = make_record(level=logging.ERROR)
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ConnectionError: redis down" in data["exception"]


class TestTelemetryService:
    """Tests for TelemetryService setup and session events."""

    def test_installs_single_json_handler(self, root_logger_restored, log_settings):
        initialize_telemetry(log_settings)
        initialize_telemetry(log_settings)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.DEBUG
        assert isinstance(get_telemetry_service(), TelemetryService)

    def test_session_event_logs_truncated_id(self, root_logger_restored, log_settings):
        service = TelemetryService(log_settings)

        with patch.object(service, "_logger") as mock_logger:
            service.log_session_event("session_issued", "abcdefghijklmnopqrstuvwxyz", {"replaced_cookie": False})

        message = mock_logger.info.call_args.args[0]
        extra = mock_logger.info.call_args.kwargs["extra"]["extra_data"]
        assert message == "Session event: session_issued"
        assert extra == {
            "event_type": "session_issued",
            "session": "abcdefgh",
            "details": {"replaced_cookie": False},
        }

    def test_session_event_without_id(self, root_logger_restored, log_settings):
        service = TelemetryService(log_settings)

        with patch.object(service, "_logger") as mock_logger:
            service.log_session_event("session_destroyed", None)

        assert mock_logger.info.call_args.kwargs["extra"]["extra_data"] == {
            "event_type": "session_destroyed",
            "session": None,
        }
