"""Tests for structured logging"""
import json
import logging

from mamae_review.core.logger import JSONFormatter, StructuredLogger, _with_error
from mamae_review.utils.correlation_id import (
    create_correlation_id,
    extract_correlation_id_from_headers,
    set_correlation_id,
)


class TestStructuredLogger:

    def test_entry_uses_context_correlation_id(self):
        set_correlation_id("corr-123")

        entry = StructuredLogger()._build_log_entry("info", "hello", metadata={"event": "x"})

        assert entry["correlationId"] == "corr-123"
        assert entry["level"] == "INFO"
        assert entry["metadata"] == {"event": "x"}
        assert "userId" not in entry

    def test_explicit_correlation_id_and_user(self):
        entry = StructuredLogger()._build_log_entry("warning", "hi", correlation_id="abc", user_id="u1")

        assert entry["correlationId"] == "abc"
        assert entry["userId"] == "u1"

    def test_error_metadata(self):
        metadata = _with_error({"event": "x"}, ValueError("bad"))

        assert metadata == {"event": "x", "error": {"type": "ValueError", "message": "bad"}}

    def test_no_error(self):
        assert _with_error(None, None) == {}


class TestJSONFormatter:

    def test_passes_serialized_entries_through(self):
        record = logging.LogRecord("svc", logging.INFO, __file__, 1, '{"message": "x"}', None, None)

        assert JSONFormatter().format(record) == '{"message": "x"}'

    def test_plain_record(self):
        record = logging.LogRecord("svc", logging.INFO, __file__, 1, "plain", None, None)

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "plain"
        assert data["level"] == "INFO"


class TestCorrelationId:

    def test_header_extraction(self):
        assert extract_correlation_id_from_headers({"x-correlation-id": "abc"}) == "abc"

    def test_generated_when_missing(self):
        correlation_id = extract_correlation_id_from_headers({})

        assert len(correlation_id) == len(create_correlation_id())

    def test_header_lookup_ignores_case(self):
        assert extract_correlation_id_from_headers({"X-CORRELATION-ID": " abc "}) == "abc"

    def test_custom_header_name(self):
        headers = {"x-request-id": "req-1"}

        assert extract_correlation_id_from_headers(headers, header_name="X-Request-ID") == "req-1"
