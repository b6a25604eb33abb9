"""
Unit tests for observability features.

Tests cover:
- Submission correlation ID generation and propagation
- Structured logging with JSON format
- Prometheus metrics collection and rendering
"""

import json
import logging
import re
import sys

import pytest

from rental_rules.core.observability import (
    StructuredFormatter,
    configure_structured_logging,
    generate_submission_id,
    get_submission_id,
    get_wizard,
    metrics,
    render_metrics,
    reset_submission_id,
    reset_wizard,
    set_submission_id,
    set_wizard,
)


def _record(msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="rental_rules.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSubmissionContext:
    """Tests for submission ID and wizard context variables."""

    @pytest.mark.anyio
    async def test_generate_submission_id_returns_uuid_format(self):
        """Test that generate_submission_id returns a UUID string."""
        submission_id = generate_submission_id()
        uuid_pattern = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")
        assert uuid_pattern.match(submission_id)

    @pytest.mark.anyio
    async def test_generate_submission_id_is_unique(self):
        """Test that each call yields a new ID."""
        assert len({generate_submission_id() for _ in range(100)}) == 100

    @pytest.mark.anyio
    async def test_context_round_trip(self):
        """Test setting and reading the correlation context."""
        assert get_submission_id() == ""
        set_submission_id("abc")
        set_wizard("application")
        assert get_submission_id() == "abc"
        assert get_wizard() == "application"

    @pytest.mark.anyio
    async def test_reset_restores_previous_values(self):
        """Test that resetting a token restores the value it replaced."""
        set_submission_id("outer")
        submission_token = set_submission_id("inner")
        wizard_token = set_wizard("property")

        reset_wizard(wizard_token)
        reset_submission_id(submission_token)

        assert get_submission_id() == "outer"
        assert get_wizard() == ""


class TestStructuredFormatter:
    """Tests for the JSON log formatter."""

    @pytest.mark.anyio
    async def test_standard_fields(self):
        """Test that the formatter emits the standard fields."""
        entry = json.loads(StructuredFormatter().format(_record("Submission %s" % "invalid")))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "rental_rules.test"
        assert entry["message"] == "Submission invalid"
        assert "timestamp" in entry
        assert "submission_id" not in entry

    @pytest.mark.anyio
    async def test_correlation_fields(self):
        """Test that the submission ID and wizard are attached."""
        set_submission_id("sub-1")
        set_wizard("property")
        entry = json.loads(StructuredFormatter().format(_record()))
        assert entry["submission_id"] == "sub-1"
        assert entry["wizard"] == "property"

    @pytest.mark.anyio
    async def test_extra_fields(self):
        """Test that logging extra values land under `extra`."""
        entry = json.loads(StructuredFormatter().format(_record(mode="strict", errors=2)))
        assert entry["extra"] == {"mode": "strict", "errors": 2}

    @pytest.mark.anyio
    async def test_exception_info(self):
        """Test that exception type and message are included."""
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(StructuredFormatter().format(record))
        assert entry["exception"] == {"type": "ValueError", "message": "boom"}

    @pytest.mark.anyio
    async def test_configure_structured_logging(self):
        """Test that the root logger gets one JSON handler."""
        root = logging.getLogger()
        saved_handlers, saved_level = list(root.handlers), root.level
        try:
            configure_structured_logging("debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestMetrics:
    """Tests for Prometheus metrics."""

    @pytest.mark.anyio
    async def test_metrics_registered(self):
        """Test that every engine metric is exposed by the private registry."""
        metrics.validations_total.labels(mode="strict", outcome="valid")
        metrics.manifest_compilations_total.labels(status="success")
        output = render_metrics().decode("utf-8")
        assert "rental_rules_validations_total" in output
        assert "rental_rules_validation_duration_seconds" in output
        assert "rental_rules_field_errors_total" in output
        assert "rental_rules_manifest_compilations_total" in output

    @pytest.mark.anyio
    async def test_counter_increment(self):
        """Test that counters increment per label set."""
        sample = "rental_rules_field_errors_total"
        labels = {"kind": "pattern_mismatch"}
        before = metrics.registry.get_sample_value(sample, labels) or 0.0
        metrics.field_errors_total.labels(kind="pattern_mismatch").inc()
        assert metrics.registry.get_sample_value(sample, labels) == before + 1
