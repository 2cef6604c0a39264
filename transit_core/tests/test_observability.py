# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for structured logging and tracing setup.
"""

import json
import logging
import pytest
import sys
from unittest.mock import patch

from opentelemetry.sdk.trace import TracerProvider

from transit_core.observability.config import (
    SERVICE_NAME,
    StructuredFormatter,
    _sampler_for,
    setup_observability,
    setup_structured_logging,
)


@pytest.fixture
def restore_root_logger():
    """Put back the root logger configuration replaced by basicConfig(force=True)."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    domain_level = logging.getLogger("transit_core.domain").level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("transit_core.domain").setLevel(domain_level)
    logging.getLogger("transit_core.services").setLevel(logging.NOTSET)


def make_record(message="Customs rates loaded", **extra):
    record = logging.LogRecord("transit_core.services.customs_rates", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Test JSON log formatting."""

    def test_core_fields(self):
        entry = json.loads(StructuredFormatter().format(make_record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "transit_core.services.customs_rates"
        assert entry["message"] == "Customs rates loaded"
        assert "timestamp" in entry
        assert "trace_id" not in entry

    def test_extra_fields_included(self):
        entry = json.loads(StructuredFormatter().format(make_record(version_id="2026-02-v1", age_in_days=3)))

        assert entry["version_id"] == "2026-02-v1"
        assert entry["age_in_days"] == 3

    def test_non_ascii_kept(self):
        output = StructuredFormatter().format(make_record(source="Décret Gouvernemental"))

        assert "Décret" in output

    def test_trace_correlation(self):
        provider = TracerProvider()
        tracer = provider.get_tracer(__name__)

        with tracer.start_as_current_span("customs_rates.fetch") as span:
            entry = json.loads(StructuredFormatter().format(make_record()))
            trace_id = format(span.get_span_context().trace_id, "032x")

        assert entry["trace_id"] == trace_id
        assert len(entry["span_id"]) == 16

    def test_exception_rendered(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        entry = json.loads(StructuredFormatter().format(record))

        assert "ValueError: boom" in entry["exception"]


class TestSetup:
    """Test logging and tracer provider setup."""

    @pytest.mark.parametrize("environment,rate", [
        ("production", 0.1),
        ("staging", 0.5),
        ("development", 1.0),
    ])
    def test_sampling_rates(self, environment, rate):
        assert _sampler_for(environment).rate == rate

    def test_logging_levels(self, restore_root_logger):
        setup_structured_logging("development")

        assert restore_root_logger.level == logging.INFO
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)
        assert logging.getLogger("transit_core.domain").level == logging.DEBUG

        setup_structured_logging("production")
        assert restore_root_logger.level == logging.WARNING

    def test_tracing_disabled(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("OTEL_ENABLED", "false")

        with patch("transit_core.observability.config.trace.set_tracer_provider") as set_provider:
            assert setup_observability() is False

        set_provider.assert_not_called()
        assert isinstance(restore_root_logger.handlers[0].formatter, StructuredFormatter)

    def test_tracing_enabled(self, monkeypatch, restore_root_logger):
        monkeypatch.setenv("OTEL_ENABLED", "true")
        monkeypatch.setenv("ENVIRONMENT", "development")
        monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)

        with patch("transit_core.observability.config.trace.set_tracer_provider") as set_provider:
            assert setup_observability() is True

        provider = set_provider.call_args[0][0]
        assert provider.resource.attributes["service.name"] == SERVICE_NAME
        assert provider.resource.attributes["deployment.environment"] == "development"
        provider.shutdown()
