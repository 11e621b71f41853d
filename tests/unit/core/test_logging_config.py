"""Unit tests for structured logging configuration."""

from __future__ import annotations

import json
import logging

import pytest

from core.logging_config import get_logger


def test_get_logger_emits_json_events(caplog: pytest.LogCaptureFixture) -> None:
    """Events render as JSON with the event name and keyword fields."""
    caplog.set_level(logging.INFO, logger="tests.logging")
    logger = get_logger("tests.logging")

    logger.info("layer_metadata_written", layer_name="roads", entry_count=2)

    payload = json.loads(caplog.records[-1].getMessage())
    assert payload["event"] == "layer_metadata_written"
    assert (payload["layer_name"], payload["entry_count"], payload["level"]) == (
        "roads",
        2,
        "info",
    )


def test_get_logger_respects_stdlib_level(caplog: pytest.LogCaptureFixture) -> None:
    """Debug events are dropped when the stdlib level is higher."""
    caplog.set_level(logging.WARNING, logger="tests.logging.quiet")
    logger = get_logger("tests.logging.quiet")

    logger.debug("metadata_flush_cycle", unique_records=1)

    assert not [record for record in caplog.records if record.name == "tests.logging.quiet"]
