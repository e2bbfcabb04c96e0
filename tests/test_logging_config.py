#!/usr/bin/env python3
"""Tests for logging setup and error handling helpers."""

import json
import logging

import pytest

from audio_sentence_detector.lib.logging_config import (
    AudioDecodeError,
    ErrorContext,
    SentenceDetectionError,
    StructuredFormatter,
    error_context,
    setup_logging,
)


def test_structured_formatter_keeps_extra_fields():
    record = logging.LogRecord("audio_sentence_detector", logging.DEBUG, __file__, 1, "trace:window", None, None)
    record.trace_event = "window"
    record.window_index = 3

    entry = json.loads(StructuredFormatter().format(record))
    assert entry["message"] == "trace:window"
    assert entry["trace_event"] == "window"
    assert entry["window_index"] == 3


def test_setup_logging_writes_log_file(tmp_path):
    log_file = tmp_path / "logs" / "run.log"
    logger = setup_logging("INFO", log_file=str(log_file), console_output=False)
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text(encoding="utf-8")
    setup_logging("WARNING")


def test_error_context_logs_and_reraises(caplog):
    @error_context(reraise=True)
    def broken(path):
        """Always fails."""
        raise AudioDecodeError("cannot decode", audio_path=path)

    assert broken.__name__ == "broken"
    assert broken.__doc__ == "Always fails."
    with caplog.at_level(logging.ERROR, logger="audio_sentence_detector"):
        with pytest.raises(AudioDecodeError):
            broken("a.wav")
    assert any(getattr(r, "audio_path", None) == "a.wav" for r in caplog.records)


def test_error_context_can_suppress():
    with ErrorContext(reraise=False):
        raise SentenceDetectionError("ignored", stage="test")
