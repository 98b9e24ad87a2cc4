"""Tests for structured logging setup."""

import io
import json
import sys

import structlog

from mood_adapt.logger import setup_logging


def _last_event(buf: io.StringIO) -> dict:
    return json.loads(buf.getvalue().strip().splitlines()[-1])


def test_json_lines_with_context(monkeypatch):
    setup_logging("INFO", "json")
    buf = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buf)

    structlog.contextvars.bind_contextvars(request_id="req-1")
    try:
        structlog.get_logger("mood_adapt.test").info("ledger.retrain", corpus=3)
    finally:
        structlog.contextvars.clear_contextvars()

    event = _last_event(buf)
    assert event["event"] == "ledger.retrain"
    assert event["corpus"] == 3
    assert event["request_id"] == "req-1"
    assert event["level"] == "info"


def test_follows_replaced_stderr(monkeypatch):
    first, second = io.StringIO(), io.StringIO()
    monkeypatch.setattr(sys, "stderr", first)
    setup_logging("INFO", "json")
    logger = structlog.get_logger("mood_adapt.test")
    logger.info("fusion.fused", channels=1)

    # The stream configured at setup time may be closed later (e.g. a
    # finished capture); logging must keep working on the current stderr.
    first.close()
    monkeypatch.setattr(sys, "stderr", second)
    logger.info("fusion.fused", channels=2)
    assert _last_event(second)["channels"] == 2


def test_level_filtering(monkeypatch):
    setup_logging("WARNING", "json")
    buf = io.StringIO()
    monkeypatch.setattr(sys, "stderr", buf)
    logger = structlog.get_logger("mood_adapt.test")
    logger.info("engine.decided")
    logger.warning("ledger.feedback_already_applied", record_id="r1")
    lines = buf.getvalue().strip().splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])["event"] == "ledger.feedback_already_applied"
