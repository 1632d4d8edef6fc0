"""Tests for the structured JSON log formatter."""

import json
import logging
import sys

from app.logging_config import StructuredJsonFormatter, get_logger, request_id_var


def make_record(logger, message, **extra):
    return logger.makeRecord(logger.name, logging.INFO, __file__, 1, message, None, None, extra=extra)


def test_entry_carries_channel_context_and_request_id():
    logger = get_logger("db")
    token = request_id_var.set("req-123")
    try:
        record = make_record(logger, "Created new student",
                             context={"student_id": "abc"},
                             extra_data={"duration_ms": 1.5},
                             channel="db")
        entry = json.loads(StructuredJsonFormatter().format(record))
    finally:
        request_id_var.reset(token)

    assert entry["level"] == "INFO"
    assert entry["message"] == "Created new student"
    assert entry["channel"] == "db"
    assert entry["context"] == {"request_id": "req-123", "student_id": "abc"}
    assert entry["extra"] == {"duration_ms": 1.5}
    assert entry["timestamp"].endswith("Z")


def test_channel_falls_back_to_logger_name():
    record = make_record(get_logger("validation"), "checked")
    entry = json.loads(StructuredJsonFormatter().format(record))
    assert entry["channel"] == "validation"
    assert entry["extra"] == {}


def test_exception_traceback_is_included():
    logger = get_logger("db")
    try:
        raise RuntimeError("disk on fire")
    except RuntimeError:
        record = logger.makeRecord(logger.name, logging.ERROR, __file__, 1, "Database error",
                                   None, sys.exc_info())
    entry = json.loads(StructuredJsonFormatter().format(record))
    assert "RuntimeError: disk on fire" in entry["exception"]
