"""Tests for logging setup and correlation ids."""

import logging

from kb_backend.observability.correlation import get_correlation_id, reset_correlation_id, set_correlation_id
from kb_backend.observability.logger import CorrelationIdFilter, configure_logging


def test_correlation_id_is_generated_and_reset() -> None:
    token = set_correlation_id()
    generated = get_correlation_id()

    reset_correlation_id(token)

    assert generated
    assert get_correlation_id() != generated


def test_filter_stamps_records() -> None:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, "msg", None, None)
    token = set_correlation_id("req-123")
    try:
        CorrelationIdFilter().filter(record)
    finally:
        reset_correlation_id(token)

    assert record.correlation_id == "req-123"


def test_configure_logging_sets_level_and_quiets_aws() -> None:
    root = logging.getLogger()
    previous_handlers, previous_level = root.handlers[:], root.level
    try:
        configure_logging("debug")

        assert root.level == logging.DEBUG
        assert logging.getLogger("botocore").level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
