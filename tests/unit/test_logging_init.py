from __future__ import annotations

import logging
import sys
from io import StringIO

from bulk_upload.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    setup_logging,
)


def test_setup_logging_creates_logger_with_labeled_formatter():
    """setup_logging configures one stdout handler with the labeled formatter."""
    logger = setup_logging()

    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_logging_labeled_prefixes():
    """Output lines carry INFO|WARN|ERROR|SUMMARY prefixes."""
    captured = StringIO()
    logger = logging.getLogger("test_bulk_upload_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(captured)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")

    lines = captured.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]


def test_formatter_appends_traceback():
    formatter = LabeledFormatter()
    try:
        raise RuntimeError("kaboom")
    except RuntimeError:
        record = logging.LogRecord("x", logging.ERROR, __file__, 1, "row=3 failed", None, sys.exc_info())
    text = formatter.format(record)

    assert text.startswith("ERROR row=3 failed\n")
    assert "RuntimeError: kaboom" in text


def test_setup_logging_idempotent():
    logger1 = setup_logging()
    logger2 = setup_logging()

    assert logger1 is logger2
    assert len(logger1.handlers) == 1
    assert get_logger() is logger1


def test_module_loggers_reach_the_app_handler(capsys):
    setup_logging()
    logging.getLogger("bulk_upload.services.pipeline").info("batch start kind=student")
    log_summary("kind=student total=0")

    out = capsys.readouterr().out.splitlines()
    assert out == ["INFO batch start kind=student", "SUMMARY kind=student total=0"]
