from __future__ import annotations

import logging

from quiz_service.core.logging import _ContainerFormatter, setup_logging


def _record(level: int, msg: str, *, pathname: str = "test.py", lineno: int = 1):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "hello"))
    assert "hello" in output
    assert "[test.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    record = _record(logging.WARNING, "Grading discrepancy", lineno=42)
    output = _ContainerFormatter().format(record)
    assert "Grading discrepancy" in output
    assert "[test.py:42]" in output


def test_formatter_timestamp_has_milliseconds() -> None:
    record = _record(logging.INFO, "tick")
    record.msecs = 7.0
    output = _ContainerFormatter().format(record)
    assert ".007" in output.split(" ", 1)[0]
