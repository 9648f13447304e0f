"""JSON log output must stay machine-parseable; pipelines filter on its keys."""

from __future__ import annotations

import json
import logging
import sys

from quiz_service.core.logging import _ContainerFormatter, _JsonFormatter


def _record(msg: str = "test message", args: tuple = (), **kwargs) -> logging.LogRecord:
    return logging.LogRecord(
        name=kwargs.pop("name", "test"),
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=1,
        msg=msg,
        args=args,
        exc_info=kwargs.pop("exc_info", None),
    )


def test_json_formatter_produces_valid_json() -> None:
    record = _record("Hello %s", ("world",), name="test.logger")
    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "test.logger"
    assert parsed["message"] == "Hello world"
    assert "timestamp" in parsed


def test_json_formatter_includes_request_fields() -> None:
    record = _record()
    record.request_id = "abc-123"  # type: ignore[attr-defined]
    record.method = "POST"  # type: ignore[attr-defined]
    record.path = "/v1/quizzes/1/submissions"  # type: ignore[attr-defined]
    record.duration_ms = 12.5  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "abc-123"
    assert parsed["method"] == "POST"
    assert parsed["path"] == "/v1/quizzes/1/submissions"
    assert parsed["duration_ms"] == 12.5


def test_json_formatter_includes_grading_fields() -> None:
    record = _record(level=logging.WARNING)
    record.quiz_content_id = 7  # type: ignore[attr-defined]
    record.question_id = 42  # type: ignore[attr-defined]
    record.attempt_number = 2  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["quiz_content_id"] == 7
    assert parsed["question_id"] == 42
    assert parsed["attempt_number"] == 2
    assert "submission_id" not in parsed


def test_json_formatter_includes_exception_info() -> None:
    try:
        raise ValueError("test error")
    except ValueError:
        record = _record("Something failed", level=logging.ERROR, exc_info=sys.exc_info())
        output = _JsonFormatter().format(record)

    parsed = json.loads(output)
    assert "ValueError: test error" in parsed["exception"]


def test_container_formatter_is_not_json() -> None:
    record = _record("server started", name="quiz_service.main")
    output = _ContainerFormatter().format(record)
    assert "INFO" in output
    assert "quiz_service.main" in output
    assert "server started" in output
    try:
        json.loads(output)
        raise AssertionError("Container format should not be valid JSON")
    except json.JSONDecodeError:
        pass
