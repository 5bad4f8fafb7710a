from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from ead_service.core.logging import (
    RequestContextFilter,
    _ContainerFormatter,
    _JsonFormatter,
    request_id_var,
    setup_logging,
)


def _record(msg: str = "hello %s", args: tuple = ("world",), level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="ead.test",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=None,
    )


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "ead.test"
    assert parsed["message"] == "hello world"
    assert "timestamp" in parsed


def test_json_formatter_includes_domain_fields() -> None:
    record = _record()
    record.request_id = "req-1"  # type: ignore[attr-defined]
    record.account_id = "acc-1"  # type: ignore[attr-defined]
    record.actor_id = "adm-1"  # type: ignore[attr-defined]
    record.course_id = "crs-1"  # type: ignore[attr-defined]

    parsed = json.loads(_JsonFormatter().format(record))
    assert parsed["request_id"] == "req-1"
    assert parsed["account_id"] == "acc-1"
    assert parsed["actor_id"] == "adm-1"
    assert parsed["course_id"] == "crs-1"


def test_json_formatter_omits_missing_fields() -> None:
    parsed = json.loads(_JsonFormatter().format(_record()))
    assert "account_id" not in parsed
    assert "duration_ms" not in parsed


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    parsed = json.loads(_JsonFormatter().format(record))
    assert "ValueError: boom" in parsed["exception"]


def test_container_formatter_adds_location_for_warnings() -> None:
    fmt = _ContainerFormatter()
    assert "[test.py:42]" not in fmt.format(_record())
    assert "[test.py:42]" in fmt.format(_record(level=logging.WARNING))


def test_filter_stamps_current_request_id() -> None:
    token = request_id_var.set("req-xyz")
    try:
        record = _record()
        assert RequestContextFilter().filter(record)
        assert record.request_id == "req-xyz"  # type: ignore[attr-defined]
    finally:
        request_id_var.reset(token)


def test_filter_defaults_outside_a_request() -> None:
    record = _record()
    RequestContextFilter().filter(record)
    assert record.request_id == "-"  # type: ignore[attr-defined]


def test_setup_logging_json_lines_from_child_loggers(monkeypatch: pytest.MonkeyPatch) -> None:
    stream = io.StringIO()
    monkeypatch.setattr("sys.stdout", stream)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("info", json_format=True)
        token = request_id_var.set("req-child")
        logging.getLogger("ead_service.some.child").info("granted")
        request_id_var.reset(token)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    line = json.loads(stream.getvalue().strip().splitlines()[-1])
    assert line["message"] == "granted"
    assert line["request_id"] == "req-child"


def test_setup_logging_quiets_third_party() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("debug")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
