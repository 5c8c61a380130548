from __future__ import annotations

import json
import logging
import sys

from taskcore.utils.logging import JsonFormatter, _json_formatter

EXPECTED_MERGED = 3
EXPECTED_NEXT_ID = 12


def _record(msg: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.merged = EXPECTED_MERGED
    record.backend = "json"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["merged"] == EXPECTED_MERGED
    assert payload["backend"] == "json"
    assert "lineno" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"next_id": EXPECTED_NEXT_ID}

    payload = json.loads(_json_formatter(record))

    assert payload["next_id"] == EXPECTED_NEXT_ID
    assert "extra" not in payload


def test_json_formatter_stringifies_unserializable_values(tmp_path) -> None:
    record = _record()
    record.path = tmp_path / "tasks.json"

    payload = json.loads(JsonFormatter().format(record))

    assert payload["path"] == str(tmp_path / "tasks.json")


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    payload = json.loads(_json_formatter(record))

    assert "RuntimeError: boom" in payload["exc_info"]
