from __future__ import annotations

import json
import logging

from datastore_touch.utils.logging import _json_formatter

EXPECTED_UPDATED = 1000
EXPECTED_TOTAL = 5000


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.updated = EXPECTED_UPDATED
    record.kind = "Users"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["updated"] == EXPECTED_UPDATED
    assert payload["kind"] == "Users"
    assert "pathname" not in payload


def test_json_formatter_supports_nested_extra_field() -> None:
    record = _record()
    record.extra = {"total": EXPECTED_TOTAL}

    payload = json.loads(_json_formatter(record))

    assert payload["total"] == EXPECTED_TOTAL
    assert "extra" not in payload
