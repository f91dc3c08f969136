"""Tests for crawlextract.logging_config.JsonFormatter."""

import json
import logging
import sys

from crawlextract.logging_config import JsonFormatter


def _record(msg: str, *args, extra: dict | None = None, exc_info=None) -> logging.LogRecord:
    record = logging.LogRecord("crawlextract.test", logging.INFO, __file__, 1, msg, args, exc_info)
    for key, value in (extra or {}).items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    def test_base_fields(self):
        data = json.loads(JsonFormatter().format(_record("Pipeline: extracted %s", "http://h/")))
        assert data["level"] == "INFO"
        assert data["logger"] == "crawlextract.test"
        assert data["message"] == "Pipeline: extracted http://h/"
        assert "time" in data

    def test_extra_fields_rendered(self):
        record = _record("done", extra={"page_id": 7, "links": 3, "truncated": ["title"]})
        data = json.loads(JsonFormatter().format(record))
        assert data["page_id"] == 7
        assert data["links"] == 3
        assert data["truncated"] == ["title"]

    def test_quotes_in_message_stay_valid_json(self):
        data = json.loads(JsonFormatter().format(_record('title "quoted" \\ here')))
        assert data["message"] == 'title "quoted" \\ here'

    def test_record_internals_not_rendered(self):
        data = json.loads(JsonFormatter().format(_record("x")))
        assert "args" not in data
        assert "lineno" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = _record("failed", exc_info=sys.exc_info())
        data = json.loads(JsonFormatter().format(record))
        assert "RuntimeError: boom" in data["exc_info"]
