"""
Tests for logging configuration

Tests cover:
- JSONFormatter output fields and extra={...} passthrough
- ContextFormatter leaving the record untouched
- setup_logging handler selection
"""

import json
import logging

from workboard.core.logging_config import ContextFormatter, JSONFormatter, log_with_context, setup_logging


def make_record(msg: str = "Fetched overview", **extra) -> logging.LogRecord:
    record = logging.LogRecord("workboard.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_core_fields(self):
        data = json.loads(JSONFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "workboard.test"
        assert data["message"] == "Fetched overview"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        data = json.loads(JSONFormatter().format(make_record(cache_key="overview:all", api_calls=3)))

        assert data["cache_key"] == "overview:all"
        assert data["api_calls"] == 3

    def test_context_fields_included(self):
        data = json.loads(JSONFormatter().format(make_record(extra_fields={"scope": "acme"})))

        assert data["scope"] == "acme"
        assert "extra_fields" not in data

    def test_non_serializable_values_stringified(self):
        data = json.loads(JSONFormatter().format(make_record(orgs=("acme",), when=object)))

        assert data["orgs"] == ["acme"]
        assert isinstance(data["when"], str)


class TestContextFormatter:
    def test_levelname_restored(self):
        record = make_record()

        output = ContextFormatter(fmt="%(levelname)s %(message)s").format(record)

        assert "Fetched overview" in output
        assert record.levelname == "INFO"


class TestSetupLogging:
    def test_json_output(self):
        setup_logging(level="DEBUG", json_output=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_file_output_is_json(self, tmp_path):
        log_file = tmp_path / "logs" / "workboard.log"

        setup_logging(level="INFO", log_file=log_file)
        logging.getLogger("workboard.test").info("written", extra={"scope": "all"})
        for handler in logging.getLogger().handlers:
            handler.flush()

        line = log_file.read_text(encoding="utf-8").strip().splitlines()[-1]
        assert json.loads(line)["scope"] == "all"

    def test_log_with_context(self, caplog):
        logger = logging.getLogger("workboard.context")

        with caplog.at_level(logging.INFO, logger="workboard.context"):
            log_with_context(logger, "info", "Cache hit", cache_key="linear:recent-issues")

        assert caplog.records[-1].extra_fields == {"cache_key": "linear:recent-issues"}
