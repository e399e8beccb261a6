"""Tests for logging setup."""
import json
import logging

from logging_config import StructuredFormatter, setup_logging


def _ours(logger):
    return [h for h in logger.handlers if getattr(h, "_site_visit", False)]


def test_setup_logging_is_idempotent():
    root = setup_logging({"log_level": "debug", "log_format": "text"})
    setup_logging({"log_level": "warning", "log_format": "text"})
    assert len(_ours(root)) == 1
    assert root.level == logging.WARNING


def test_json_format_selected():
    root = setup_logging({"log_level": "INFO", "log_format": "json"})
    assert isinstance(_ours(root)[0].formatter, StructuredFormatter)


def test_structured_formatter_output():
    record = logging.LogRecord("pdf_builder", logging.INFO, __file__, 1, "rendered %d pages", (3,), None)
    record.extra_fields = {"project": "PRJ-1"}
    entry = json.loads(StructuredFormatter().format(record))
    assert entry["message"] == "rendered 3 pages"
    assert entry["level"] == "INFO"
    assert entry["project"] == "PRJ-1"
