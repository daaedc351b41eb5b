"""JSON logging setup tests."""

import json
import logging

import pytest

from scrape_insight.logging_config import setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_records_are_json_with_service_field(capsys):
    setup_logging("INFO", service="scrape-insight")
    logging.getLogger("scrape_insight.test").info("scrape started", extra={"url": "https://example.com"})

    line = capsys.readouterr().out.strip().splitlines()[-1]
    record = json.loads(line)
    assert record["message"] == "scrape started"
    assert record["level"] == "INFO"
    assert record["logger"] == "scrape_insight.test"
    assert record["service"] == "scrape-insight"
    assert record["url"] == "https://example.com"


def test_client_library_loggers_quietened():
    setup_logging("DEBUG")
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
