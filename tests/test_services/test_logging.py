"""Tests for JSON log lines and their store-action tagging."""
import contextvars
import json
import logging

import pytest

from marketplace.core.logging import JSONFormatter, begin_action
from marketplace.stores.reports_store import ReportsStore
from tests.conftest import make_report_dto


class ListHandler(logging.Handler):
    """Formats at emit time, while the action context is still current."""

    def __init__(self):
        super().__init__(level=logging.DEBUG)
        self.setFormatter(JSONFormatter())
        self.lines = []

    def emit(self, record: logging.LogRecord) -> None:
        self.lines.append(json.loads(self.format(record)))


@pytest.fixture
def json_lines():
    handler = ListHandler()
    package_logger = logging.getLogger("marketplace")
    previous_level = package_logger.level
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG)
    yield handler.lines
    package_logger.removeHandler(handler)
    package_logger.setLevel(previous_level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("marketplace.test", logging.INFO, __file__, 1, "Report %s resolved", (5,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_outside_an_action(self):
        line = json.loads(JSONFormatter().format(_record()))
        assert line["message"] == "Report 5 resolved"
        assert line["level"] == "INFO"
        assert "action" not in line
        assert "correlation_id" not in line

    def test_action_and_extra_fields(self):
        def format_in_action():
            cid = begin_action("ReportsStore.resolve_report")
            return cid, json.loads(JSONFormatter().format(_record(report_id=5, status="APPROVE", other="x")))

        cid, line = contextvars.copy_context().run(format_in_action)

        assert line["action"] == "ReportsStore.resolve_report"
        assert line["correlation_id"] == cid
        assert line["report_id"] == 5
        assert line["status"] == "APPROVE"
        assert "other" not in line

    def test_each_action_gets_a_new_id(self):
        first = contextvars.copy_context().run(begin_action, "a")
        second = contextvars.copy_context().run(begin_action, "a")
        assert first != second


@pytest.mark.asyncio
async def test_request_lines_tagged_with_store_action(backend, admin_api, json_lines):
    backend.add_report(make_report_dto(id=5))

    await ReportsStore(admin_api).fetch_reports()

    requests = [line for line in json_lines if line["message"].startswith("GET /reports/admin/all")]
    assert requests
    assert {line["action"] for line in requests} == {"ReportsStore.fetch_reports"}
    assert len({line["correlation_id"] for line in requests}) == 1
    assert "admin-token" not in json.dumps(json_lines)
