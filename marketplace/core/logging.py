"""JSON log lines tagged with the store action that produced them.

Every store action (`AdminPublicationsStore.set_status`, `ReportsStore.fetch_reports`...)
opens a new action context: a short correlation id plus the action name. Both
are carried in ContextVars, so the ApiClient's request lines end up tagged with
the action that triggered them, even across awaits and concurrent tasks.
"""
import logging
import json
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from marketplace.config import settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
action_var: ContextVar[str] = ContextVar("action", default="")

# `extra=` keys copied into the JSON line when present
EXTRA_FIELDS = ("publication_id", "report_id", "status", "url", "duration")


def begin_action(action: str) -> str:
    """Open an action context for the current task. Returns its correlation id."""
    cid = uuid.uuid4().hex[:12]
    correlation_id_var.set(cid)
    action_var.set(action)
    return cid


class JSONFormatter(logging.Formatter):

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        action = action_var.get("")
        if action:
            entry["action"] = action
            entry["correlation_id"] = correlation_id_var.get("")

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)

        # ids and statuses may be enums or ints
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """Send `marketplace.*` records to stdout as JSON at the configured level."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())

    package_logger = logging.getLogger("marketplace")
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    package_logger.propagate = False

    # request lines come from ApiClient already
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def describe_token(token: str | None) -> str:
    """Describe a bearer token for logs without leaking it."""
    if not token:
        return "absent"
    return f"present(len={len(token)})"
