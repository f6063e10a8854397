"""Structured JSON logs for the update service and the admin API."""

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any

from route53_ddns.config import settings

SERVICE_NAME = "route53-ddns"

# Context keys whose values must never reach the logs
SECRET_CONTEXT_KEYS = frozenset(
    {"credential", "credential_hash", "password", "session_id", "authorization"}
)
REDACTED = "[redacted]"


class JSONFormatter(logging.Formatter):
    """
    One JSON object per line, ready for CloudWatch Logs Insights.

    The `context` dict passed in `extra` is flattened into the object so
    fields like hostname, outcome and source_address can be queried
    directly. Secret-bearing context keys are masked.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "service": SERVICE_NAME,
            "logger": record.name,
            "message": record.getMessage(),
        }

        correlation_id = getattr(record, "correlation_id", None)
        if correlation_id:
            entry["correlation_id"] = correlation_id

        for key, value in getattr(record, "context", {}).items():
            entry[key] = REDACTED if key.lower() in SECRET_CONTEXT_KEYS else value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if record.levelno == logging.DEBUG:
            entry["source"] = f"{record.pathname}:{record.lineno} in {record.funcName}"

        return json.dumps(entry, default=str)


def configure_logging(log_level: str | None = None) -> None:
    """
    Send JSON logs from every logger to stdout, where Lambda collects them.

    Args:
        log_level: Level name; defaults to the LOG_LEVEL setting
    """
    level_name = (log_level or settings.log_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Lambda's runtime pre-installs a plain-text handler
    root_logger.handlers = [handler]

    # botocore echoes request parameters at DEBUG
    for noisy in ("botocore", "aiobotocore", "urllib3"):
        logging.getLogger(noisy).setLevel(max(level, logging.INFO))

    root_logger.info(
        "Logging configured",
        extra={"context": {"log_level": level_name}},
    )


def get_logger(name: str) -> logging.Logger:
    """Module logger; every service module calls this with __name__."""
    return logging.getLogger(name)
