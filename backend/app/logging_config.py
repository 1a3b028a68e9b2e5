"""
JSON log lines for the API, the store, the client and the web pages.

Every record is written to stdout as one JSON object carrying its channel,
the id of the request being served and any context the caller attached.
"""

import logging
import json
import uuid
from datetime import datetime, timezone
from contextvars import ContextVar

from app.config import LOG_LEVEL

# Set per request by the HTTP middleware; empty outside a request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CHANNELS = ["http", "db", "client", "web"]


def _channel_of(record: logging.LogRecord) -> str:
    channel = getattr(record, "channel", None)
    if channel:
        return channel
    return record.name.rsplit(".", 1)[-1] if "." in record.name else "app"


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"


class StructuredJsonFormatter(logging.Formatter):
    """
    Render a record as JSON with the keys timestamp, level, message,
    channel, context and extra, plus exception when a traceback is attached.

    `context` always includes request_id so lines from one request can be
    grouped; `extra` holds measurements such as duration_ms.
    """

    def format(self, record: logging.LogRecord) -> str:
        context = {"request_id": request_id_var.get("")}
        context.update(getattr(record, "context", None) or {})

        log_entry = {
            "timestamp": _utc_timestamp(),
            "level": record.levelname,
            "message": record.getMessage(),
            "channel": _channel_of(record),
            "context": context,
            "extra": getattr(record, "extra_data", None) or {},
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging():
    """Send everything through one stdout handler at LOG_LEVEL."""
    handler = logging.StreamHandler()
    handler.setFormatter(StructuredJsonFormatter())
    level = getattr(logging, LOG_LEVEL, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]
    for channel in CHANNELS:
        get_logger(channel).setLevel(level)
    return root_logger


def get_logger(channel: str) -> logging.Logger:
    return logging.getLogger(f"app.{channel}")


def log_with_context(logger: logging.Logger, level: str, message: str,
                     context: dict = None, extra_data: dict = None,
                     exc_info: bool = False):
    """
    Log `message` at `level` (a name such as "INFO") on a channel logger.

    `context` identifies what the line is about (record_id, student_id);
    `extra_data` carries measurements (duration_ms, status_code, ip).
    Pass exc_info=True from an except block to include the traceback.
    """
    logger.log(
        getattr(logging, level.upper(), logging.INFO),
        message,
        exc_info=exc_info,
        extra={"context": context or {}, "extra_data": extra_data or {},
               "channel": logger.name.rsplit(".", 1)[-1]},
    )


def generate_request_id() -> str:
    return str(uuid.uuid4())
