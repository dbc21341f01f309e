import json
import logging
import sys
from datetime import datetime, timezone

_RESERVED = frozenset((
    "name", "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName",
))

class _JsonFormatter(logging.Formatter):
    """Emit each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED:
                payload[key] = value
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)

def setup_logging(level: str = "INFO") -> None:
    """
    Call once at program startup to configure the root logger.

    Each record becomes one JSON line: ts, level, logger, msg plus any
    ``extra`` context. The license modules attach product, epoch,
    payload_length, iv_index, result, block_reason, url and line; seeds are
    logged base64 encoded, IVs never.
    """
    root = logging.getLogger()
    if root.handlers:
        return  # Already configured (e.g. when running under pytest)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_JsonFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

def get_logger(name: str) -> logging.Logger:
    """Return a named logger (call after setup_logging())."""
    return logging.getLogger(name)
