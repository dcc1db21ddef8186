"""Structured logging for EnglishMate.

Every line is a JSON object so relay traffic (upstream status, latency,
session) can be filtered with jq. ENGLISHMATE_LOG_LEVEL sets verbosity;
ENGLISHMATE_LOG_FORMAT=text switches to plain lines for local runs.
"""
import logging
import json
import os
import sys
import time
from contextlib import contextmanager
from typing import Any, Iterator

EXTRA_FIELDS = ("component", "endpoint", "session", "view", "status_code", "duration_ms", "count", "detail")

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            entry["error"] = str(exc)
            entry["error_type"] = type(exc).__name__
        entry.update({key: getattr(record, key) for key in EXTRA_FIELDS if getattr(record, key, None) is not None})
        return json.dumps(entry, ensure_ascii=False, default=str)


def get_logger(name: str = "englishmate") -> logging.Logger:
    """Get or create a logger writing to stderr in the configured format.

    Usage:
        from log import get_logger
        logger = get_logger("englishmate.tutor")
        logger.info("Page loaded", extra={"component": "scenarios", "count": 12})
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = os.environ.get("ENGLISHMATE_LOG_LEVEL", "INFO").upper()
    logger.setLevel(getattr(logging, level, logging.INFO))
    handler = logging.StreamHandler(sys.stderr)
    if os.environ.get("ENGLISHMATE_LOG_FORMAT", "json") == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S"))
    else:
        handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    return logger


@contextmanager
def log_upstream_call(logger: logging.Logger, msg: str, component: str) -> Iterator[dict]:
    """Log `msg` with the elapsed time once the wrapped upstream call returns.

    The yielded dict is the log's `extra`; set `status_code` on it inside the block.
    Nothing is logged if the block raises.
    """
    extra: dict[str, Any] = {"component": component}
    start = time.monotonic()
    yield extra
    extra["duration_ms"] = round((time.monotonic() - start) * 1000)
    logger.info(msg, extra=extra)
