from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from traceback import format_exception

from .env import get_env_flags

# LogRecord attributes forwarded to JSON output when a caller passes them via `extra=`.
CONTEXT_FIELDS = ("document_id", "job", "index", "configuration")


class JsonFormatter(logging.Formatter):
    """Structured JSON formatter for prod and CI logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: dict[str, object] = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "pid": record.process,
            "message": record.getMessage(),
        }

        context = {
            k: getattr(record, k) for k in CONTEXT_FIELDS if getattr(record, k, None) is not None
        }
        if context:
            payload["context"] = context

        if record.exc_info:
            exc_type = record.exc_info[0].__name__ if record.exc_info[0] else None
            exc_message = str(record.exc_info[1]) if record.exc_info[1] else None
            stack = "".join(format_exception(*record.exc_info))

            err_obj: dict[str, object] = {}
            if exc_type:
                err_obj["type"] = exc_type
            if exc_message:
                err_obj["message"] = exc_message

            max_stack = int(os.getenv("LOG_STACK_LIMIT", "4000"))
            err_obj["stack"] = stack[:max_stack] + ("...(truncated)" if len(stack) > max_stack else "")

            payload["error"] = err_obj

        return json.dumps(payload, ensure_ascii=False, default=str)


def _read_level() -> str:
    explicit = os.getenv("LOG_LEVEL")
    if explicit:
        return explicit.upper()

    flags = get_env_flags()
    if flags.is_prod:
        return "INFO"
    if flags.is_local or flags.is_dev or flags.is_test:
        return "DEBUG"
    return "INFO"


def _read_format() -> str:
    fmt = os.getenv("LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "json" if get_env_flags().is_prod else "plain"


def setup_logging() -> None:
    level = _read_level()
    fmt = _read_format()

    formatter_name = "json" if fmt == "json" else "plain"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {
                    "format": "%(asctime)s %(levelname)-5s [pid:%(process)d] %(name)s: %(message)s",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                },
            },
            "handlers": {
                "stream": {
                    "class": "logging.StreamHandler",
                    "level": level,
                    "formatter": formatter_name,
                }
            },
            "root": {
                "level": level,
                "handlers": ["stream"],
            },
            # The Mongo driver is chatty at DEBUG; keep it at WARNING unless asked otherwise.
            "loggers": {
                "pymongo": {"level": "WARNING", "handlers": [], "propagate": True},
                "motor": {"level": "WARNING", "handlers": [], "propagate": True},
            },
        }
    )
