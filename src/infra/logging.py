"""Logging for the business calendar command line.

The library modules only create ``business_calendar.*`` loggers. Handlers are
installed here, once per process, by :func:`configure_logging`:

* ``LOG_LEVEL`` sets the threshold (default ``WARNING``, so a lookup prints only its answer).
* ``LOG_DIR`` adds JSON lines in a file rotated at midnight, kept for
  ``LOG_RETENTION_DAYS`` days. ``LOG_FILE`` names the file inside that directory.
"""

from __future__ import annotations

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict

from pythonjsonlogger import jsonlogger

_CONFIGURED = False
_DEFAULT_LOG_FILE = "business_calendar.log"
# HTTP client chatter from holiday feed fetches stays out of DEBUG output.
_QUIET_LOGGERS = ("urllib3",)


class CalendarJsonFormatter(jsonlogger.JsonFormatter):
    """JSON log line carrying the CLI invocation id and deployment environment."""

    def __init__(self, run_id: str | None, environment: str | None) -> None:
        super().__init__()
        self._run_id = run_id
        self._environment = environment

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.setdefault("run_id", self._run_id)
        log_record.setdefault("environment", self._environment)
        log_record.setdefault("logger", record.name)
        log_record.setdefault("level", record.levelname)


def _file_handler(level: str) -> Dict[str, Any] | None:
    log_dir = os.environ.get("LOG_DIR", "").strip()
    if not log_dir:
        return None
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    filename = os.environ.get("LOG_FILE", "").strip() or _DEFAULT_LOG_FILE
    return {
        "class": "logging.handlers.TimedRotatingFileHandler",
        "level": level,
        "when": "midnight",
        "backupCount": int(os.environ.get("LOG_RETENTION_DAYS", "7")),
        "filename": str(directory / filename),
        "encoding": "utf-8",
        "formatter": "json",
    }


def configure_logging(*, run_id: str | None = None, environment: str | None = None) -> None:
    """Install the stderr handler and, when ``LOG_DIR`` is set, the JSON file handler."""

    global _CONFIGURED
    if _CONFIGURED:
        return

    level = os.environ.get("LOG_LEVEL", "WARNING").upper()
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "console",
        },
    }
    file_handler = _file_handler(level)
    if file_handler is not None:
        handlers["file"] = file_handler

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "json": {
                    "()": CalendarJsonFormatter,
                    "run_id": run_id,
                    "environment": environment,
                },
                "console": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                    "datefmt": "%H:%M:%S",
                },
            },
            "handlers": handlers,
            "loggers": {name: {"level": "WARNING"} for name in _QUIET_LOGGERS},
            "root": {
                "level": level,
                "handlers": list(handlers),
            },
        }
    )
    _CONFIGURED = True


__all__ = ["CalendarJsonFormatter", "configure_logging"]
