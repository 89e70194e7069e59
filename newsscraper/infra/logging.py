"""Logging for the scraper: one console appender, hierarchical loggers, MDC.

Loggers are named ``newsscraper.<program>.<task>`` (e.g. ``newsscraper.scrape.run``).
Each scrape request runs inside :func:`mdc_scope`, so every record written while
it is active, including records from the article worker threads, carries the
list URL.

Environment:
- ``NSC_LOG_LEVEL``: TRACE, DEBUG, INFO, WARN, ERROR, FATAL (default: INFO)
- ``NSC_LOG_JSON``: 1 for one JSON object per line instead of the text pattern
"""

from __future__ import annotations

import contextvars
import json
import logging
import logging.config
import os
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional

# below DEBUG; used for per-anchor link decisions
TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVEL_NAMES = {"TRACE": TRACE, "WARN": logging.WARNING, "FATAL": logging.CRITICAL}

PATTERN = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s%(mdc_suffix)s"

_context: contextvars.ContextVar[Mapping[str, Any]] = contextvars.ContextVar(
    "newsscraper_mdc", default={}
)
_configured = False


@contextmanager
def mdc_scope(**values: Any) -> Iterator[None]:
    """Add ``values`` to the diagnostic context for the duration of the block."""
    token = _context.set({**_context.get(), **values})
    try:
        yield
    finally:
        _context.reset(token)


class MDCFilter(logging.Filter):
    """Copies the active diagnostic context onto each record as ``mdc``/``mdc_suffix``."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = dict(_context.get())
        record.mdc = ctx
        record.mdc_suffix = (
            " | MDC: " + " ".join(f"{k}={v}" for k, v in ctx.items()) if ctx else ""
        )
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        doc: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        if getattr(record, "mdc", None):
            doc["mdc"] = record.mdc
        if record.exc_info:
            doc["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(doc, ensure_ascii=False)


def level_from_env(default: str = "INFO") -> int:
    name = os.getenv("NSC_LOG_LEVEL", default).strip().upper()
    if name in _LEVEL_NAMES:
        return _LEVEL_NAMES[name]
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def build_logging_config(
    level: Optional[int] = None, json_layout: Optional[bool] = None
) -> Dict[str, Any]:
    """dictConfig for a single stderr handler; arguments default to the environment."""
    if level is None:
        level = level_from_env()
    if json_layout is None:
        json_layout = os.getenv("NSC_LOG_JSON", "").strip().lower() in {"1", "true", "yes", "on"}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"mdc": {"()": MDCFilter}},
        "formatters": {
            "pattern": {"format": PATTERN, "datefmt": "%Y-%m-%d %H:%M:%S"},
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "level": level,
                "filters": ["mdc"],
                "formatter": "json" if json_layout else "pattern",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        # urllib3 logs every connection at DEBUG; keep it quiet unless asked
        "loggers": {"urllib3": {"level": "WARNING"}},
    }


def init_logging(force: bool = False) -> None:
    """Apply :func:`build_logging_config` once; ``force`` re-reads the environment."""
    global _configured
    if _configured and not force:
        return
    logging.config.dictConfig(build_logging_config())
    _configured = True


def get_unified_logger(program: str, task_type: str) -> logging.Logger:
    # leave a host application's logging setup alone
    if not _configured and not logging.getLogger().handlers:
        init_logging()
    return logging.getLogger(f"newsscraper.{program}.{task_type}")


def _emit(program: str, task_type: str, tag: str, fields: Mapping[str, Any]) -> None:
    get_unified_logger(program, task_type).info(
        "[%s] %s", tag, json.dumps(dict(fields), ensure_ascii=False)
    )


def log_task_start(program: str, task_type: str, details: Optional[Dict[str, Any]] = None) -> None:
    _emit(program, task_type, "TASK START", details or {})


def log_task_end(
    program: str, task_type: str, success: bool, details: Optional[Dict[str, Any]] = None
) -> None:
    _emit(program, task_type, "TASK END", {"success": success, **(details or {})})


def log_processing_step(
    program: str, task_type: str, message: str, details: Optional[Dict[str, Any]] = None
) -> None:
    _emit(program, task_type, message, details or {})


def log_batch_processing(
    program: str,
    task_type: str,
    total: int,
    success: int,
    failed: int,
    duration: float,
) -> None:
    """Counters for one fan-out of article fetches."""
    _emit(
        program,
        task_type,
        "BATCH",
        {
            "total": total,
            "success": success,
            "failed": failed,
            "duration": duration,
            "status": "ok" if success else "empty",
        },
    )


def log_error(program: str, task_type: str, error: BaseException, where: str = "") -> None:
    """ERROR record with the traceback of ``error``."""
    get_unified_logger(program, task_type).error(
        "%s%s", f"{where} | " if where else "", error, exc_info=error
    )
