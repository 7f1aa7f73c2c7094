from __future__ import annotations

import logging
import os
from logging.config import dictConfig
from typing import Any


def _default_logging_dict(level: int | str) -> dict[str, Any]:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                # executions run in parallel worker threads; keep their lines apart
                "format": "%(asctime)s %(levelname)-8s [%(threadName)s] %(name)s - %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "DEBUG",
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {
            "level": level if isinstance(level, str) else logging.getLevelName(level),
            "handlers": ["console"],
        },
    }


def configure_logging(level_name: str | int | None = None) -> None:
    """Route framework logs to stdout, one line per record, tagged with the thread.

    Parallel executions each run on their own worker thread, so the thread
    name is what ties a wait or interaction log line back to its test.
    `level_name` accepts a level name or number; without one, `LOG_LEVEL`
    decides and INFO is the fallback.
    """
    if level_name is None:
        level_name = os.getenv("LOG_LEVEL", "INFO")

    if isinstance(level_name, str):
        level_name = level_name.upper()
        level = getattr(logging, level_name, logging.INFO)
    else:
        level = level_name

    cfg = _default_logging_dict(logging.getLevelName(level))
    dictConfig(cfg)
    logging.getLogger().setLevel(level)

