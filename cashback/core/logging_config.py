"""
structlog setup shared by the HTTP app and the operator scripts.

Events go through stdlib logging, so third-party loggers (SQLAlchemy,
uvicorn) end up in the same stream and format.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

from cashback.core.config import Settings, get_settings

# too chatty below WARNING
QUIET_LOGGERS = ("sqlalchemy.engine", "uvicorn.access")


def _level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _renderer(as_json: bool) -> Processor:
    if as_json:
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Apply the level and format from ``settings`` (the cached environment by default).

    Safe to call more than once; the last call wins. ``app_env`` is bound into
    every event so API and script logs can be told apart.
    """
    settings = settings or get_settings()
    level = _level(settings.log_level)

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _renderer(settings.log_json),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(app_env=settings.app_env)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
