"""Logging configuration for the storefront service.

The environment is read from ``PROTEAN_ENV`` (the same switch that selects the
``domain.toml`` overlay), so the database profile and the log profile always
agree. stdlib handlers carry the output and structlog renders on top of them.

Knobs:

* ``LOG_LEVEL`` overrides the per-environment level.
* ``LOG_FORMAT`` is ``json`` or ``console``; production and staging default
  to ``json``.
* ``LOG_DIR`` turns on rotating files (``storefront.log`` and
  ``storefront_error.log``). Without it the service logs to stdout only.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

SERVICE_NAME = "storefront"
MAX_LOG_BYTES = 10 * 1024 * 1024

LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
JSON_ENVIRONMENTS = ("production", "staging")

# Libraries whose INFO chatter drowns out storefront events
QUIET_LOGGERS = ("protean", "sqlalchemy.engine", "urllib3", "asyncio")


def environment() -> str:
    return (os.getenv("PROTEAN_ENV") or os.getenv("ENVIRONMENT") or "development").lower()


def get_log_level(env: str | None = None) -> str:
    env = env or environment()
    return os.getenv("LOG_LEVEL", LEVELS.get(env, "INFO")).upper()


def log_format(env: str | None = None) -> str:
    env = env or environment()
    default = "json" if env in JSON_ENVIRONMENTS else "console"
    chosen = os.getenv("LOG_FORMAT", default).lower()
    return chosen if chosen in ("json", "console") else default


def add_service_context(logger, method_name, event_dict):
    """Stamp every event with the service name and environment."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("env", environment())
    return event_dict


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=5,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(level: str, log_dir: str | None = None) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [logging.StreamHandler(sys.stdout)]

    log_dir = log_dir or os.getenv("LOG_DIR")
    if log_dir:
        log_path = Path(log_dir)
        try:
            log_path.mkdir(parents=True, exist_ok=True)
        except OSError:
            root_logger.warning("Log directory %s is not writable, logging to stdout only", log_path)
        else:
            root_logger.addHandler(_rotating_handler(log_path / f"{SERVICE_NAME}.log", level))
            root_logger.addHandler(_rotating_handler(log_path / f"{SERVICE_NAME}_error.log", logging.ERROR))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def _renderer(fmt: str):
    if fmt == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=sys.stdout.isatty(),
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def setup_structlog(fmt: str) -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if fmt == "console":
        processors.append(
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.FILENAME,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            )
        )
    processors.append(_renderer(fmt))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str | None = None) -> None:
    env = environment()
    setup_stdlib_logging(get_log_level(env), log_dir)
    setup_structlog(log_format(env))


def add_context(**kwargs: Any) -> None:
    """Bind request-scoped values (request id, user id) to every later event."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
