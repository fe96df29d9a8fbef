"""Observability – structlog configuration."""
from __future__ import annotations

import logging
from typing import Any

import structlog

from stream_export.config.settings import ExportSettings

SQL_ECHO_LOGGERS: tuple[str, ...] = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(level: int = logging.INFO, *, json: bool = True) -> None:
    """Route structlog through stdlib logging with JSON (or console) output.

    Export output never goes through logging, so log lines cannot leak into
    the streamed file regardless of the handler configured here.
    """
    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    renderer: Any = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def configure_logging_from_settings(settings: ExportSettings) -> None:
    """Apply ``EXPORT_LOG_LEVEL`` / ``EXPORT_DEBUG`` to the process.

    Debug mode logs to the console and turns SQL statement echo on; the
    engine silences it again once an export has finished.
    """
    configure_logging(settings.level, json=not settings.debug)
    if settings.debug:
        for name in SQL_ECHO_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)


def silence_sql_echo() -> None:
    """Turn SQL statement echo off once an export has finished streaming."""
    for name in SQL_ECHO_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


__all__ = ["SQL_ECHO_LOGGERS", "configure_logging", "configure_logging_from_settings", "silence_sql_echo"]
