"""Observability – get_logger helper and export context binding."""
from __future__ import annotations

from typing import Any

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def bind_export_context(*, format: str, file_name: str, resource: str) -> None:  # noqa: A002
    """Attach the current run's identity to every log line in this context."""
    structlog.contextvars.bind_contextvars(
        export_format=format,
        export_file=file_name,
        export_resource=resource,
    )


__all__ = ["bind_export_context", "get_logger"]
