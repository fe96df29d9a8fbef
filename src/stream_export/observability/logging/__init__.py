"""Observability – structlog configuration and logger helpers."""
from stream_export.observability.logging.factory import (
    configure_logging,
    configure_logging_from_settings,
    silence_sql_echo,
)
from stream_export.observability.logging.processors import bind_export_context, get_logger

__all__ = [
    "bind_export_context",
    "configure_logging",
    "configure_logging_from_settings",
    "get_logger",
    "silence_sql_echo",
]
