"""Observability – structured logging for export runs."""
from stream_export.observability.logging import (
    configure_logging,
    configure_logging_from_settings,
    get_logger,
    silence_sql_echo,
)

__all__ = ["configure_logging", "configure_logging_from_settings", "get_logger", "silence_sql_echo"]
