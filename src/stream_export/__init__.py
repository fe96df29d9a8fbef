"""
stream_export – chunked, memory-bounded export of large result sets.

Import path convention::

    from stream_export.application.export import ExportService
    from stream_export.application.export import ExportConfig
    from stream_export.kernel.errors import ConfigurationError
    from stream_export.adapters.fastapi import StreamingExportResponse
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
