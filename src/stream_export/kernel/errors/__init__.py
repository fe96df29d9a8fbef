"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── ExportError              (export.py)
    │   ├── UnsupportedFormatError
    │   └── ConfigurationError
    └── InfrastructureError      (infrastructure.py)
        ├── FetchError
        └── RenderError
"""

from stream_export.kernel.errors.base import BaseError
from stream_export.kernel.errors.export import (
    ConfigurationError,
    ExportError,
    UnsupportedFormatError,
)
from stream_export.kernel.errors.infrastructure import (
    FetchError,
    InfrastructureError,
    RenderError,
)

__all__ = [
    "BaseError",
    "ConfigurationError",
    "ExportError",
    "FetchError",
    "InfrastructureError",
    "RenderError",
    "UnsupportedFormatError",
]
