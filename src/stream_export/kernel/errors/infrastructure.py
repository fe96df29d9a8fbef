"""Infrastructure errors – failures while a stream is in flight."""

from __future__ import annotations

from typing import Any

from stream_export.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """I/O failure that is not a configuration problem."""

    default_code = "infrastructure_error"


class FetchError(InfrastructureError):
    """The data source failed while fetching a page.

    Bytes already flushed stay with the client; the stream is aborted.
    """

    default_code = "fetch_error"

    def __init__(self, message: str, *, page: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.page = page
        self._annotate(page=page)


class RenderError(InfrastructureError):
    """A chunk could not be formatted or encoded."""

    default_code = "render_error"

    def __init__(self, message: str, *, page: int | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.page = page
        self._annotate(page=page)


__all__ = ["FetchError", "InfrastructureError", "RenderError"]
