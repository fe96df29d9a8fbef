"""FastAPI adapter – FastAPIExceptionMapper."""
from __future__ import annotations

from typing import Any, Callable

from fastapi.responses import JSONResponse

from stream_export.kernel.errors import (
    BaseError,
    ConfigurationError,
    ExportError,
    InfrastructureError,
    UnsupportedFormatError,
)


class FastAPIExceptionMapper:
    """Register export error → HTTP status-code mappings on a FastAPI app.

    Error body schema::

        {"code": "unsupported_format", "message": "...", "detail": {}}

    Mappings
    --------
    ``UnsupportedFormatError`` → 404
    ``ConfigurationError``     → 500
    ``InfrastructureError``    → 503  (``FetchError``, ``RenderError``)
    ``ExportError``            → 500
    """

    def __init__(self) -> None:
        # ORDER MATTERS: more-specific subtypes first
        self._map: list[tuple[type[Exception], int]] = [
            (UnsupportedFormatError, 404),
            (ConfigurationError, 500),
            (InfrastructureError, 503),
            (ExportError, 500),
        ]

    def status_for(self, exc: BaseException) -> int:
        for exc_type, status in self._map:
            if isinstance(exc, exc_type):
                return status
        return 500

    def response_for(self, exc: BaseException) -> JSONResponse:
        if isinstance(exc, BaseError):
            body = exc.to_dict()
        else:
            body = {"code": "error", "message": str(exc)}
        return JSONResponse(status_code=self.status_for(exc), content=body)

    def register(self, app: Any) -> None:
        """Register all error handlers on a ``FastAPI`` or ``Starlette`` app."""
        for exc_type, _status in self._map:

            def make_handler() -> Callable[[Any, Any], Any]:
                def handler(request: Any, exc: Any) -> Any:  # noqa: ARG001
                    return self.response_for(exc)

                return handler

            app.add_exception_handler(exc_type, make_handler())


__all__ = ["FastAPIExceptionMapper"]
