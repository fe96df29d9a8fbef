"""FastAPI adapter – FastAPIAutoExportMiddleware.

Answers ``GET /<listing>.<format>`` with a streamed export when the format is
registered and its ``auto`` setting is on (``HEAD`` gets the headers only);
every other request passes through untouched::

    app.add_middleware(
        FastAPIAutoExportMiddleware,
        service=service,
        resources={"/email_signups": signup_resource},
    )

A resource factory receives the ``Request`` and returns an
:class:`ExportResource` (directly or as an awaitable).
"""
from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Union

from starlette.requests import Request

from stream_export.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from stream_export.adapters.fastapi.response import StreamingExportResponse
from stream_export.application.export.service import ExportResource, ExportService
from stream_export.kernel.errors import BaseError
from stream_export.observability.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send

ResourceFactory = Callable[[Request], Union[ExportResource, Awaitable[ExportResource]]]

_log = get_logger(__name__)


class FastAPIAutoExportMiddleware:
    """Intercept listing requests that carry an export extension."""

    def __init__(
        self,
        app: "ASGIApp",
        service: ExportService,
        resources: Mapping[str, ResourceFactory],
        mapper: FastAPIExceptionMapper | None = None,
    ) -> None:
        self.app = app
        self._service = service
        self._resources = {path.rstrip("/") or "/": factory for path, factory in resources.items()}
        self._mapper = mapper or FastAPIExceptionMapper()

    def _match(self, scope: "Scope") -> tuple[ResourceFactory, str] | None:
        if scope["type"] != "http" or scope.get("method", "GET") not in ("GET", "HEAD"):
            return None
        base, dot, ext = scope.get("path", "").rpartition(".")
        if not dot or "/" in ext:
            return None
        factory = self._resources.get(base)
        if factory is None or not self._service.should_auto_export(ext):
            return None
        return factory, ext

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        match = self._match(scope)
        if match is None:
            await self.app(scope, receive, send)
            return

        factory, ext = match
        response: Any
        try:
            resource = factory(Request(scope, receive))
            if inspect.isawaitable(resource):
                resource = await resource
            run = self._service.prepare(resource, ext)
        except BaseError as exc:
            _log.warning("export.rejected", path=scope.get("path"), error=exc.code)
            response = self._mapper.response_for(exc)
        else:
            response = StreamingExportResponse(self._service, run, mapper=self._mapper)
        await response(scope, receive, send)


__all__ = ["FastAPIAutoExportMiddleware", "ResourceFactory"]
