"""FastAPI adapter – ASGI output sink and the streaming export response.

Headers are held back until the first flush. Until then a failure can still
be answered with a JSON error; afterwards the response is committed and a
failure can only cut the body short.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, Sequence

from starlette.background import BackgroundTask
from starlette.responses import Response

from stream_export.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from stream_export.application.export.service import ExportRun, ExportService
from stream_export.kernel.errors import BaseError
from stream_export.observability.logging import get_logger

if TYPE_CHECKING:
    from starlette.types import Receive, Scope, Send

_log = get_logger(__name__)


def _raw_headers(headers: Mapping[str, str] | Sequence[tuple[bytes, bytes]]) -> list[tuple[bytes, bytes]]:
    if isinstance(headers, Mapping):
        return [(k.lower().encode("latin-1"), v.encode("latin-1")) for k, v in headers.items()]
    return list(headers)


class AsgiSink:
    """:class:`OutputSink` writing ``http.response.*`` messages to an ASGI *send*.

    Every :meth:`flush` sends the buffered bytes as one body message with
    ``more_body=True``; :meth:`close` ends the response.
    """

    def __init__(self, send: "Send") -> None:
        self._send = send
        self._status = 200
        self._headers: list[tuple[bytes, bytes]] = []
        self._buffer = bytearray()
        self._closed = False
        self.committed = False

    async def start(self, status: int, headers: Mapping[str, str] | Sequence[tuple[bytes, bytes]]) -> None:
        self._status = status
        self._headers = _raw_headers(headers)

    async def write(self, data: bytes) -> None:
        self._buffer += data

    async def _commit(self) -> None:
        if not self.committed:
            self.committed = True
            await self._send({"type": "http.response.start", "status": self._status, "headers": self._headers})

    async def flush(self) -> None:
        await self._commit()
        if self._buffer:
            body, self._buffer = bytes(self._buffer), bytearray()
            await self._send({"type": "http.response.body", "body": body, "more_body": True})

    async def close(self) -> None:
        if self._closed:
            return
        await self.flush()
        self._closed = True
        await self._send({"type": "http.response.body", "body": b"", "more_body": False})


class StreamingExportResponse(Response):
    """Starlette response that streams a prepared :class:`ExportRun`.

    Usage::

        @app.get("/email_signups.csv")
        async def export_signups(request: Request) -> Response:
            run = service.prepare(resource, "csv")
            return StreamingExportResponse(service, run)
    """

    def __init__(
        self,
        service: ExportService,
        run: ExportRun,
        status_code: int = 200,
        background: BackgroundTask | None = None,
        mapper: FastAPIExceptionMapper | None = None,
    ) -> None:
        self.service = service
        self.run = run
        self.status_code = status_code
        self.background = background
        self.raw_headers = run.response.as_list()
        self._mapper = mapper or FastAPIExceptionMapper()

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        sink = AsgiSink(send)
        await sink.start(self.status_code, self.raw_headers)
        if scope.get("method") == "HEAD":
            # Headers only; the source is never queried.
            await sink.close()
            if self.background is not None:
                await self.background()
            return
        try:
            await self.service.stream(self.run, sink)
        except BaseError as exc:
            if not sink.committed:
                await self._mapper.response_for(exc)(scope, receive, send)
                return
            _log.error("export.aborted", file_name=self.run.file_name, error=exc.code)
        await sink.close()

        if self.background is not None:
            await self.background()


__all__ = ["AsgiSink", "StreamingExportResponse"]
