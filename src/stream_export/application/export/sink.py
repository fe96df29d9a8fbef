"""Application export – OutputSink port."""
from __future__ import annotations

from typing import Mapping, Protocol


class OutputSink(Protocol):
    """Byte-oriented destination attached to the client response.

    ``start`` records the status and headers; they reach the client no later
    than the first ``flush``. ``flush`` hands everything written so far to the
    client and may block on a slow consumer.
    """

    async def start(self, status: int, headers: Mapping[str, str]) -> None: ...

    async def write(self, data: bytes) -> None: ...

    async def flush(self) -> None: ...


__all__ = ["OutputSink"]
