"""Root error class for the stream-export error hierarchy."""

from __future__ import annotations

import json
from typing import Any


class BaseError(Exception):
    """Root of the error hierarchy.

    Args:
        message: Human-readable description.
        code: Machine-readable slug (defaults to ``default_code``).
        detail: Extra context for logs and HTTP error bodies.
        cause: Original exception that triggered this error.

    Subclasses record their own context (page number, setting name, format)
    through :meth:`_annotate`, so it travels in ``detail`` without every
    caller building the dict by hand.
    """

    default_code: str = "stream_export_error"

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = dict(detail or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def _annotate(self, **context: Any) -> None:
        """Copy non-``None`` *context* into ``detail``; explicit detail wins."""
        for key, value in context.items():
            if value is not None:
                self.detail.setdefault(key, value)

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"code": self.code, "message": self.message, "detail": self.detail}
        if self.cause is not None:
            payload["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return payload


__all__ = ["BaseError"]
