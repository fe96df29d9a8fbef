"""FastAPI adapter – reusable dependency functions.

``FastAPIPaginationDep`` reads the listing's query string into a
:class:`PageRequest`; :func:`pagination_from_request` does the same for code
that only has a ``Request`` (e.g. auto-export resource factories) and wraps
the result in a :class:`PaginationState` the export can inherit.
"""
from __future__ import annotations

from typing import Annotated, Literal

from fastapi import Depends, Query, Request

from stream_export.application.pagination import PageRequest, PaginationState, Sort, SortDirection


def _page_request(page: int, size: int, sort_by: str | None, sort_dir: str) -> PageRequest:
    sorts: tuple[Sort, ...] = ()
    if sort_by:
        sorts = (Sort(sort_by, SortDirection(sort_dir.upper())),)
    return PageRequest(page=page, size=size, sorts=sorts)


async def pagination_dep(
    page: int = Query(default=1, ge=1, description="1-based page number"),
    size: int = Query(default=20, ge=1, le=1000, description="Items per page"),
    sort_by: str | None = Query(default=None, description="Field to sort by"),
    sort_dir: Literal["asc", "desc"] = Query(default="asc", description="Sort direction"),
) -> PageRequest:
    """Extract and validate pagination parameters from query string."""
    return _page_request(page, size, sort_by, sort_dir)


FastAPIPaginationDep = Annotated[PageRequest, Depends(pagination_dep)]


def pagination_from_request(request: Request, model: str | None = None) -> PaginationState:
    """Build the inherited pagination state from *request*'s query string.

    Malformed values fall back to the defaults; an export never fails because
    of the listing's paging parameters, which it overrides anyway.
    """
    params = request.query_params

    def _int(name: str, default: int) -> int:
        try:
            return int(params.get(name, default))
        except ValueError:
            return default

    sort_dir = params.get("sort_dir", "asc").lower()
    if sort_dir not in ("asc", "desc"):
        sort_dir = "asc"
    page = max(_int("page", 1), 1)
    size = min(max(_int("size", 20), 1), 1000)
    return PaginationState.from_page_request(
        _page_request(page, size, params.get("sort_by") or None, sort_dir), model=model
    )


__all__ = ["FastAPIPaginationDep", "pagination_dep", "pagination_from_request"]
