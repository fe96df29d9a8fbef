"""Application pagination – caller listing state an export can inherit."""
from stream_export.application.pagination.page_request import Filter, PageRequest, Sort, SortDirection
from stream_export.application.pagination.state import PaginationState

__all__ = ["Filter", "PageRequest", "PaginationState", "Sort", "SortDirection"]
