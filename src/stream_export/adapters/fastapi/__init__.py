"""FastAPI adapter – streaming export response, auto-export middleware, error mapper, deps."""
from stream_export.adapters.fastapi.deps import FastAPIPaginationDep, pagination_dep, pagination_from_request
from stream_export.adapters.fastapi.exception_mapper import FastAPIExceptionMapper
from stream_export.adapters.fastapi.middleware import FastAPIAutoExportMiddleware, ResourceFactory
from stream_export.adapters.fastapi.response import AsgiSink, StreamingExportResponse

__all__ = [
    "AsgiSink",
    "FastAPIAutoExportMiddleware",
    "FastAPIExceptionMapper",
    "FastAPIPaginationDep",
    "ResourceFactory",
    "StreamingExportResponse",
    "pagination_dep",
    "pagination_from_request",
]
