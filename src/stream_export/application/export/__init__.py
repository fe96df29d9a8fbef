"""Application export – chunked, streaming exports of paged query results.

Public surface::

    ExportService, ExportResource, ExportRun     orchestration
    ExportConfig                                 per-format settings
    StreamingExportEngine, ExportResult          fetch → render → flush loop
    ChunkFetcher, OutputRenderer, OutputSink     ports
    CsvRenderer, TemplateRenderer                renderers
    FormatRegistry, FormatSpec                   supported formats
"""
from stream_export.application.export.conditions import Condition, conditions_to_string, parse_conditions
from stream_export.application.export.config import DEFAULTS, INHERIT, ExportConfig, merge_layers, split_layers
from stream_export.application.export.decorators import FieldDecorator, register_decorator
from stream_export.application.export.engine import ExportResult, StreamingExportEngine
from stream_export.application.export.fetcher import Chunk, ChunkFetcher, InMemoryChunkFetcher, Row
from stream_export.application.export.fields import (
    DecoratedField,
    FieldProjector,
    FieldSpec,
    LabeledField,
    PlainField,
    ResolvedField,
    parse_field_spec,
)
from stream_export.application.export.formats import CSV, FormatRegistry, FormatSpec, default_registry
from stream_export.application.export.headers import ResponseHeaderBuilder, ResponseHeaders, sanitize_file_name
from stream_export.application.export.options import QueryOptions, QueryOptionsBuilder
from stream_export.application.export.renderers import (
    CsvRenderer,
    OutputRenderer,
    RenderContext,
    TemplateRenderer,
    csv_renderer,
    template_environment,
)
from stream_export.application.export.service import ExportResource, ExportRun, ExportService
from stream_export.application.export.sink import OutputSink

__all__ = [
    "CSV",
    "Chunk",
    "ChunkFetcher",
    "Condition",
    "CsvRenderer",
    "DEFAULTS",
    "DecoratedField",
    "ExportConfig",
    "ExportResource",
    "ExportResult",
    "ExportRun",
    "ExportService",
    "FieldDecorator",
    "FieldProjector",
    "FieldSpec",
    "FormatRegistry",
    "FormatSpec",
    "INHERIT",
    "InMemoryChunkFetcher",
    "LabeledField",
    "OutputRenderer",
    "OutputSink",
    "PlainField",
    "QueryOptions",
    "QueryOptionsBuilder",
    "RenderContext",
    "ResolvedField",
    "ResponseHeaderBuilder",
    "ResponseHeaders",
    "Row",
    "StreamingExportEngine",
    "TemplateRenderer",
    "conditions_to_string",
    "csv_renderer",
    "default_registry",
    "merge_layers",
    "parse_conditions",
    "parse_field_spec",
    "register_decorator",
    "sanitize_file_name",
    "split_layers",
    "template_environment",
]
