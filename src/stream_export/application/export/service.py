"""Application export – ExportService, the entry point of an export run.

Typical use from a request handler::

    service = ExportService({"csv": {"fields": ["email", "Source.name"]}})
    resource = ExportResource(model="EmailSignup", name="EmailSignups", fetcher=fetcher)
    run = service.prepare(resource, "csv")          # all config errors surface here
    await sink.start(200, run.response.headers)
    await service.stream(run, sink)

``prepare`` does everything that can fail because of configuration, so a
caller can still answer with an error status. Once ``stream`` has flushed
the first chunk the response is committed.
"""
from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any, Mapping, Sequence

import jinja2

from stream_export.application.export.config import DEFAULTS, ExportConfig, merge_layers, split_layers
from stream_export.application.export.engine import ExportResult, StreamingExportEngine
from stream_export.application.export.fetcher import ChunkFetcher
from stream_export.application.export.fields import FieldProjector, PlainField, ResolvedField
from stream_export.application.export.formats import FormatRegistry, FormatSpec, default_registry
from stream_export.application.export.headers import ResponseHeaderBuilder, ResponseHeaders
from stream_export.application.export.options import QueryOptions, QueryOptionsBuilder
from stream_export.application.export.renderers import (
    OutputRenderer,
    RenderContext,
    TemplateRenderer,
    template_environment,
)
from stream_export.application.export.sink import OutputSink
from stream_export.application.pagination import PaginationState
from stream_export.config.merge import deep_merge
from stream_export.config.settings import ExportSettings
from stream_export.kernel.errors import ConfigurationError
from stream_export.kernel.time import Clock
from stream_export.kernel.types import variable
from stream_export.observability.logging import bind_export_context, get_logger

_log = get_logger(__name__)


@dataclasses.dataclass(frozen=True)
class ExportResource:
    """What is being exported: the primary model and where its rows come from.

    *name* is the plural, user-facing resource name used for file names and
    the default data variable (``EmailSignups``); it defaults to *model*.
    """

    model: str
    fetcher: ChunkFetcher | None = None
    name: str | None = None
    pagination: PaginationState | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.model


@dataclasses.dataclass
class ExportRun:
    """State of a single export request; never shared between requests."""

    format: FormatSpec
    config: ExportConfig
    resource: ExportResource
    fields: tuple[ResolvedField, ...]
    renderer: OutputRenderer
    response: ResponseHeaders
    options: QueryOptions | None = None
    data: list[Any] | None = None
    result: ExportResult | None = None

    @property
    def file_name(self) -> str:
        return self.response.file_name

    @property
    def finished(self) -> bool:
        return self.result is not None


class ExportService:
    """Hold layered export configuration and run exports against it."""

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        *,
        registry: FormatRegistry | None = None,
        settings: ExportSettings | None = None,
        clock: Clock | None = None,
        templates_dir: str | Path | None = None,
        engine: StreamingExportEngine | None = None,
    ) -> None:
        self._registry = registry or default_registry()
        self._settings = settings or ExportSettings()
        self._defaults = {**DEFAULTS, "limit": self._settings.default_limit}
        self._shared: dict[str, Any] = {}
        self._specific: dict[str, dict[str, Any]] = {}
        self._header_builder = ResponseHeaderBuilder(clock)
        self._options_builder = QueryOptionsBuilder(self._settings.default_limit)
        self._engine = engine or StreamingExportEngine()
        self._templates: jinja2.Environment | None = (
            template_environment(templates_dir) if templates_dir is not None else None
        )
        self.configure(config)

    @property
    def registry(self) -> FormatRegistry:
        return self._registry

    # ------------------------------------------------------------------
    # configuration
    # ------------------------------------------------------------------

    def configure(self, config: Mapping[str, Any] | None) -> None:
        """Merge *config* on top of the attached configuration.

        Every format's resulting configuration is validated immediately.
        """
        shared, specific = split_layers(config, self._registry.names())
        new_shared = deep_merge(self._shared, shared)
        new_specific = {
            name: deep_merge(self._specific.get(name), specific.get(name)) for name in self._registry.names()
        }
        for name in self._registry.names():
            merge_layers(new_shared, new_specific[name], defaults=self._defaults)
        self._shared, self._specific = new_shared, new_specific

    def config_for(self, format: str, overrides: Mapping[str, Any] | None = None) -> ExportConfig:  # noqa: A002
        """Effective configuration for *format*, with per-run *overrides* on top."""
        name = self._registry.get(format).name
        shared, specific = split_layers(overrides, self._registry.names())
        return merge_layers(
            self._shared,
            self._specific.get(name),
            shared,
            specific.get(name),
            defaults=self._defaults,
        )

    def supports(self, format: str | None) -> bool:  # noqa: A002
        return self._registry.supports(format)

    def should_auto_export(self, format: str | None) -> bool:  # noqa: A002
        return self.supports(format) and self.config_for(format).auto  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # running
    # ------------------------------------------------------------------

    def prepare(
        self,
        resource: ExportResource,
        format: str,  # noqa: A002
        *,
        data: Sequence[Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ExportRun:
        """Resolve configuration, options, fields, renderer and headers.

        An empty *data* sequence counts as no data: the resource's fetcher is
        paged instead, and only a resource without a fetcher renders the
        empty list. When no field spec is configured the columns follow the
        find options' ``fields``, then the fetcher's schema.

        Raises :class:`UnsupportedFormatError` or :class:`ConfigurationError`
        before anything is sent to the client.
        """
        spec = self._registry.get(format)
        cfg = self.config_for(spec.name, config)
        cfg = cfg.replace(
            char_encoding=cfg.char_encoding or self._settings.app_encoding,
            data_var_name=cfg.data_var_name or variable(resource.display_name),
        )

        options: QueryOptions | None = None
        rows: list[Any] | None = None
        if not data and (data is None or resource.fetcher is not None):
            if resource.fetcher is None:
                raise ConfigurationError(
                    f"Resource {resource.model!r} has no fetcher and no data was supplied"
                )
            options = self._options_builder.build(spec.name, cfg, resource.pagination, resource.model)
            columns: Sequence[str] = resource.fetcher.columns()
        else:
            rows = list(data)
            columns = list(rows[0]) if rows else []

        field_spec = cfg.fields
        if not field_spec and options is not None and options.fields:
            field_spec = tuple(PlainField(f) for f in options.fields)
        fields = FieldProjector(resource.model).resolve(field_spec, columns)
        context = RenderContext(
            fields=fields,
            char_encoding=cfg.char_encoding,  # type: ignore[arg-type]
            source_encoding=self._settings.app_encoding,
            data_var_name=cfg.data_var_name,  # type: ignore[arg-type]
        )
        renderer = self._renderer(spec, cfg, context)

        response = self._header_builder.build(
            cfg.file_name_format,
            resource.display_name,
            options.conditions if options is not None else None,
            spec.name,
            mime_type=spec.mime_type,
            char_encoding=cfg.char_encoding,  # type: ignore[arg-type]
        )

        bind_export_context(format=spec.name, file_name=response.file_name, resource=resource.display_name)
        _log.info(
            "export.prepared",
            mode="data" if rows is not None else "paged",
            limit=options.limit if options is not None else None,
            fields=[f.key for f in fields],
        )
        return ExportRun(
            format=spec,
            config=cfg,
            resource=resource,
            fields=fields,
            renderer=renderer,
            response=response,
            options=options,
            data=rows,
        )

    def _renderer(self, spec: FormatSpec, cfg: ExportConfig, context: RenderContext) -> OutputRenderer:
        if not cfg.view_file:
            return spec.renderer_factory(context)
        if self._templates is None:
            raise ConfigurationError(
                f"view_file {cfg.view_file!r} is set but no templates directory is configured",
                setting="view_file",
            )
        for template in filter(None, (cfg.view_file, cfg.layout)):
            try:
                self._templates.get_template(template)
            except jinja2.TemplateError as exc:
                raise ConfigurationError(f"Cannot load template {template!r}: {exc}", setting="view_file") from exc
        return TemplateRenderer(self._templates, cfg.view_file, context, layout=cfg.layout)

    async def stream(self, run: ExportRun, sink: OutputSink) -> ExportResult:
        """Render the run into *sink*; headers must already be started."""
        if run.data is not None:
            run.result = await self._engine.run_data(run.data, run.renderer, sink)
        else:
            run.result = await self._engine.run(
                run.resource.fetcher,  # type: ignore[arg-type]
                run.renderer,
                run.options,  # type: ignore[arg-type]
                sink,
            )
        return run.result

    async def export(
        self,
        resource: ExportResource,
        sink: OutputSink,
        format: str,  # noqa: A002
        *,
        data: Sequence[Any] | None = None,
        config: Mapping[str, Any] | None = None,
    ) -> ExportResult:
        """Prepare, start the response and stream in one call."""
        run = self.prepare(resource, format, data=data, config=config)
        await sink.start(200, run.response.headers)
        return await self.stream(run, sink)


__all__ = ["ExportResource", "ExportRun", "ExportService"]
