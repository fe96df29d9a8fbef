"""Unit tests for ExportService – configuration layering and full runs."""
from __future__ import annotations

import asyncio
import codecs
from pathlib import Path
from typing import Any

import pytest

from stream_export.application.export import (
    ExportResource,
    ExportService,
    FormatRegistry,
    FormatSpec,
    TemplateRenderer,
    csv_renderer,
    default_registry,
)
from stream_export.application.pagination import Filter, PageRequest, PaginationState
from stream_export.config import ExportSettings
from stream_export.kernel.errors import ConfigurationError, UnsupportedFormatError
from stream_export.testing import BufferedSink, FakeClock, RecordingChunkFetcher

ROWS = [
    {"id": 1, "email": "ann@example.com", "optin": 1, "Source.name": "Radio"},
    {"id": 2, "email": "bob@example.com", "optin": 0, "Source.name": "Flyer"},
    {"id": 3, "email": "cy@example.com", "optin": 1, "Source.name": None},
]
COLUMNS = ["id", "email", "optin"]


def _resource(rows: list[dict[str, Any]] = ROWS, **kwargs: Any) -> ExportResource:
    fetcher = RecordingChunkFetcher("EmailSignup", rows, columns=COLUMNS)
    return ExportResource(model="EmailSignup", name="EmailSignups", fetcher=fetcher, **kwargs)


def _service(config: dict[str, Any] | None = None, **kwargs: Any) -> ExportService:
    return ExportService(config, clock=FakeClock(), **kwargs)


def _export(service: ExportService, resource: ExportResource, fmt: str = "csv", **kwargs: Any) -> BufferedSink:
    sink = BufferedSink()
    asyncio.run(service.export(resource, sink, fmt, **kwargs))
    return sink


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_format_block_overrides_shared(self) -> None:
        service = _service({"limit": 100, "csv": {"limit": 50}})
        assert service.config_for("csv").limit == 50

    def test_default_limit_from_settings(self) -> None:
        service = _service(settings=ExportSettings(default_limit=1000))
        assert service.config_for("csv").limit == 1000

    def test_invalid_config_rejected_when_attached(self) -> None:
        with pytest.raises(ConfigurationError):
            _service({"csv": {"limit": 0}})

    def test_configure_merges_on_top(self) -> None:
        service = _service({"csv": {"limit": 50, "auto": False}})
        service.configure({"csv": {"limit": 10}})
        cfg = service.config_for("csv")
        assert (cfg.limit, cfg.auto) == (10, False)

    def test_failed_configure_keeps_previous(self) -> None:
        service = _service({"csv": {"limit": 50}})
        with pytest.raises(ConfigurationError):
            service.configure({"csv": {"file_name_format": "%nope%"}})
        assert service.config_for("csv").limit == 50

    def test_per_run_overrides_do_not_persist(self) -> None:
        service = _service({"csv": {"limit": 2}})
        assert service.prepare(_resource(), "csv", config={"limit": 7}).options.limit == 7
        assert service.prepare(_resource(), "csv").options.limit == 2

    def test_supports(self) -> None:
        service = _service()
        assert service.supports("csv")
        assert service.supports("CSV")
        assert not service.supports("xls")
        assert not service.supports(None)
        assert not service.supports("")

    def test_should_auto_export(self) -> None:
        assert _service().should_auto_export("csv")
        assert not _service({"csv": {"auto": False}}).should_auto_export("csv")
        assert not _service().should_auto_export("xls")

    def test_config_for_unknown_format(self) -> None:
        with pytest.raises(UnsupportedFormatError):
            _service().config_for("xls")


# ---------------------------------------------------------------------------
# prepare
# ---------------------------------------------------------------------------


class TestPrepare:
    def test_unsupported_format(self) -> None:
        with pytest.raises(UnsupportedFormatError):
            _service().prepare(_resource(), "xls")

    def test_inherits_listing_state(self) -> None:
        pagination = PaginationState.from_page_request(
            PageRequest(page=4, size=20, filters=(Filter("optin", "=", 1),))
        )
        run = _service({"csv": {"limit": 2}}).prepare(_resource(pagination=pagination), "csv")
        assert run.options is not None
        assert run.options.conditions == {"optin": 1}
        assert (run.options.limit, run.options.page) == (2, 1)
        assert run.file_name == "email-signups-optin-1-2024-01-02-03-04-05.csv"

    def test_data_var_name_defaults_to_variable_name(self) -> None:
        assert _service().prepare(_resource(), "csv").config.data_var_name == "emailSignups"

    def test_explicit_data_var_name(self) -> None:
        run = _service({"data_var_name": "signups"}).prepare(_resource(), "csv")
        assert run.config.data_var_name == "signups"

    def test_empty_char_encoding_uses_app_encoding(self) -> None:
        service = _service({"char_encoding": ""}, settings=ExportSettings(app_encoding="UTF-8"))
        run = service.prepare(_resource(), "csv")
        assert run.config.char_encoding == "UTF-8"
        assert run.response.headers["Content-Type"] == 'application/csv; charset="UTF-8"'

    def test_fields_default_to_fetcher_columns(self) -> None:
        run = _service().prepare(_resource(), "csv")
        assert [f.label for f in run.fields] == ["Id", "Email", "Optin"]

    def test_no_fetcher_and_no_data(self) -> None:
        with pytest.raises(ConfigurationError):
            _service().prepare(ExportResource(model="EmailSignup"), "csv")

    def test_view_file_without_templates(self) -> None:
        with pytest.raises(ConfigurationError):
            _service({"view_file": "signups.txt"}).prepare(_resource(), "csv")

    def test_missing_template(self, tmp_path: Path) -> None:
        service = _service({"view_file": "missing.txt"}, templates_dir=tmp_path)
        with pytest.raises(ConfigurationError):
            service.prepare(_resource(), "csv")

    def test_view_file_selects_template_renderer(self, tmp_path: Path) -> None:
        (tmp_path / "signups.txt").write_text("{{ emailSignups | length }}", encoding="utf-8")
        run = _service({"view_file": "signups.txt"}, templates_dir=tmp_path).prepare(_resource(), "csv")
        assert isinstance(run.renderer, TemplateRenderer)
        assert not run.finished


# ---------------------------------------------------------------------------
# export
# ---------------------------------------------------------------------------


class TestExport:
    def test_full_csv_export(self) -> None:
        service = _service(
            {"csv": {"limit": 2, "fields": ["email", {"optin": {"label": "Opted in", "decorator": "yes_no"}}]}}
        )
        resource = _resource()
        sink = _export(service, resource)

        assert sink.status == 200
        assert sink.headers["Content-Disposition"] == 'attachment; filename="email-signups-2024-01-02-03-04-05.csv"'
        assert sink.headers["Content-Type"] == 'application/csv; charset="UTF-16LE"'
        assert sink.body.startswith(codecs.BOM_UTF16_LE)
        assert sink.text().splitlines() == [
            '"Email"\t"Opted in"',
            '"ann@example.com"\t"Yes"',
            '"bob@example.com"\t"No"',
            '"cy@example.com"\t"Yes"',
        ]
        assert resource.fetcher.pages == [1, 2, 3]  # type: ignore[union-attr]

    def test_fields_from_other_models(self) -> None:
        service = _service({"csv": {"fields": ["email", "Source.name"]}})
        resource = _resource()
        lines = _export(service, resource).text().splitlines()
        assert lines[0] == '"Email"\t"Source Name"'
        assert lines[3] == '"cy@example.com"\t""'
        assert resource.fetcher.requests[0].contain == ["Source"]  # type: ignore[union-attr]

    def test_inherited_find_option_fields_drive_columns(self) -> None:
        pagination = PaginationState(options={"fields": ["EmailSignup.email", "Source.name"]})
        lines = _export(_service(), _resource(pagination=pagination)).text().splitlines()
        assert lines[0] == '"Email"\t"Source Name"'
        assert lines[1] == '"ann@example.com"\t"Radio"'

    def test_explicit_find_option_fields_drive_columns(self) -> None:
        service = _service({"csv": {"find_options": {"fields": ["optin"]}}})
        lines = _export(service, _resource()).text().splitlines()
        assert lines == ['"Optin"', '"1"', '"0"', '"1"']

    def test_configured_fields_win_over_find_option_fields(self) -> None:
        pagination = PaginationState(options={"fields": ["EmailSignup.id"]})
        service = _service({"csv": {"fields": ["email"]}})
        lines = _export(service, _resource(pagination=pagination)).text().splitlines()
        assert lines[0] == '"Email"'

    def test_empty_data_pages_from_fetcher(self) -> None:
        resource = _resource()
        sink = BufferedSink()
        result = asyncio.run(_service({"csv": {"fields": ["email"]}}).export(resource, sink, "csv", data=[]))
        assert result.rows == 3
        assert resource.fetcher.requests  # type: ignore[union-attr]

    def test_empty_data_without_fetcher_renders_nothing(self) -> None:
        sink = BufferedSink()
        result = asyncio.run(_service().export(ExportResource(model="Report"), sink, "csv", data=[]))
        assert (result.fetches, result.rows) == (0, 0)
        assert sink.text() == ""

    def test_empty_result(self) -> None:
        sink = _export(_service({"csv": {"fields": ["email"]}}), _resource([]))
        assert sink.flushes == 1
        assert sink.body == codecs.BOM_UTF16_LE + '"Email"\n'.encode("utf-16-le")

    def test_caller_supplied_data(self) -> None:
        sink = BufferedSink()
        result = asyncio.run(
            _service().export(ExportResource(model="Report"), sink, "csv", data=[{"total": 3}, {"total": 4}])
        )
        assert result.fetches == 0
        assert sink.text().splitlines() == ['"Total"', '"3"', '"4"']
        assert sink.headers["Content-Disposition"] == 'attachment; filename="report-2024-01-02-03-04-05.csv"'

    def test_template_export(self, tmp_path: Path) -> None:
        (tmp_path / "signups.txt").write_text(
            "{% for r in signups %}{{ r.email }}\n{% endfor %}", encoding="utf-8"
        )
        service = _service(
            {"csv": {"view_file": "signups.txt", "data_var_name": "signups", "char_encoding": "UTF-8", "limit": 2}},
            templates_dir=tmp_path,
        )
        sink = _export(service, _resource())
        assert sink.body == codecs.BOM_UTF8 + b"ann@example.com\nbob@example.com\ncy@example.com\n"

    def test_run_result_recorded(self) -> None:
        service = _service({"csv": {"limit": 2}})
        run = service.prepare(_resource(), "csv")
        sink = BufferedSink()

        async def _go() -> None:
            await sink.start(200, run.response.headers)
            await service.stream(run, sink)

        asyncio.run(_go())
        assert run.finished
        assert run.result is not None and run.result.rows == 3

    def test_custom_format(self) -> None:
        registry = FormatRegistry(*default_registry(), FormatSpec("tsv", "text/tab-separated-values", csv_renderer))
        service = _service({"tsv": {"char_encoding": "UTF-8"}}, registry=registry)
        sink = _export(service, _resource(), "tsv")
        assert sink.headers["Content-Type"] == 'text/tab-separated-values; charset="UTF-8"'
        assert sink.headers["Content-Disposition"].endswith('.tsv"')
        assert service.config_for("csv").char_encoding == "UTF-16LE"

    def test_unsupported_format_sends_nothing(self) -> None:
        sink = BufferedSink()
        with pytest.raises(UnsupportedFormatError):
            asyncio.run(_service().export(_resource(), sink, "xls"))
        assert not sink.started
        assert sink.body == b""
