"""Unit tests for the kernel error hierarchy."""
from __future__ import annotations

import json

import pytest

from stream_export.kernel.errors import (
    BaseError,
    ConfigurationError,
    ExportError,
    FetchError,
    InfrastructureError,
    RenderError,
    UnsupportedFormatError,
)


class TestBaseError:
    def test_default_code(self) -> None:
        err = BaseError("boom")
        assert err.code == "stream_export_error"
        assert err.message == "boom"
        assert err.detail == {}

    def test_explicit_code_and_detail(self) -> None:
        err = BaseError("boom", code="custom", detail={"page": 3})
        assert err.to_dict() == {"code": "custom", "message": "boom", "detail": {"page": 3}}

    def test_cause_is_chained(self) -> None:
        cause = RuntimeError("disk full")
        err = BaseError("boom", cause=cause)
        assert err.__cause__ is cause
        assert err.to_dict()["cause"] == "RuntimeError: disk full"

    def test_str_is_json(self) -> None:
        payload = json.loads(str(BaseError("boom")))
        assert payload["code"] == "stream_export_error"


class TestExportErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(UnsupportedFormatError, ExportError)
        assert issubclass(ConfigurationError, ExportError)
        assert issubclass(FetchError, InfrastructureError)
        assert issubclass(RenderError, InfrastructureError)
        assert issubclass(InfrastructureError, BaseError)

    def test_unsupported_format_keeps_format(self) -> None:
        err = UnsupportedFormatError("xls")
        assert err.format == "xls"
        assert err.code == "unsupported_format"
        assert "xls" in err.message

    def test_configuration_error_setting(self) -> None:
        err = ConfigurationError("bad limit", setting="limit")
        assert err.setting == "limit"
        assert err.code == "export_configuration_error"

    @pytest.mark.parametrize("cls,code", [(FetchError, "fetch_error"), (RenderError, "render_error")])
    def test_stream_errors_carry_page(self, cls: type, code: str) -> None:
        err = cls("failed", page=4)
        assert err.page == 4
        assert err.code == code

    def test_context_recorded_in_detail(self) -> None:
        assert FetchError("failed", page=2).to_dict()["detail"] == {"page": 2}
        assert ConfigurationError("bad", setting="limit").detail == {"setting": "limit"}
        assert UnsupportedFormatError("xls").detail == {"format": "xls"}

    def test_explicit_detail_wins_over_context(self) -> None:
        err = RenderError("failed", page=2, detail={"page": 3, "row": 7})
        assert err.detail == {"page": 3, "row": 7}

    def test_missing_context_not_recorded(self) -> None:
        assert ConfigurationError("bad").detail == {}
