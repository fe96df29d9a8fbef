"""Unit tests for export configuration, field specs and decorators."""
from __future__ import annotations

import dataclasses
from datetime import date, datetime

import pytest

from stream_export.application.export import (
    DEFAULTS,
    INHERIT,
    DecoratedField,
    ExportConfig,
    FieldDecorator,
    FieldProjector,
    LabeledField,
    PlainField,
    merge_layers,
    parse_field_spec,
    register_decorator,
    split_layers,
)
from stream_export.application.export.decorators import date_format, default, yes_no
from stream_export.kernel.errors import ConfigurationError


# ---------------------------------------------------------------------------
# ExportConfig
# ---------------------------------------------------------------------------


class TestExportConfig:
    def test_defaults_match_default_mapping(self) -> None:
        assert merge_layers() == ExportConfig()
        assert ExportConfig().find_options == INHERIT
        assert ExportConfig().char_encoding == DEFAULTS["char_encoding"]

    def test_inherits_pagination(self) -> None:
        assert ExportConfig().inherits_pagination
        assert not ExportConfig(find_options={"limit": 5}).inherits_pagination

    def test_frozen(self) -> None:
        with pytest.raises(dataclasses.FrozenInstanceError):
            ExportConfig().limit = 10  # type: ignore[misc]

    def test_replace_returns_new_instance(self) -> None:
        cfg = ExportConfig()
        assert cfg.replace(limit=10).limit == 10
        assert cfg.limit == 500

    @pytest.mark.parametrize(
        "kwargs,setting",
        [
            ({"limit": 0}, "limit"),
            ({"limit": -5}, "limit"),
            ({"limit": True}, "limit"),
            ({"limit": "100"}, "limit"),
            ({"find_options": "everything"}, "find_options"),
            ({"char_encoding": "no-such-codec"}, "char_encoding"),
            ({"file_name_format": ""}, "file_name_format"),
            ({"file_name_format": "%controllerName%-%userName%"}, "file_name_format"),
        ],
    )
    def test_invalid_values(self, kwargs: dict, setting: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            ExportConfig(**kwargs)
        assert exc_info.value.setting == setting

    def test_null_limit_allowed(self) -> None:
        assert ExportConfig(limit=None).limit is None

    def test_empty_char_encoding_allowed(self) -> None:
        assert ExportConfig(char_encoding="").char_encoding == ""

    def test_from_mapping_rejects_unknown_keys(self) -> None:
        with pytest.raises(ConfigurationError, match="chunk_size"):
            ExportConfig.from_mapping({**DEFAULTS, "chunk_size": 10})

    def test_from_mapping_parses_fields(self) -> None:
        cfg = ExportConfig.from_mapping({**DEFAULTS, "fields": ["email"]})
        assert cfg.fields == (PlainField("email"),)


class TestLayers:
    def test_split_layers(self) -> None:
        shared, specific = split_layers({"limit": 100, "csv": {"auto": False}}, ["csv"])
        assert shared == {"limit": 100}
        assert specific == {"csv": {"auto": False}}

    def test_split_layers_none(self) -> None:
        assert split_layers(None, ["csv"]) == ({}, {})

    def test_format_block_must_be_mapping(self) -> None:
        with pytest.raises(ConfigurationError):
            split_layers({"csv": True}, ["csv"])

    def test_later_layers_win(self) -> None:
        cfg = merge_layers({"limit": 100, "auto": False}, {"limit": 50})
        assert cfg.limit == 50
        assert cfg.auto is False

    def test_per_run_layer_on_top(self) -> None:
        cfg = merge_layers({"limit": 100}, {"limit": 50}, {"limit": 7})
        assert cfg.limit == 7

    def test_nested_find_options_merge(self) -> None:
        cfg = merge_layers(
            {"find_options": {"conditions": {"optin": True}, "limit": 10}},
            {"find_options": {"order": "created DESC"}},
        )
        assert cfg.find_options == {"conditions": {"optin": True}, "limit": 10, "order": "created DESC"}

    def test_custom_defaults(self) -> None:
        cfg = merge_layers(defaults={**DEFAULTS, "limit": 1000})
        assert cfg.limit == 1000


# ---------------------------------------------------------------------------
# Field specs
# ---------------------------------------------------------------------------


class TestParseFieldSpec:
    def test_none(self) -> None:
        assert parse_field_spec(None) is None

    def test_list_forms(self) -> None:
        specs = parse_field_spec(
            [
                "email",
                {"first_name": "First name(s)"},
                {"Source.name": {"label": "Where did you hear about us?"}},
                {"optin": {"decorator": "yes_no"}},
            ]
        )
        assert specs is not None
        assert specs[0] == PlainField("email")
        assert specs[1] == LabeledField("first_name", "First name(s)")
        assert specs[2] == LabeledField("Source.name", "Where did you hear about us?")
        assert isinstance(specs[3], DecoratedField)
        assert specs[3].label is None
        assert specs[3].decorator.name == "yes_no"

    def test_mapping_form_keeps_order(self) -> None:
        specs = parse_field_spec({"email": None, "created": "Signed up"})
        assert specs == (PlainField("email"), LabeledField("created", "Signed up"))

    def test_already_parsed_entries_pass_through(self) -> None:
        assert parse_field_spec([PlainField("email")]) == (PlainField("email"),)

    @pytest.mark.parametrize(
        "raw",
        [
            "email",
            42,
            ["1email"],
            ["Model.sub.field"],
            ["has space"],
            [42],
            [{"email": 42}],
            [{"email": {"label": 42}}],
            [{"email": {"format": "x"}}],
            [{"email": {"decorator": "no_such_decorator"}}],
        ],
    )
    def test_invalid(self, raw: object) -> None:
        with pytest.raises(ConfigurationError):
            parse_field_spec(raw)


class TestFieldProjector:
    def test_split_and_qualify(self) -> None:
        projector = FieldProjector("EmailSignup")
        assert projector.split("email") == ("EmailSignup", "email")
        assert projector.split("Source.name") == ("Source", "name")
        assert projector.qualify("email") == "EmailSignup.email"

    def test_default_labels(self) -> None:
        fields = FieldProjector("EmailSignup").resolve(
            parse_field_spec(["first_name", "Source.name", "EmailSignup.created"])
        )
        assert [f.label for f in fields] == ["First Name", "Source Name", "Created"]
        assert [f.primary for f in fields] == [True, False, True]

    def test_explicit_label_verbatim(self) -> None:
        (field,) = FieldProjector("EmailSignup").resolve(parse_field_spec([{"Source.name": "Heard via"}]))
        assert field.label == "Heard via"

    def test_columns_used_when_no_spec(self) -> None:
        fields = FieldProjector("EmailSignup").resolve(None, ["id", "email"])
        assert [f.key for f in fields] == ["EmailSignup.id", "EmailSignup.email"]

    def test_value_lookup(self) -> None:
        email, source = FieldProjector("EmailSignup").resolve(parse_field_spec(["email", "Source.name"]))
        assert email.value({"email": "a@example.com"}) == "a@example.com"
        assert email.value({"EmailSignup.email": "b@example.com"}) == "b@example.com"
        assert source.value({"Source.name": "Radio"}) == "Radio"
        assert source.value({"name": "not mine"}) is None

    def test_decorator_applied(self) -> None:
        (optin,) = FieldProjector("EmailSignup").resolve(
            parse_field_spec([{"optin": {"decorator": ["yes_no", "Y", "N"]}}])
        )
        assert optin.value({"optin": 0}) == "N"
        assert optin.label == "Optin"


# ---------------------------------------------------------------------------
# Decorators
# ---------------------------------------------------------------------------


class TestDecorators:
    @pytest.mark.parametrize(
        "value,expected",
        [(True, "Yes"), (1, "Yes"), ("true", "Yes"), ("1", "Yes"), (False, "No"), (0, "No"), ("0", "No"), (None, "No")],
    )
    def test_yes_no(self, value: object, expected: str) -> None:
        assert yes_no(value) == expected

    def test_date_format(self) -> None:
        assert date_format(datetime(2024, 1, 2, 3, 4, 5), "%Y/%m/%d %H:%M") == "2024/01/02 03:04"
        assert date_format(date(2024, 1, 2), "%d.%m.%Y") == "02.01.2024"
        assert date_format("2024-01-02T03:04:05", "%d.%m.%Y") == "02.01.2024"
        assert date_format("not a date") == "not a date"
        assert date_format(None) == ""

    def test_default(self) -> None:
        assert default(None, "n/a") == "n/a"
        assert default("", "n/a") == "n/a"
        assert default("x", "n/a") == "x"

    def test_parse_with_args(self) -> None:
        decorator = FieldDecorator.parse(["default", "unknown"])
        assert decorator.args == ("unknown",)
        assert decorator(None) == "unknown"

    def test_parse_callable(self) -> None:
        decorator = FieldDecorator.parse(str.upper)
        assert decorator("abc") == "ABC"

    def test_register_decorator(self) -> None:
        register_decorator("reversed_text", lambda value: str(value)[::-1])
        assert FieldDecorator.parse("reversed_text")("abc") == "cba"

    @pytest.mark.parametrize("raw", ["nope", [], [1, 2], 42])
    def test_parse_invalid(self, raw: object) -> None:
        with pytest.raises(ConfigurationError):
            FieldDecorator.parse(raw)
