"""
Unit Tests for Transformation Step Handlers
"""

import pytest

from mediator.errors import TransformationExecutionError
from mediator.schemas.transformation import TransformationStep
from mediator.transformation.handlers import (
    BUILTIN_HANDLERS,
    context_merge,
    convert_type,
    direct_mapping,
    drop_fields,
    format_value,
    get_nested,
    rename_fields,
    select_fields,
    set_nested,
)


def step(step_type, **parameters):
    return TransformationStep(type=step_type, parameters=parameters)


class TestNestedPaths:

    def test_get_nested(self):
        data = {"meta": {"authors": [{"name": "ana"}]}}
        assert get_nested(data, "meta.authors.0.name") == "ana"
        assert get_nested(data, "meta.missing", "default") == "default"

    def test_set_nested_creates_parents(self):
        data = {}
        set_nested(data, "a.b.c", 1)
        assert data == {"a": {"b": {"c": 1}}}


class TestDirectMapping:

    def test_identity_without_mappings(self):
        data = {"a": {"b": 1}}
        result = direct_mapping(data, step("direct_mapping"), {})

        assert result == data
        assert result is not data
        assert result["a"] is not data["a"]

    def test_identity_accepts_non_objects(self):
        assert direct_mapping([1, 2], step("direct_mapping"), {}) == [1, 2]

    def test_mappings(self):
        data = {"summary": "s", "meta": {"author": "ana"}, "extra": 1}
        result = direct_mapping(
            data,
            step("direct_mapping", mappings={"abstract": "summary", "author.name": "meta.author"}),
            {},
        )
        assert result == {"abstract": "s", "author": {"name": "ana"}}

    def test_keep_unmapped(self):
        data = {"summary": "s", "extra": 1}
        result = direct_mapping(
            data,
            step("direct_mapping", mappings={"abstract": "summary"}, keep_unmapped=True),
            {},
        )
        assert result == {"extra": 1, "abstract": "s"}

    def test_missing_source_field_is_skipped(self):
        result = direct_mapping({"a": 1}, step("direct_mapping", mappings={"b": "missing"}), {})
        assert result == {}


class TestFieldHandlers:

    def test_rename_fields(self):
        data = {"summary": "s", "title": "t"}
        result = rename_fields(data, step("rename_fields", renames={"summary": "abstract", "nope": "x"}), {})

        assert result == {"title": "t", "abstract": "s"}
        assert data == {"summary": "s", "title": "t"}

    def test_select_fields(self):
        result = select_fields({"a": 1, "b": 2, "c": 3}, step("select_fields", fields=["c", "a", "z"]), {})
        assert result == {"c": 3, "a": 1}

    def test_drop_fields(self):
        result = drop_fields({"a": 1, "b": 2}, step("drop_fields", fields=["b", "z"]), {})
        assert result == {"a": 1}

    def test_object_required(self):
        with pytest.raises(TransformationExecutionError) as exc_info:
            rename_fields("text", step("rename_fields"), {})
        assert exc_info.value.step_type == "rename_fields"


class TestFormatValue:

    @pytest.mark.parametrize("fmt,expected", [
        ("uppercase", "  AUTH FLOWS "),
        ("lowercase", "  auth flows "),
        ("trim", "Auth Flows"),
    ])
    def test_formats(self, fmt, expected):
        result = format_value({"title": "  Auth Flows "}, step("format_value", field="title", format=fmt), {})
        assert result["title"] == expected

    def test_non_string_untouched(self):
        result = format_value({"n": 3}, step("format_value", field="n", format="uppercase"), {})
        assert result == {"n": 3}

    def test_unknown_format(self):
        with pytest.raises(TransformationExecutionError, match="Unknown format"):
            format_value({"a": "x"}, step("format_value", field="a", format="reverse"), {})


class TestConvertType:

    @pytest.mark.parametrize("value,to,expected", [
        (5, "string", "5"),
        ("12.0", "integer", 12),
        ("2.5", "number", 2.5),
        ("yes", "boolean", True),
        ("off", "boolean", False),
        ("x", "array", ["x"]),
        ((1, 2), "array", [1, 2]),
    ])
    def test_conversions(self, value, to, expected):
        result = convert_type({"v": value}, step("convert_type", field="v", to=to), {})
        assert result["v"] == expected

    def test_missing_field_is_left_alone(self):
        assert convert_type({}, step("convert_type", field="v", to="string"), {}) == {}

    def test_unconvertible_value(self):
        with pytest.raises(TransformationExecutionError, match="Cannot convert"):
            convert_type({"v": "abc"}, step("convert_type", field="v", to="integer"), {})

    @pytest.mark.parametrize("value,to", [
        ("1e400", "integer"),
        (10 ** 400, "number"),
    ])
    def test_overflow_is_execution_error(self, value, to):
        with pytest.raises(TransformationExecutionError, match="Cannot convert"):
            convert_type({"v": value}, step("convert_type", field="v", to=to), {})

    def test_unknown_target(self):
        with pytest.raises(TransformationExecutionError, match="Unknown conversion target"):
            convert_type({"v": 1}, step("convert_type", field="v", to="date"), {})


class TestContextMerge:

    def test_values_and_context(self):
        result = context_merge(
            {"a": 1},
            step("context_merge", values={"stage": "synthesize"}, from_context=["run_id", "missing"]),
            {"run_id": "r-7"},
        )
        assert result == {"a": 1, "stage": "synthesize", "run_id": "r-7"}

    def test_target_path(self):
        result = context_merge(
            {"meta": {"x": 1}},
            step("context_merge", values={"y": 2}, target="meta"),
            {},
        )
        assert result == {"meta": {"x": 1, "y": 2}}


def test_builtin_handler_table():
    assert set(BUILTIN_HANDLERS) == {
        "direct_mapping", "rename_fields", "select_fields", "drop_fields",
        "format_value", "convert_type", "context_merge",
    }
