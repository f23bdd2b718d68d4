"""
Unit Tests for Collaborator Response Parsing
"""

import pytest

from mediator.errors import MalformedResponseError, UpstreamFailure
from mediator.parsing import escape_control_characters, expect_object, extract_json


class TestExtractJson:

    def test_plain_object(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_plain_array(self):
        assert extract_json('[1, 2]') == [1, 2]

    def test_markdown_fence(self):
        text = 'Here you go:\n```json\n{"steps": [{"type": "rename_fields"}]}\n```\nDone.'
        assert extract_json(text) == {"steps": [{"type": "rename_fields"}]}

    def test_embedded_in_prose(self):
        assert extract_json('The answer is {"valid": true} as requested') == {"valid": True}

    def test_smart_quotes(self):
        assert extract_json('{“a”: “b”}') == {"a": "b"}

    def test_raw_newline_in_string(self):
        assert extract_json('{"summary": "line one\nline two"}') == {"summary": "line one\nline two"}

    def test_trailing_comma_repaired(self):
        assert extract_json('result: {"a": 1, "b": [1, 2,],}') == {"a": 1, "b": [1, 2]}

    @pytest.mark.parametrize("text", ["", "   ", "no json here", "{broken"])
    def test_unrecoverable(self, text):
        with pytest.raises(MalformedResponseError):
            extract_json(text)

    def test_malformed_is_an_upstream_failure(self):
        with pytest.raises(UpstreamFailure):
            extract_json("nothing")


class TestHelpers:

    def test_escape_only_inside_strings(self):
        assert escape_control_characters('{\n"a": "x\ty"\n}') == '{\n"a": "x\\ty"\n}'

    def test_expect_object(self):
        assert expect_object({"a": 1}, "thing") == {"a": 1}
        with pytest.raises(MalformedResponseError, match="thing"):
            expect_object([1], "thing")
