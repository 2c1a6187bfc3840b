"""Tests for homevalet.llm.decoder"""

import pytest

from homevalet.llm.decoder import (
    LineBuffer,
    MalformedEventError,
    extract_data,
    is_done,
    parse_payload,
)


class TestLineBuffer:

    def test_keeps_partial_line(self):
        buffer = LineBuffer()
        assert buffer.feed(b'data: {"a"') == []
        assert buffer.pending == 'data: {"a"'
        assert buffer.feed(b': 1}\ndata: [') == ['data: {"a": 1}']
        assert buffer.pending == "data: ["

    def test_multiple_lines_in_one_chunk(self):
        buffer = LineBuffer()
        assert buffer.feed(b"data: 1\n\ndata: 2\n") == ["data: 1", "", "data: 2"]
        assert buffer.pending == ""

    def test_strips_carriage_returns(self):
        buffer = LineBuffer()
        assert buffer.feed(b"data: 1\r\ndata: 2\r") == ["data: 1"]
        assert buffer.flush() == ["data: 2"]

    def test_multibyte_character_split_across_chunks(self):
        encoded = "data: café ☕\n".encode("utf-8")
        split = encoded.index(b"\xc3") + 1  # inside "é"

        buffer = LineBuffer()
        assert buffer.feed(encoded[:split]) == []
        assert buffer.feed(encoded[split:]) == ["data: café ☕"]

    def test_every_byte_separately(self):
        encoded = "data: ☕ ok\n".encode("utf-8")
        buffer = LineBuffer()
        lines = []
        for i in range(len(encoded)):
            lines.extend(buffer.feed(encoded[i:i + 1]))
        assert lines == ["data: ☕ ok"]

    def test_flush_returns_tail_once(self):
        buffer = LineBuffer()
        buffer.feed(b"data: [DONE]")
        assert buffer.flush() == ["data: [DONE]"]
        assert buffer.flush() == []


class TestExtractData:

    def test_data_line(self):
        assert extract_data('data: {"x": 1}') == '{"x": 1}'

    @pytest.mark.parametrize("line", ["", ": keep-alive", "event: ping", "id: 7", "data:{}"])
    def test_other_lines_ignored(self, line):
        assert extract_data(line) is None

    def test_done(self):
        assert is_done("[DONE]")
        assert is_done(" [DONE] ")
        assert not is_done('{"done": true}')


class TestParsePayload:

    def test_object(self):
        assert parse_payload('{"choices": []}') == {"choices": []}

    def test_invalid_json(self):
        with pytest.raises(MalformedEventError, match="Invalid JSON"):
            parse_payload('{"choices": [')

    def test_not_an_object(self):
        with pytest.raises(MalformedEventError, match="not an object"):
            parse_payload("[1, 2]")

    def test_is_a_value_error(self):
        assert issubclass(MalformedEventError, ValueError)
