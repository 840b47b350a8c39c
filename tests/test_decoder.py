"""Tests for Decoder."""

import io

import pytest

from ndjson_codec import ConfigurationError, Decoder, DecodingFailed, NDJSONError


class TestDecoder:
    """Test suite for Decoder."""

    def test_init_default_values(self):
        """Test decoder initialization with default values."""
        decoder = Decoder()

        assert decoder.option == 0
        assert decoder.depth == 512

    def test_init_invalid_depth(self):
        """Test decoder initialization with invalid depth."""
        with pytest.raises(ConfigurationError, match="depth must be greater than 0"):
            Decoder(depth=0)

    def test_init_invalid_option(self):
        """Test decoder initialization with options orjson does not know."""
        with pytest.raises(ConfigurationError, match="Unknown JSON option flags"):
            Decoder(option=1 << 30)

        with pytest.raises(ConfigurationError):
            Decoder(option=-1)

    def test_decode_file(self, create_ndjson_file, sample_data):
        """Test decoding a file into offset/value pairs."""
        items = list(Decoder().decode(create_ndjson_file()))

        assert [offset for offset, _ in items] == [0, 1, 2, 3, 4]
        assert [value for _, value in items] == sample_data

    def test_decode_string(self):
        """Test decoding an in-memory string."""
        items = list(Decoder().decode_string('{"a": 1}\n\n[1, 2]\n"text"\n'))

        assert items == [(0, {"a": 1}), (1, [1, 2]), (2, "text")]

    def test_decode_empty_file(self, create_empty_file):
        """Test that empty input yields nothing."""
        assert list(Decoder().decode(create_empty_file())) == []

    def test_decode_missing_file(self, temp_dir):
        """Test that a missing file fails before iteration starts."""
        with pytest.raises(ConfigurationError, match="File not found"):
            Decoder().decode(temp_dir / "missing.ndjson")

    def test_malformed_line_reports_offset_and_value(self):
        """Test that the failing line is attributed with its offset and raw text."""
        iterator = Decoder().decode_string('{"a":1}\nBROKEN\n')

        assert next(iterator) == (0, {"a": 1})

        with pytest.raises(DecodingFailed, match="Offset 1") as exc_info:
            next(iterator)

        assert exc_info.value.offset == 1
        assert exc_info.value.value == "BROKEN"
        assert isinstance(exc_info.value.original_error, ValueError)
        assert isinstance(exc_info.value, NDJSONError)

    def test_failure_is_lazy(self, create_invalid_ndjson_file):
        """Test that records before a malformed line are still produced."""
        records = []
        with pytest.raises(DecodingFailed):
            for _, record in Decoder().decode(create_invalid_ndjson_file()):
                records.append(record)

        assert records == [{"valid": "json"}]

    def test_depth_limit(self):
        """Test the nesting depth limit."""
        decoder = Decoder(depth=1)

        assert list(decoder.decode_string("[1, 2]\n")) == [(0, [1, 2])]

        with pytest.raises(DecodingFailed, match="Maximum nesting depth"):
            list(decoder.decode_string("[[1]]\n"))

    def test_invalid_utf8(self):
        """Test that undecodable bytes are reported as a decoding failure."""
        with pytest.raises(DecodingFailed, match="Offset 1"):
            list(Decoder().decode(b'{"a": 1}\n\xff\xfe\n'))

    def test_caller_handle_is_left_open(self):
        """Test that decoding a caller handle does not close it."""
        handle = io.BytesIO(b'{"a": 1}\n')

        assert list(Decoder().decode(handle)) == [(0, {"a": 1})]
        assert not handle.closed

    def test_decode_line(self):
        """Test decoding a single line."""
        assert Decoder().decode_line('{"x": [1, 2]}', 0) == {"x": [1, 2]}

        with pytest.raises(DecodingFailed, match="Offset 7"):
            Decoder().decode_line("{", 7)
