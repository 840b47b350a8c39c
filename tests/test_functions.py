"""Tests for convenience functions."""

import io

import pytest

from ndjson_codec import (
    ConfigurationError,
    Format,
    JsonOption,
    Records,
    WriterMode,
    ndjson_decode,
    ndjson_encode,
    ndjson_read,
    ndjson_write,
)


class TestConvenienceFunctions:
    """Test suite for convenience functions."""

    def test_ndjson_encode_basic(self, score_rows):
        """Test basic ndjson_encode function."""
        assert ndjson_encode(score_rows) == (
            '{"Name":"Alice","Score":42}\n{"Name":"Bob","Score":27}\n'
        )

    def test_ndjson_encode_with_options(self):
        """Test ndjson_encode with orjson options."""
        assert ndjson_encode([{"b": 1, "a": 2}], option=JsonOption.SORT_KEYS) == '{"a":2,"b":1}\n'

    def test_ndjson_encode_list_with_header(self, score_rows):
        """Test that the header is taken from the first record."""
        text = ndjson_encode(score_rows, format=Format.LIST_WITH_HEADER)

        assert text == '["Name","Score"]\n["Alice",42]\n["Bob",27]\n'

    def test_ndjson_encode_invalid_depth(self, score_rows):
        """Test ndjson_encode with an invalid depth."""
        with pytest.raises(ConfigurationError, match="depth must be greater than 0"):
            ndjson_encode(score_rows, depth=0)

    def test_ndjson_decode_basic(self, score_rows):
        """Test basic ndjson_decode function."""
        records = ndjson_decode('{"Name":"Alice","Score":42}\n{"Name":"Bob","Score":27}\n')

        assert isinstance(records, Records)
        assert list(records) == score_rows

    def test_ndjson_decode_list_with_header(self, score_rows):
        """Test that the header is read from the first line."""
        records = ndjson_decode(
            '["Name","Score"]\n["Alice",42]\n["Bob",27]\n', format=Format.LIST_WITH_HEADER
        )

        assert list(records) == score_rows

    def test_ndjson_write_and_read(self, temp_dir, sample_data):
        """Test writing then reading a file."""
        filepath = temp_dir / "data.ndjson"

        written = ndjson_write(sample_data, filepath)

        assert written == filepath.stat().st_size
        assert list(ndjson_read(filepath)) == sample_data

    def test_ndjson_write_append(self, temp_dir):
        """Test ndjson_write in append mode."""
        filepath = temp_dir / "data.ndjson"
        ndjson_write([{"id": 1}], filepath)

        ndjson_write([{"id": 2}], filepath, mode=WriterMode.APPEND)

        assert list(ndjson_read(filepath)) == [{"id": 1}, {"id": 2}]

    def test_ndjson_write_list_with_header(self, temp_dir, score_rows):
        """Test tabular output through the convenience functions."""
        filepath = temp_dir / "scores.ndjson"

        ndjson_write(score_rows, filepath, format=Format.LIST_WITH_HEADER)

        assert filepath.read_text().splitlines()[0] == '["Name","Score"]'
        assert list(ndjson_read(filepath, format=Format.LIST_WITH_HEADER)) == score_rows

    def test_ndjson_read_handle(self):
        """Test reading from an open handle."""
        handle = io.BytesIO(b'[1, 2]\n[3, 4]\n')

        assert list(ndjson_read(handle, format=Format.LIST)) == [[1, 2], [3, 4]]

    def test_ndjson_read_missing_file(self, temp_dir):
        """Test ndjson_read with a missing file."""
        with pytest.raises(ConfigurationError, match="File not found"):
            ndjson_read(temp_dir / "missing.ndjson")
