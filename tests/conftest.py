"""Shared test fixtures and configuration."""

import io
import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List

import pytest


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def sample_data() -> List[Dict[str, Any]]:
    """Sample JSON records for testing."""
    return [
        {"id": 1, "name": "Alice", "age": 30, "city": "New York"},
        {"id": 2, "name": "Bob", "age": 25, "city": "San Francisco"},
        {"id": 3, "name": "Charlie", "age": 35, "city": "Chicago"},
        {"id": 4, "name": "Diana", "age": 28, "city": "Boston"},
        {"id": 5, "name": "Eve", "age": 32, "city": "Seattle"},
    ]


@pytest.fixture
def score_rows() -> List[Dict[str, Any]]:
    """Two object rows sharing the same keys."""
    return [
        {"Name": "Alice", "Score": 42},
        {"Name": "Bob", "Score": 27},
    ]


@pytest.fixture
def create_ndjson_file(temp_dir, sample_data):
    """Create a test NDJSON file."""

    def _create_file(data: List[Any] = None, filename: str = "test.ndjson") -> Path:
        if data is None:
            data = sample_data

        filepath = temp_dir / filename
        with open(filepath, "w") as f:
            for record in data:
                f.write(json.dumps(record) + "\n")
        return filepath

    return _create_file


@pytest.fixture
def create_invalid_ndjson_file(temp_dir):
    """Create an NDJSON file with an invalid JSON line at offset 1."""

    def _create_file(filename: str = "invalid.ndjson") -> Path:
        filepath = temp_dir / filename
        with open(filepath, "w") as f:
            f.write('{"valid": "json"}\n')
            f.write("invalid json line\n")
            f.write('{"another": "valid"}\n')
        return filepath

    return _create_file


@pytest.fixture
def create_empty_file(temp_dir):
    """Create an empty file."""

    def _create_file(filename: str = "empty.ndjson") -> Path:
        filepath = temp_dir / filename
        filepath.touch()
        return filepath

    return _create_file


class NonSeekableBytesIO(io.BytesIO):
    """In-memory handle that refuses to seek, like a pipe or a socket."""

    def seekable(self) -> bool:
        return False


class FailingSink(io.BytesIO):
    """Binary sink whose writes always fail."""

    def __init__(self, error: Exception = None):
        super().__init__()
        self.error = error if error is not None else OSError("No space left on device")

    def write(self, data) -> int:
        raise self.error


@pytest.fixture
def non_seekable_handle():
    """Create a non-seekable handle over some bytes."""

    def _create_handle(content: bytes) -> NonSeekableBytesIO:
        return NonSeekableBytesIO(content)

    return _create_handle


@pytest.fixture
def failing_sink():
    """Sink that raises OSError on every write."""
    return FailingSink()


@pytest.fixture
def create_failing_sink():
    """Create a sink that raises the given exception on every write."""

    def _create_sink(error: Exception) -> FailingSink:
        return FailingSink(error)

    return _create_sink


def global_failing_hook(value: Any, offset: Any) -> Any:
    """Hook that always fails."""
    raise ValueError("Hook intentionally failed")


@pytest.fixture
def failing_hook():
    """Formatter/mapper that always fails for error testing."""
    return global_failing_hook
