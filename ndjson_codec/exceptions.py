"""Custom exceptions for the ndjson_codec library."""

from typing import Any, Optional, Union


class NDJSONError(Exception):
    """Base exception for all ndjson_codec errors."""

    pass


class ConfigurationError(NDJSONError):
    """Raised when invalid configuration is provided."""

    pass


class StreamError(NDJSONError):
    """Raised when the underlying stream cannot be opened, sought or written."""

    pass


class RecordError(NDJSONError):
    """Raised when a single record fails to go through the pipeline."""

    def __init__(
        self,
        message: str,
        value: Optional[Any] = None,
        offset: Optional[Union[int, str]] = None,
        original_error: Optional[BaseException] = None,
    ):
        """
        Initialize RecordError.

        Args:
            message: Error message
            value: The raw line or the value that failed (if known)
            offset: Zero-based offset of the record in the stream (if known)
            original_error: The original exception that caused this error
        """
        self.value = value
        self.offset = offset
        self.original_error = original_error

        if offset is not None:
            message = f"Offset {offset}: {message}"

        super().__init__(message)


class DecodingFailed(RecordError):
    """Raised when a line cannot be decoded or mapped."""

    pass


class EncodingFailed(RecordError):
    """Raised when a value cannot be formatted, encoded or written."""

    pass
