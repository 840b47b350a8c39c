import io
import logging
import os
from pathlib import Path
from typing import IO, Any, Iterator, Optional, Union

from .exceptions import ConfigurationError, StreamError

logger = logging.getLogger(__name__)

# Anything LineStream.open() understands.
StreamSource = Union[str, "os.PathLike[str]", bytes, bytearray, IO[Any], "LineStream"]


class LineStream:
    """
    Forward-only cursor over the non-blank lines of a file, handle or buffer.

    Lines are yielded stripped of surrounding whitespace, so ``\\n`` and ``\\r\\n``
    terminators are both dropped. Handles opened by the stream are closed with it;
    handles passed in by the caller are left open.

    Examples:
        >>> with LineStream.open("data.ndjson") as stream:
        ...     while not stream.at_end():
        ...         print(stream.offset, stream.current())
        ...         stream.advance()
    """

    def __init__(
        self,
        handle: IO[Any],
        owns_handle: bool = False,
        encoding: str = "utf-8",
        name: Optional[str] = None,
    ) -> None:
        self._handle = handle
        self._owns_handle = owns_handle
        self.encoding = encoding
        self.name = name if name is not None else str(getattr(handle, "name", repr(handle)))
        self._line: Optional[str] = None
        self._loaded = False
        self.offset = 0

    @classmethod
    def open(
        cls,
        source: StreamSource,
        mode: str = "r",
        encoding: str = "utf-8",
    ) -> "LineStream":
        """
        Create a stream from a path, an open handle or an in-memory buffer.

        Args:
            source: Path, bytes buffer, open file object or existing LineStream
            mode: "r" to read, "w" to truncate or "a" to append (paths only)
            encoding: Text encoding of the lines (default: 'utf-8')

        Raises:
            ConfigurationError: If the path is empty or does not exist
            StreamError: If the file cannot be opened
        """
        if isinstance(source, LineStream):
            return source

        if isinstance(source, (bytes, bytearray)):
            return cls(io.BytesIO(bytes(source)), owns_handle=True, encoding=encoding, name="<bytes>")

        if isinstance(source, (str, os.PathLike)):
            filepath = cls.resolve_path(source, mode)
            try:
                handle = open(filepath, mode + "b")
            except OSError as e:
                raise StreamError(f"Failed to open file {filepath}: {e}") from e

            logger.debug(f"Opened {filepath} in mode {mode!r}")
            return cls(handle, owns_handle=True, encoding=encoding, name=str(filepath))

        if hasattr(source, "readline") or hasattr(source, "write"):
            return cls(source, owns_handle=False, encoding=encoding)

        raise ConfigurationError(
            f"Expected a path, a bytes buffer or a file object, got {type(source).__name__}"
        )

    @staticmethod
    def resolve_path(source: Union[str, "os.PathLike[str]"], mode: str = "r") -> Path:
        """
        Check a path before it is opened in ``mode``.

        Reading requires an existing file; writing creates the missing parent
        directories.

        Raises:
            ConfigurationError: If the path is empty, missing or not a file
        """
        if isinstance(source, str) and source.strip() == "":
            raise ConfigurationError("The path cannot be empty.")

        filepath = Path(source)
        if mode == "r":
            if not filepath.exists():
                raise ConfigurationError(f"File not found: {filepath}")
            if not filepath.is_file():
                raise ConfigurationError(f"Path is not a file: {filepath}")
        else:
            filepath.parent.mkdir(parents=True, exist_ok=True)

        return filepath

    @classmethod
    def from_string(cls, content: str, encoding: str = "utf-8") -> "LineStream":
        """Wrap an in-memory string."""
        return cls(
            io.BytesIO(content.encode(encoding)),
            owns_handle=True,
            encoding=encoding,
            name="<string>",
        )

    def __enter__(self) -> "LineStream":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def __del__(self) -> None:
        self.close()

    def __iter__(self) -> Iterator[str]:
        while not self.at_end():
            yield self.current()  # type: ignore[misc]
            self.advance()

    @property
    def closed(self) -> bool:
        return bool(getattr(self._handle, "closed", False))

    @property
    def seekable(self) -> bool:
        try:
            return bool(self._handle.seekable())
        except (AttributeError, OSError, ValueError):
            return False

    def close(self) -> None:
        """Close the handle if this stream opened it."""
        handle = getattr(self, "_handle", None)
        if handle is None or not getattr(self, "_owns_handle", False) or handle.closed:
            return

        handle.close()
        logger.debug(f"Closed {self.name}")

    def current(self) -> Optional[str]:
        """Return the current line without moving, or None at the end."""
        if not self._loaded:
            self._line = self._read_line()
            self._loaded = True

        return self._line

    def advance(self) -> None:
        """Move to the next non-blank line."""
        self.current()
        self._loaded = False
        self._line = None
        self.offset += 1

    def at_end(self) -> bool:
        return self.current() is None

    def rewind(self) -> None:
        """
        Go back to the first line.

        Raises:
            StreamError: If the underlying handle does not support seeking
        """
        if not self.seekable:
            raise StreamError("stream does not support seeking.")

        try:
            self._handle.seek(0)
        except (OSError, ValueError) as e:
            raise StreamError(f"Unable to rewind {self.name}: {e}") from e

        self.offset = 0
        self._loaded = False
        self._line = None

    def seek_to_line(self, line: int) -> None:
        """
        Rewind, then advance ``line`` times.

        Raises:
            StreamError: If ``line`` is negative or the stream is not seekable
        """
        if line < 0:
            raise StreamError(f"Can't seek stream to negative line {line}")

        self.rewind()
        while self.offset < line and not self.at_end():
            self.advance()

    def write(self, data: Union[str, bytes]) -> int:
        """Write ``data`` to the handle and return the count reported by it."""
        if self._is_text():
            if isinstance(data, bytes):
                data = data.decode(self.encoding)
        elif isinstance(data, str):
            data = data.encode(self.encoding)

        written = self._handle.write(data)
        return len(data) if written is None else written

    def flush(self) -> None:
        flush = getattr(self._handle, "flush", None)
        if flush is not None:
            flush()

    def _is_text(self) -> bool:
        if isinstance(self._handle, io.TextIOBase):
            return True

        # e.g. SpooledTemporaryFile(mode="w+"), which is not a TextIOBase
        mode = getattr(self._handle, "mode", None)
        return isinstance(mode, str) and "b" not in mode

    def _read_line(self) -> Optional[str]:
        while True:
            line = self._handle.readline()
            if not line:
                return None

            if isinstance(line, bytes):
                line = line.decode(self.encoding)

            line = line.strip()
            if line:
                return line
