import io
import logging
import os
import re
import sys
from typing import IO, Any, Callable, Iterable, Iterator, List, Optional, Tuple
from urllib.parse import quote

from filelock import FileLock
from tqdm import tqdm

from .exceptions import ConfigurationError, EncodingFailed
from .json_options import (
    DEFAULT_DEPTH,
    SerializationDefault,
    dumps,
    validate_depth,
    validate_option,
)
from .writer_mode import WriterMode
from .stream import LineStream, StreamSource

logger = logging.getLogger(__name__)

EncodedItem = Tuple[Optional[int], Any]
HeaderSender = Callable[[str, str], None]

# Marker written when there is nothing to encode, so "no records" differs from "{}".
EMPTY_OUTPUT = "[]"

CONTENT_TYPE = "application/x-ndjson; charset=utf-8"

_UNSAFE_FILENAME_CHARS = re.compile(r'[%"\x00-\x1f\x7f-\U0010ffff]')


class Encoder:
    """
    Turns values into chunks of NDJSON text.

    Examples:
        >>> encoder = Encoder(chunk_size=2)
        >>> list(encoder.convert([{"id": 1}, {"id": 2}, {"id": 3}]))
        ['{"id":1}\\n{"id":2}\\n', '{"id":3}\\n']

        >>> Encoder().write([{"id": 1}], "output.ndjson")
        9
    """

    def __init__(
        self,
        option: int = 0,
        depth: int = DEFAULT_DEPTH,
        chunk_size: int = 1,
        default: SerializationDefault = None,
    ) -> None:
        """
        Initialize the encoder.

        Args:
            option: orjson option flags (indentation and trailing newline are always ignored)
            depth: Maximum nesting depth of an encoded value (default: 512)
            chunk_size: Number of lines buffered per yielded chunk (default: 1)
            default: Optional callable passed to orjson.dumps() as the 'default' argument

        Raises:
            ConfigurationError: If option, depth or chunk_size are invalid
        """
        validate_option(option)
        validate_depth(depth)
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ConfigurationError("chunk_size must be positive")

        self.option = option
        self.depth = depth
        self.chunk_size = chunk_size
        self.default = default

    def convert(self, values: Iterable[Any]) -> Iterator[str]:
        """Encode ``values`` lazily, offsets counting from zero."""
        return self.convert_items(enumerate(values))

    def convert_items(self, items: Iterable[EncodedItem]) -> Iterator[str]:
        """
        Encode ``(offset, value)`` pairs lazily into chunks of ``chunk_size`` lines.

        Yields:
            Chunks of NDJSON text, or the single chunk ``"[]"`` for empty input

        Raises:
            EncodingFailed: When a value cannot be encoded; chunks already
                yielded are not retracted
        """
        buffer: List[str] = []
        has_data = False
        for offset, value in items:
            has_data = True
            try:
                buffer.append(dumps(value, self.option, self.depth, self.default))
            except (TypeError, ValueError) as e:
                raise EncodingFailed(
                    f"Unable to encode data: {e}",
                    value=value,
                    offset=offset,
                    original_error=e,
                ) from e

            buffer.append("\n")
            if len(buffer) == 2 * self.chunk_size:
                yield "".join(buffer)
                buffer = []

        if buffer:
            yield "".join(buffer)

        if not has_data:
            yield EMPTY_OUTPUT

    def write(
        self,
        values: Iterable[Any],
        to: StreamSource,
        mode: WriterMode = WriterMode.WRITE,
        use_file_lock: bool = False,
        show_progress: bool = False,
        progress_desc: str = "Writing chunks",
    ) -> int:
        """
        Encode ``values`` into a path, file object or LineStream.

        Args:
            values: Values to encode
            to: Destination path, file object or LineStream
            mode: Truncate or append when ``to`` is a path (default: WriterMode.WRITE)
            use_file_lock: Hold ``<path>.lock`` while writing to a path (default: False)
            show_progress: Show a progress bar over the written chunks (default: False)
            progress_desc: Description for progress bar

        Returns:
            Number of bytes (characters for text handles) written

        Raises:
            ConfigurationError: If mode is invalid or the destination cannot be used
            EncodingFailed: If a value cannot be encoded or the write fails
        """
        return self.write_items(
            enumerate(values), to, mode, use_file_lock, show_progress, progress_desc
        )

    def write_items(
        self,
        items: Iterable[EncodedItem],
        to: StreamSource,
        mode: WriterMode = WriterMode.WRITE,
        use_file_lock: bool = False,
        show_progress: bool = False,
        progress_desc: str = "Writing chunks",
    ) -> int:
        if not isinstance(mode, WriterMode):
            raise ConfigurationError(f"Invalid mode: {mode}. Must be one of {list(WriterMode)}")

        file_lock: Optional[FileLock] = None
        if use_file_lock and isinstance(to, (str, os.PathLike)):
            filepath = LineStream.resolve_path(to, mode.value)
            file_lock = FileLock(str(filepath) + ".lock")
            file_lock.acquire()

        try:
            with LineStream.open(to, mode=mode.value) as stream:
                return self._drain(items, stream, show_progress, progress_desc)
        finally:
            if file_lock is not None:
                file_lock.release()

    def encode(self, values: Iterable[Any]) -> str:
        """Encode ``values`` into a string."""
        return self.encode_items(enumerate(values))

    def encode_items(self, items: Iterable[EncodedItem]) -> str:
        buffer = io.BytesIO()
        self.write_items(items, buffer)
        return buffer.getvalue().decode("utf-8")

    def download(
        self,
        values: Iterable[Any],
        filename: Optional[str] = None,
        output: Optional[IO[bytes]] = None,
        send_header: Optional[HeaderSender] = None,
    ) -> int:
        """
        Send ``values`` as a downloadable NDJSON attachment.

        Args:
            values: Values to encode
            filename: Attachment name; no headers are sent when None
            output: Binary sink for headers and body (default: sys.stdout.buffer)
            send_header: Callable receiving ``(name, value)`` for each header;
                by default headers are written CGI-style to ``output``

        Returns:
            Number of body bytes written

        Raises:
            ConfigurationError: If filename contains a path separator
        """
        return self.download_items(enumerate(values), filename, output, send_header)

    def download_items(
        self,
        items: Iterable[EncodedItem],
        filename: Optional[str] = None,
        output: Optional[IO[bytes]] = None,
        send_header: Optional[HeaderSender] = None,
    ) -> int:
        headers = download_headers(filename)
        sink = output if output is not None else sys.stdout.buffer

        if headers:
            if send_header is None:
                for name, value in headers:
                    sink.write(f"{name}: {value}\r\n".encode("latin-1"))
                sink.write(b"\r\n")
            else:
                for name, value in headers:
                    send_header(name, value)

        return self.write_items(items, sink)

    def _drain(
        self,
        items: Iterable[EncodedItem],
        stream: LineStream,
        show_progress: bool,
        progress_desc: str,
    ) -> int:
        chunks: Iterable[str] = self.convert_items(items)
        if show_progress:
            chunks = tqdm(chunks, desc=progress_desc)

        written = 0
        offset = -1
        chunk: Optional[str] = None
        for offset, chunk in enumerate(chunks):
            written += _write_chunk(stream, chunk, offset)

        try:
            stream.flush()
        except Exception as e:
            raise EncodingFailed(
                f"Unable to write to the destination `{stream.name}`: {e}",
                value=chunk,
                offset=offset,
                original_error=e,
            ) from e

        logger.debug(f"Wrote {written} bytes to {stream.name}")
        return written


def _write_chunk(stream: LineStream, chunk: str, offset: int) -> int:
    try:
        return stream.write(chunk)
    except EncodingFailed:
        raise
    except Exception as e:
        raise EncodingFailed(
            f"Unable to write to the destination `{stream.name}`: {e}",
            value=chunk,
            offset=offset,
            original_error=e,
        ) from e


def download_headers(filename: Optional[str]) -> List[Tuple[str, str]]:
    """
    Build the HTTP headers announcing an NDJSON attachment.

    Non-ASCII, control, ``%`` and ``"`` characters are stripped from the plain
    ``filename`` and kept percent-encoded in ``filename*``.

    Raises:
        ConfigurationError: If filename contains "/" or "\\"
    """
    if filename is None:
        return []

    if "/" in filename or "\\" in filename:
        raise ConfigurationError(f'The filename `{filename}` cannot contain the "/" or "\\" characters.')

    fallback = "".join(char for char in filename if 0x20 <= ord(char) < 0x7F).replace("%", "")
    disposition = 'attachment;filename="' + fallback.replace('"', '\\"') + '"'
    if filename != fallback:
        encoded = _UNSAFE_FILENAME_CHARS.sub(
            lambda match: quote(match.group(0), safe="").lower(), filename
        )
        disposition += ";filename*=UTF-8''" + encoded

    return [
        ("content-type", CONTENT_TYPE),
        ("content-transfer-encoding", "binary"),
        ("content-description", "File Transfer"),
        ("content-disposition", disposition),
    ]
