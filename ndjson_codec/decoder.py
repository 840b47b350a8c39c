import logging
from typing import Any, Iterator, Tuple

from .exceptions import DecodingFailed
from .json_options import DEFAULT_DEPTH, loads, validate_depth, validate_option
from .stream import LineStream, StreamSource

logger = logging.getLogger(__name__)

DecodedItem = Tuple[int, Any]


class Decoder:
    """
    Turns NDJSON lines into ``(offset, value)`` pairs.

    Offsets count non-blank lines from zero. Parsing is lazy: a malformed line
    raises :class:`DecodingFailed` only when iteration reaches it.
    """

    def __init__(self, option: int = 0, depth: int = DEFAULT_DEPTH) -> None:
        """
        Initialize the decoder.

        Args:
            option: orjson option flags; validated but not used by orjson.loads
            depth: Maximum nesting depth of a decoded value (default: 512)

        Raises:
            ConfigurationError: If option or depth are invalid
        """
        validate_option(option)
        validate_depth(depth)

        self.option = option
        self.depth = depth

    def decode(self, source: StreamSource, rewind: bool = False) -> Iterator[DecodedItem]:
        """
        Open ``source`` and return a lazy iterator over its decoded lines.

        The source is opened immediately so that a missing path fails here and
        not on the first pull. A stream opened here is closed once the iterator
        is exhausted, fails or is discarded.

        Args:
            source: Path, bytes, file object or LineStream
            rewind: Seek back to the first line before reading

        Raises:
            ConfigurationError: If the path is empty or missing
            StreamError: If ``rewind`` is requested on a non-seekable source
        """
        stream = LineStream.open(source)
        if rewind:
            stream.rewind()

        return self._iter_stream(stream)

    def decode_string(self, content: str) -> Iterator[DecodedItem]:
        return self._iter_stream(LineStream.from_string(content))

    def decode_line(self, line: str, offset: int) -> Any:
        """
        Decode a single line.

        Raises:
            DecodingFailed: If the line is not valid JSON or nests too deeply
        """
        try:
            return loads(line, self.depth)
        except ValueError as e:
            raise DecodingFailed(
                f"Unable to decode the json line: {e}",
                value=line,
                offset=offset,
                original_error=e,
            ) from e

    def _iter_stream(self, stream: LineStream) -> Iterator[DecodedItem]:
        try:
            while True:
                offset = stream.offset
                try:
                    line = stream.current()
                except UnicodeDecodeError as e:
                    raise DecodingFailed(
                        f"Unable to read the line as {stream.encoding}: {e}",
                        offset=offset,
                        original_error=e,
                    ) from e

                if line is None:
                    break

                yield offset, self.decode_line(line, offset)
                stream.advance()
        finally:
            stream.close()
