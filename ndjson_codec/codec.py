import logging
from typing import IO, Any, Iterable, Iterator, Optional, Sequence, Tuple, Union

from .decoder import Decoder
from .encoder import Encoder, HeaderSender
from .exceptions import ConfigurationError
from .json_options import (
    DEFAULT_DEPTH,
    JsonOption,
    SerializationDefault,
    combine,
    validate_depth,
    validate_option,
)
from .format import Format
from .writer_mode import WriterMode
from .records import Records
from .stream import StreamSource
from .tabular import (
    Formatter,
    HeaderOrOffset,
    Item,
    Mapper,
    apply_formatter,
    prepare,
    reshape,
    split_header_or_offset,
)

logger = logging.getLogger(__name__)

_UNSET: Any = object()


class Codec:
    """
    Immutable NDJSON encoding and decoding configuration.

    Every ``with_*`` method returns a new Codec, or the same instance when the
    value does not change, so a Codec can be shared freely.

    Examples:
        Encoding and decoding records:
        >>> codec = Codec()
        >>> text = codec.encode([{"Name": "Alice", "Score": 42}])
        >>> list(codec.decode(text))
        [{'Name': 'Alice', 'Score': 42}]

        Tabular output with the header taken from the first record:
        >>> codec.encode(rows, format=Format.LIST_WITH_HEADER, header_or_offset=0)
        '["Name","Score"]\\n["Alice",42]\\n'

        Builder chain with hooks:
        >>> codec = (
        ...     Codec()
        ...     .with_options(JsonOption.SORT_KEYS)
        ...     .with_chunk_size(100)
        ...     .with_mapper(lambda record, offset: record["id"])
        ... )
    """

    __slots__ = ("_mapper", "_formatter", "_chunk_size", "_option", "_depth", "_default")

    def __init__(
        self,
        mapper: Optional[Mapper] = None,
        formatter: Optional[Formatter] = None,
        chunk_size: int = 1,
        option: int = 0,
        depth: int = DEFAULT_DEPTH,
        default: SerializationDefault = None,
    ) -> None:
        """
        Initialize the codec.

        Args:
            mapper: Optional ``(record, offset)`` callable applied after decoding
            formatter: Optional ``(value, offset)`` callable applied before encoding
            chunk_size: Number of lines per encoded chunk (default: 1)
            option: orjson option flags, see JsonOption (indentation is always ignored)
            depth: Maximum nesting depth of encoded and decoded values (default: 512)
            default: Optional callable passed to orjson.dumps() as the 'default' argument

        Raises:
            ConfigurationError: If option, depth or chunk_size are invalid, or a
                hook is not callable
        """
        validate_option(option)
        validate_depth(depth)
        if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size < 1:
            raise ConfigurationError("chunk_size must be positive")
        for name, hook in (("mapper", mapper), ("formatter", formatter), ("default", default)):
            if hook is not None and not callable(hook):
                raise ConfigurationError(f"{name} must be callable")

        self._mapper = mapper
        self._formatter = formatter
        self._chunk_size = chunk_size
        self._option = int(option)
        self._depth = depth
        self._default = default

    @property
    def mapper(self) -> Optional[Mapper]:
        return self._mapper

    @property
    def formatter(self) -> Optional[Formatter]:
        return self._formatter

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def option(self) -> int:
        return self._option

    @property
    def depth(self) -> int:
        return self._depth

    @property
    def default(self) -> SerializationDefault:
        return self._default

    def _key(self) -> Tuple[Any, ...]:
        return (
            self._mapper,
            self._formatter,
            self._chunk_size,
            self._option,
            self._depth,
            self._default,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Codec):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        return (
            f"Codec(chunk_size={self._chunk_size}, option={JsonOption(self._option)!r}, "
            f"depth={self._depth}, mapper={self._mapper!r}, formatter={self._formatter!r})"
        )

    def _replace(
        self,
        mapper: Any = _UNSET,
        formatter: Any = _UNSET,
        chunk_size: Any = _UNSET,
        option: Any = _UNSET,
        depth: Any = _UNSET,
        default: Any = _UNSET,
    ) -> "Codec":
        return Codec(
            mapper=self._mapper if mapper is _UNSET else mapper,
            formatter=self._formatter if formatter is _UNSET else formatter,
            chunk_size=self._chunk_size if chunk_size is _UNSET else chunk_size,
            option=self._option if option is _UNSET else option,
            depth=self._depth if depth is _UNSET else depth,
            default=self._default if default is _UNSET else default,
        )

    # Builders

    def with_mapper(self, mapper: Optional[Mapper]) -> "Codec":
        """Set the callable applied to every decoded record."""
        if mapper is self._mapper:
            return self
        return self._replace(mapper=mapper)

    def with_formatter(self, formatter: Optional[Formatter]) -> "Codec":
        """Set the callable applied to every value before encoding."""
        if formatter is self._formatter:
            return self
        return self._replace(formatter=formatter)

    def with_chunk_size(self, chunk_size: int) -> "Codec":
        if chunk_size == self._chunk_size:
            return self
        return self._replace(chunk_size=chunk_size)

    def with_depth(self, depth: int) -> "Codec":
        if depth == self._depth:
            return self
        return self._replace(depth=depth)

    def with_default(self, default: SerializationDefault) -> "Codec":
        if default is self._default:
            return self
        return self._replace(default=default)

    def with_options(self, *options: Union[int, JsonOption]) -> "Codec":
        """Add orjson options."""
        return self._with_option(combine(options, self._option))

    def without_options(self, *options: Union[int, JsonOption]) -> "Codec":
        """Remove orjson options."""
        return self._with_option(self._option & ~combine(options))

    def uses_options(self, *options: Union[int, JsonOption]) -> bool:
        """Tell whether every given option is set; False when none is given."""
        if not options:
            return False
        return all(self._option & int(option) == int(option) for option in options)

    def _with_option(self, option: int) -> "Codec":
        if option == self._option:
            return self
        return self._replace(option=option)

    # Encoding

    def encode(
        self,
        values: Iterable[Any],
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
    ) -> str:
        """
        Encode ``values`` into an NDJSON string.

        Args:
            values: Values to encode; each must be serializable by orjson
            format: Line shape (default: Format.RECORD)
            header_or_offset: Header names, or the offset of the record to take them from

        Returns:
            The NDJSON text, or ``"[]"`` when ``values`` is empty

        Raises:
            ConfigurationError: If the format cannot be applied
            EncodingFailed: If a value cannot be formatted or encoded
        """
        return self._encoder().encode_items(self._prepare(values, format, header_or_offset))

    def chunk(
        self,
        values: Iterable[Any],
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
    ) -> Iterator[str]:
        """Encode ``values`` lazily into chunks of ``chunk_size`` lines."""
        return self._encoder().convert_items(self._prepare(values, format, header_or_offset))

    def write(
        self,
        values: Iterable[Any],
        to: StreamSource,
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
        mode: WriterMode = WriterMode.WRITE,
        use_file_lock: bool = False,
        show_progress: bool = False,
    ) -> int:
        """
        Encode ``values`` into a path or file object.

        Args:
            values: Values to encode
            to: Destination path, file object or LineStream
            format: Line shape (default: Format.RECORD)
            header_or_offset: Header names, or the offset of the record to take them from
            mode: Truncate or append when ``to`` is a path (default: WriterMode.WRITE)
            use_file_lock: Hold ``<path>.lock`` while writing (default: False)
            show_progress: Show a progress bar over the written chunks (default: False)

        Returns:
            Number of bytes written
        """
        return self._encoder().write_items(
            self._prepare(values, format, header_or_offset),
            to,
            mode=mode,
            use_file_lock=use_file_lock,
            show_progress=show_progress,
        )

    def download(
        self,
        values: Iterable[Any],
        filename: Optional[str] = None,
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
        output: Optional[IO[bytes]] = None,
        send_header: Optional[HeaderSender] = None,
    ) -> int:
        """
        Send ``values`` as a downloadable NDJSON attachment.

        Headers go through ``send_header`` when given, otherwise they are written
        CGI-style to ``output`` (standard output by default) before the body.
        """
        return self._encoder().download_items(
            self._prepare(values, format, header_or_offset),
            filename,
            output=output,
            send_header=send_header,
        )

    # Decoding

    def decode(
        self,
        ndjson: Union[str, bytes],
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
    ) -> Records:
        """
        Decode an NDJSON string.

        Args:
            ndjson: NDJSON text
            format: Line shape (default: Format.RECORD)
            header_or_offset: Header names, or the offset of the header record

        Returns:
            Records, which may be iterated more than once

        Raises:
            ConfigurationError: If the header cannot be resolved or is invalid
            DecodingFailed: Lazily, for a malformed line or a failing mapper
        """
        if isinstance(ndjson, (bytes, bytearray)):
            return self.read(bytes(ndjson), format, header_or_offset)

        content = str(ndjson)
        decoder = self._decoder()
        header, offset = self._split(format, header_or_offset)

        def build(restart: bool) -> Iterator[Item]:
            return reshape(decoder.decode_string(content), format, header, offset, self._mapper)

        return Records(build)

    def read(
        self,
        source: StreamSource,
        format: Format = Format.RECORD,
        header_or_offset: HeaderOrOffset = None,
    ) -> Records:
        """
        Decode NDJSON from a path, bytes buffer or file object.

        Raises:
            ConfigurationError: If the path is missing or the header is invalid
            DecodingFailed: Lazily, for a malformed line or a failing mapper
        """
        decoder = self._decoder()
        header, offset = self._split(format, header_or_offset)

        def build(restart: bool) -> Iterator[Item]:
            return reshape(decoder.decode(source, rewind=restart), format, header, offset, self._mapper)

        return Records(build)

    def _encoder(self) -> Encoder:
        return Encoder(self._option, self._depth, self._chunk_size, self._default)

    def _decoder(self) -> Decoder:
        return Decoder(self._option, self._depth)

    @staticmethod
    def _split(format: Format, header_or_offset: HeaderOrOffset) -> Tuple[Any, Optional[int]]:
        if not isinstance(format, Format):
            raise ConfigurationError(f"Invalid format: {format}. Must be one of {list(Format)}")
        return split_header_or_offset(header_or_offset)

    def _prepare(
        self,
        values: Iterable[Any],
        format: Format,
        header_or_offset: HeaderOrOffset,
    ) -> Iterable[Item]:
        header, offset = self._split(format, header_or_offset)
        if isinstance(values, (str, bytes)) or not isinstance(values, Iterable):
            raise ConfigurationError(f"Expected an iterable of values, got {type(values).__name__}")

        sequence: Optional[Sequence[Any]] = None
        if self._formatter is None and isinstance(values, Sequence):
            sequence = values

        items = apply_formatter(enumerate(values), self._formatter)
        return prepare(items, format, header, offset, values=sequence)
