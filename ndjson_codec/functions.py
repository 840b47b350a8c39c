from typing import Any, Iterable, Optional, Union

from .codec import Codec
from .json_options import DEFAULT_DEPTH
from .format import Format
from .writer_mode import WriterMode
from .records import Records
from .stream import StreamSource


def _header_offset(format: Format) -> Optional[int]:
    return 0 if format is Format.LIST_WITH_HEADER else None


# Convenience functions
def ndjson_encode(
    values: Iterable[Any],
    option: int = 0,
    depth: int = DEFAULT_DEPTH,
    format: Format = Format.RECORD,
) -> str:
    """
    Quick function to encode values into an NDJSON string.

    Args:
        values: Values to encode
        option: orjson option flags (default: 0)
        depth: Maximum nesting depth (default: 512)
        format: Line shape; Format.LIST_WITH_HEADER takes the header from the first record

    Returns:
        NDJSON text
    """
    return Codec(option=option, depth=depth).encode(values, format, _header_offset(format))


def ndjson_decode(
    ndjson: Union[str, bytes],
    option: int = 0,
    depth: int = DEFAULT_DEPTH,
    format: Format = Format.RECORD,
) -> Records:
    """
    Quick function to decode an NDJSON string.

    Args:
        ndjson: NDJSON text
        option: orjson option flags (default: 0)
        depth: Maximum nesting depth (default: 512)
        format: Line shape; Format.LIST_WITH_HEADER reads the header from line 0

    Returns:
        Lazy sequence of records
    """
    return Codec(option=option, depth=depth).decode(ndjson, format, _header_offset(format))


def ndjson_write(
    values: Iterable[Any],
    to: StreamSource,
    option: int = 0,
    depth: int = DEFAULT_DEPTH,
    format: Format = Format.RECORD,
    mode: WriterMode = WriterMode.WRITE,
) -> int:
    """
    Quick function to write values to an NDJSON file.

    Args:
        values: Values to encode
        to: Destination path or file object
        option: orjson option flags (default: 0)
        depth: Maximum nesting depth (default: 512)
        format: Line shape (default: Format.RECORD)
        mode: Truncate or append when ``to`` is a path (default: WriterMode.WRITE)

    Returns:
        Number of bytes written
    """
    return Codec(option=option, depth=depth).write(
        values, to, format, _header_offset(format), mode=mode
    )


def ndjson_read(
    source: StreamSource,
    option: int = 0,
    depth: int = DEFAULT_DEPTH,
    format: Format = Format.RECORD,
) -> Records:
    """
    Quick function to read records from an NDJSON file.

    Args:
        source: Path, bytes buffer or file object
        option: orjson option flags (default: 0)
        depth: Maximum nesting depth (default: 512)
        format: Line shape (default: Format.RECORD)

    Returns:
        Lazy sequence of records
    """
    return Codec(option=option, depth=depth).read(source, format, _header_offset(format))
