"""
NDJSON Codec

A Python library for encoding and decoding NDJSON (Newline Delimited JSON) streams,
with lazy record iteration, per-record error reporting and tabular (header/row) framing.

Example usage:
    Encoding and decoding:
    >>> from ndjson_codec import ndjson_decode, ndjson_encode
    >>> text = ndjson_encode([{"id": 1, "name": "Alice"}])
    >>> list(ndjson_decode(text))
    [{'id': 1, 'name': 'Alice'}]

    Tabular data:
    >>> from ndjson_codec import Codec, Format
    >>> Codec().encode(rows, Format.LIST_WITH_HEADER, header_or_offset=0)

    Files:
    >>> from ndjson_codec import ndjson_read, ndjson_write
    >>> ndjson_write([{"id": 1}], "output.ndjson")
    >>> for record in ndjson_read("output.ndjson"):
    ...     print(record)
"""

from .codec import Codec
from .decoder import Decoder
from .encoder import Encoder, download_headers
from .exceptions import (
    ConfigurationError,
    DecodingFailed,
    EncodingFailed,
    NDJSONError,
    RecordError,
    StreamError,
)
from .functions import ndjson_decode, ndjson_encode, ndjson_read, ndjson_write
from .json_options import JsonOption
from .format import Format
from .writer_mode import WriterMode
from .records import Records
from .stream import LineStream

__version__ = "1.0.0"

__all__ = [
    # Main classes
    "Codec",
    "Decoder",
    "Encoder",
    "LineStream",
    "Records",
    # Convenience functions
    "ndjson_encode",
    "ndjson_decode",
    "ndjson_write",
    "ndjson_read",
    "download_headers",
    # Enums
    "Format",
    "JsonOption",
    "WriterMode",
    # Exceptions
    "NDJSONError",
    "ConfigurationError",
    "StreamError",
    "RecordError",
    "DecodingFailed",
    "EncodingFailed",
    # Metadata
    "__version__",
]
