from enum import Enum


class Format(Enum):
    """Shape of the records on each NDJSON line."""

    RECORD = "record"
    LIST = "list"
    LIST_WITH_HEADER = "list_with_header"
