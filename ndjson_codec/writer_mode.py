from enum import Enum


class WriterMode(Enum):
    """What happens to an existing file when NDJSON is written to its path."""

    # truncate
    WRITE = "w"
    APPEND = "a"
