"""
orjson options table and the JSON primitive used by the codec.

orjson has no nesting-depth argument, so :func:`dumps` and :func:`loads` enforce
the configured depth themselves. Containers (objects and arrays) count as one
level each; a scalar has depth 0.
"""

from enum import IntFlag
from typing import Any, Callable, Iterable, Optional, Union

import orjson

from .exceptions import ConfigurationError

DEFAULT_DEPTH = 512

SerializationDefault = Optional[Callable[[Any], Any]]


class JsonOption(IntFlag):
    """Named orjson serialization options."""

    NONE = 0
    APPEND_NEWLINE = orjson.OPT_APPEND_NEWLINE
    INDENT_2 = orjson.OPT_INDENT_2
    NAIVE_UTC = orjson.OPT_NAIVE_UTC
    NON_STR_KEYS = orjson.OPT_NON_STR_KEYS
    OMIT_MICROSECONDS = orjson.OPT_OMIT_MICROSECONDS
    PASSTHROUGH_DATACLASS = orjson.OPT_PASSTHROUGH_DATACLASS
    PASSTHROUGH_DATETIME = orjson.OPT_PASSTHROUGH_DATETIME
    PASSTHROUGH_SUBCLASS = orjson.OPT_PASSTHROUGH_SUBCLASS
    SERIALIZE_NUMPY = orjson.OPT_SERIALIZE_NUMPY
    SORT_KEYS = orjson.OPT_SORT_KEYS
    STRICT_INTEGER = orjson.OPT_STRICT_INTEGER
    UTC_Z = orjson.OPT_UTC_Z

    # Alias matching the usual name of the indentation option.
    PRETTY_PRINT = orjson.OPT_INDENT_2


# Options that would break the one-value-per-line layout.
MULTILINE_OPTIONS = int(JsonOption.INDENT_2 | JsonOption.APPEND_NEWLINE)


def combine(options: Iterable[Union[int, JsonOption]], start: int = 0) -> int:
    """OR a list of options onto ``start``."""
    result = start
    for option in options:
        result |= int(option)
    return result


# Every flag named in the table.
ALL_OPTIONS = combine(JsonOption.__members__.values())


def validate_option(option: int) -> None:
    """Raise ConfigurationError unless ``option`` only holds known orjson flags."""
    if isinstance(option, bool) or not isinstance(option, int) or option < 0:
        raise ConfigurationError(f"Invalid JSON option: {option!r}")

    unknown = int(option) & ~ALL_OPTIONS
    if unknown:
        raise ConfigurationError(f"Unknown JSON option flags: {unknown:#x}")

    try:
        orjson.dumps(None, option=int(option))
    except TypeError as e:
        raise ConfigurationError(f"The options are not valid orjson options: {e}") from e


def validate_depth(depth: int) -> None:
    if isinstance(depth, bool) or not isinstance(depth, int) or depth < 1:
        raise ConfigurationError("depth must be greater than 0")


def check_depth(value: Any, depth: int) -> None:
    """Raise ValueError when ``value`` nests containers deeper than ``depth``."""
    stack = [(value, 0)]
    while stack:
        current, level = stack.pop()
        if isinstance(current, dict):
            children: Iterable[Any] = current.values()
        elif isinstance(current, (list, tuple)):
            children = current
        else:
            continue

        level += 1
        if level > depth:
            raise ValueError(f"Maximum nesting depth of {depth} exceeded")
        stack.extend((child, level) for child in children)


def dumps(
    value: Any,
    option: int = 0,
    depth: int = DEFAULT_DEPTH,
    default: SerializationDefault = None,
) -> str:
    """
    Serialize one value to a single compact JSON line (without terminator).

    Raises:
        orjson.JSONEncodeError: If orjson cannot serialize the value
        ValueError: If the value is nested deeper than ``depth``
    """
    check_depth(value, depth)
    return orjson.dumps(value, default=default, option=int(option) & ~MULTILINE_OPTIONS).decode(
        "utf-8"
    )


def loads(text: Union[str, bytes], depth: int = DEFAULT_DEPTH) -> Any:
    """
    Deserialize one JSON document; objects always become dicts.

    Raises:
        orjson.JSONDecodeError: If the text is not valid JSON
        ValueError: If the document is nested deeper than ``depth``
    """
    value = orjson.loads(text)
    check_depth(value, depth)
    return value
