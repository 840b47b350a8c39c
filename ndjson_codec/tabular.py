"""
Header resolution and reshaping between object rows and positional rows.

Records travel through the pipeline as ``(offset, value)`` pairs. A header is
kept as a list of ``(position, name)`` pairs so that sparse headers such as
``{0: "Name", 2: "Score"}`` are handled like plain lists of names.
"""

import logging
from itertools import chain
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .exceptions import ConfigurationError, DecodingFailed, EncodingFailed
from .format import Format

logger = logging.getLogger(__name__)

Item = Tuple[Optional[int], Any]
Header = List[Tuple[int, Any]]
HeaderInput = Union[Sequence[str], Mapping[int, str]]
HeaderOrOffset = Optional[Union[HeaderInput, int]]
Formatter = Callable[[Any, Optional[int]], Any]
Mapper = Callable[[Any, Optional[int]], Any]


def split_header_or_offset(
    header_or_offset: HeaderOrOffset,
) -> Tuple[Optional[HeaderInput], Optional[int]]:
    """Tell an explicit header apart from a header offset."""
    if header_or_offset is None:
        return None, None
    if isinstance(header_or_offset, bool):
        raise ConfigurationError("The header offset must be an integer, got bool")
    if isinstance(header_or_offset, int):
        return None, header_or_offset
    if isinstance(header_or_offset, (str, bytes)):
        raise ConfigurationError("The header must be a list of names, not a string")

    return header_or_offset, None


def header_names(header: Header) -> List[Any]:
    return [name for _, name in header]


def is_positional(record: Any) -> bool:
    return isinstance(record, (list, tuple))


def to_positional(record: Any) -> List[Any]:
    """
    Return the values of ``record`` in order.

    Raises:
        ConfigurationError: If the record is neither an object nor iterable
    """
    if isinstance(record, Mapping):
        return list(record.values())
    if isinstance(record, (str, bytes)) or not isinstance(record, Iterable):
        raise ConfigurationError(
            f"Unable to convert record into an array; {type(record).__name__} given."
        )

    return list(record)


def _normalize_header(header: HeaderInput) -> Header:
    if isinstance(header, Mapping):
        names = list(header.values())
        positions = list(header.keys())
        if not all(isinstance(position, int) and not isinstance(position, bool) for position in positions):
            raise ConfigurationError("The header positions must be integers.")
    else:
        names = list(header)
        positions = list(range(len(names)))

    if not all(isinstance(name, str) for name in names):
        raise ConfigurationError("The header must contain string values only.")

    return list(zip(positions, names))


def _row_to_header(row: Any) -> Header:
    if is_positional(row):
        return list(enumerate(row))
    if isinstance(row, Mapping):
        return list(enumerate(row.keys()))

    return []


def extract_row(
    data: Union[Sequence[Any], Iterable[Item]], offset: int
) -> Tuple[Any, Union[Sequence[Any], Iterable[Item]]]:
    """
    Find the record at ``offset`` without losing any record of ``data``.

    A sequence of values is indexed directly. Pairs are pulled up to the
    requested offset and chained back in front of the rest.

    Returns:
        The record (None when there is none) and the data to use from now on
    """
    if isinstance(data, Sequence):
        return (data[offset] if offset < len(data) else None), data

    iterator = iter(data)
    consumed: List[Item] = []
    row = None
    for item in iterator:
        consumed.append(item)
        if item[0] == offset:
            row = item[1]
            break

    return row, chain(consumed, iterator)


def resolve_header(
    data: Union[Sequence[Any], Iterable[Item]],
    header: Optional[HeaderInput] = None,
    offset: Optional[int] = None,
) -> Tuple[Header, Union[Sequence[Any], Iterable[Item]]]:
    """
    Resolve the header from an explicit list, a row offset, or nothing.

    Args:
        data: Sequence of values or iterable of ``(offset, value)`` pairs
        header: Explicit header names; wins over ``offset``
        offset: Position of the record holding the header

    Returns:
        The header (empty when none applies) and the data to use from now on

    Raises:
        ConfigurationError: If the explicit header has non-string names or
            the offset is negative
    """
    if header:
        return _normalize_header(header), data

    if offset is None:
        return [], data

    if offset < 0:
        raise ConfigurationError(
            "Invalid header option, header offset must be an integer greater or equal to 0."
        )

    row, data = extract_row(data, offset)
    resolved = _row_to_header(row)
    logger.debug(f"Resolved header {header_names(resolved)} from offset {offset}")

    return resolved, data


def validate_header(header: Header) -> None:
    """
    Raises:
        ConfigurationError: If names are not unique scalars or a position is negative
    """
    names = header_names(header)
    if not all(isinstance(name, (str, int, float, bool)) for name in names):
        raise ConfigurationError("The header must only contain scalar values.")
    if len(set(names)) != len(names):
        raise ConfigurationError("The header must contain unique values.")
    if any(position < 0 for position, _ in header):
        raise ConfigurationError("The header positions should only contain positive integers or 0.")


def apply_formatter(items: Iterable[Item], formatter: Optional[Formatter]) -> Iterator[Item]:
    """Run ``formatter`` on every value, reporting failures as EncodingFailed."""
    for offset, value in items:
        if formatter is None:
            yield offset, value
            continue

        try:
            yield offset, formatter(value, offset)
        except EncodingFailed:
            raise
        except Exception as e:
            raise EncodingFailed(
                f"Unable to format data: {e}",
                value=value,
                offset=offset,
                original_error=e,
            ) from e


def apply_mapper(items: Iterable[Item], mapper: Optional[Mapper]) -> Iterator[Item]:
    """Run ``mapper`` on every record, reporting failures as DecodingFailed."""
    for offset, record in items:
        if mapper is None:
            yield offset, record
            continue

        try:
            yield offset, mapper(record, offset)
        except DecodingFailed:
            raise
        except Exception as e:
            raise DecodingFailed(
                f"Unable to map the record: {e}",
                value=record,
                offset=offset,
                original_error=e,
            ) from e


def prepare(
    items: Iterable[Item],
    format: Format = Format.RECORD,
    header: Optional[HeaderInput] = None,
    offset: Optional[int] = None,
    values: Optional[Sequence[Any]] = None,
) -> Iterable[Item]:
    """
    Shape already formatted records for encoding.

    Args:
        items: ``(offset, value)`` pairs, formatter already applied
        format: Target line shape
        header: Explicit header for ``Format.LIST_WITH_HEADER``
        offset: Offset of the record holding the header
        values: The raw input when it is a sequence and ``items`` merely
            enumerates it; lets the header row be read by index

    Raises:
        ConfigurationError: If ``Format.LIST_WITH_HEADER`` has no usable header
    """
    if format is Format.RECORD:
        return items

    if format is Format.LIST:
        return ((item_offset, to_positional(record)) for item_offset, record in items)

    if values is not None and not header and offset is not None:
        resolved, _ = resolve_header(values, None, offset)
    else:
        resolved, items = resolve_header(items, header, offset)  # type: ignore[assignment]

    if not resolved:
        raise ConfigurationError(
            "A non empty header must be provided when using the `Format.LIST_WITH_HEADER` format."
        )
    validate_header(resolved)

    return _prepend_header(header_names(resolved), items)


def _prepend_header(names: List[Any], items: Iterable[Item]) -> Iterator[Item]:
    yield None, names
    for item_offset, record in items:
        yield item_offset, to_positional(record)


def reshape(
    items: Iterable[Item],
    format: Format = Format.RECORD,
    header: Optional[HeaderInput] = None,
    offset: Optional[int] = None,
    mapper: Optional[Mapper] = None,
) -> Iterator[Item]:
    """
    Shape decoded records according to ``format`` and the resolved header.

    The header is resolved before this function returns, so configuration
    errors surface at call time while records are still produced lazily.

    With ``Format.LIST_WITH_HEADER`` and a header offset, the record at that
    offset is dropped only when it is a positional row; an object row at that
    offset is real data and is kept.

    Raises:
        ConfigurationError: If the header is missing or invalid
    """
    resolved, items = resolve_header(items, header, offset)  # type: ignore[assignment]
    if format is Format.LIST_WITH_HEADER and not resolved and offset is None:
        raise ConfigurationError(
            "A valid header or header offset must be provided with the `Format.LIST_WITH_HEADER` format."
        )

    skip_offset: Optional[int] = None
    if format is Format.LIST_WITH_HEADER and not header and offset is not None:
        skip_offset = offset

    if not resolved:
        records = _filter_header_row(items, skip_offset)
        if format is Format.LIST:
            records = _positional_records(records)
        return apply_mapper(records, mapper)

    validate_header(resolved)
    records = _combine_records(_filter_header_row(items, skip_offset), resolved, format)

    return apply_mapper(records, mapper)


def _filter_header_row(items: Iterable[Item], skip_offset: Optional[int]) -> Iterator[Item]:
    for item_offset, record in items:
        if skip_offset is not None and item_offset == skip_offset:
            if is_positional(record):
                continue
            logger.warning(
                f"Header offset {skip_offset} points to an object record; keeping it as data"
            )
        yield item_offset, record


def _positional_records(items: Iterable[Item]) -> Iterator[Item]:
    for item_offset, record in items:
        if not isinstance(record, (list, dict)):
            raise ConfigurationError(
                f"The record is expected to be an array or an object; {type(record).__name__} given."
            )
        yield item_offset, to_positional(record)


def _combine_records(items: Iterable[Item], header: Header, format: Format) -> Iterator[Item]:
    for item_offset, record in items:
        if not isinstance(record, (list, dict)):
            raise DecodingFailed(
                f"Unable to apply the header to a {type(record).__name__} record",
                value=record,
                offset=item_offset,
            )

        row = to_positional(record)
        combined: Dict[Any, Any] = {
            name: row[position] if position < len(row) else None for position, name in header
        }
        if format is Format.LIST:
            yield item_offset, list(combined.values())
        else:
            yield item_offset, combined
