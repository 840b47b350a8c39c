from typing import Any, Callable, Iterator, Optional, Tuple

Item = Tuple[Optional[int], Any]


class Records:
    """
    Lazy sequence of decoded records.

    The first pipeline is built when the object is created, so configuration
    errors (missing file, bad header) surface immediately. Iterating again
    builds a new pipeline: strings and paths are simply read again, while a
    caller supplied handle is rewound, which fails with StreamError when the
    handle is not seekable.

    Examples:
        >>> records = Codec().decode('{"id": 1}\\n{"id": 2}\\n')
        >>> list(records)
        [{'id': 1}, {'id': 2}]
        >>> list(records.items())
        [(0, {'id': 1}), (1, {'id': 2})]
    """

    def __init__(self, build: Callable[[bool], Iterator[Item]]) -> None:
        self._build = build
        self._pending: Optional[Iterator[Item]] = build(False)

    def items(self) -> Iterator[Item]:
        """Return an iterator over ``(offset, record)`` pairs."""
        pending, self._pending = self._pending, None
        if pending is None:
            pending = self._build(True)

        return pending

    def __iter__(self) -> Iterator[Any]:
        return (record for _, record in self.items())
