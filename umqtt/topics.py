"""Build a topic by joining parts with '/' one piece at a time."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

_NOTHING = object()


class TopicIterator:
    """Iterates over topic parts with '/' separators between them.

    ``TopicIterator(["hello", "world"])`` yields ``"hello"``, ``"/"``, ``"world"``.
    A single string is treated as one part.
    """

    def __init__(self, parts: str | Iterable[str]) -> None:
        if isinstance(parts, str):
            parts = (parts,)
        self._parts: Iterator[str] = iter(parts)
        self._peeked: object = _NOTHING
        self._first = True
        self._prev_was_separator = False

    def _has_next(self) -> bool:
        if self._peeked is _NOTHING:
            self._peeked = next(self._parts, _NOTHING)
        return self._peeked is not _NOTHING

    def _take(self) -> str:
        if not self._has_next():
            raise StopIteration
        part = self._peeked
        self._peeked = _NOTHING
        return part  # type: ignore[return-value]

    def __iter__(self) -> TopicIterator:
        return self

    def __next__(self) -> str:
        if self._first:
            self._first = False
            return self._take()
        if not self._prev_was_separator:
            if self._has_next():
                self._prev_was_separator = True
                return "/"
            raise StopIteration
        self._prev_was_separator = False
        return self._take()