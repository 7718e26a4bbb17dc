"""An iterator that can be restarted by remembering everything it produced."""

from __future__ import annotations

from collections import deque
from typing import Callable, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


class ReusableIterator(Generic[T]):
    """Wrap a one-shot iterable so it can be walked again from the start.

    Items come from the replay queue first and from the wrapped iterator
    once the queue is empty. Every item handed out is also appended to
    the memo buffer, which ``reset()`` turns back into the replay queue.
    The wrapped iterator is never asked for the same item twice.
    """

    def __init__(self, inner: Iterable[T]) -> None:
        self._inner: Iterator[T] = iter(inner)
        self._replay: deque[T] = deque()
        self._elements: list[T] = []

    def __iter__(self) -> ReusableIterator[T]:
        return self

    def __next__(self) -> T:
        if self._replay:
            item = self._replay.popleft()
        else:
            item = next(self._inner)
        self._elements.append(item)
        return item

    def reset(self) -> None:
        """Start over: replay every item seen so far, in original order."""
        self._elements.extend(self._replay)
        self._replay = deque(self._elements)
        self._elements = []

    def find(self, predicate: Callable[[T], bool]) -> T | None:
        """Advance to the next item satisfying *predicate*, or ``None``."""
        for item in self:
            if predicate(item):
                return item
        return None

    @property
    def seen(self) -> int:
        """Number of items pulled from the wrapped iterator so far."""
        return len(self._elements) + len(self._replay)
