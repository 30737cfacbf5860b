"""Reusable search data structures."""

from __future__ import annotations

import heapq
import itertools
from collections import OrderedDict, deque
from typing import Generic, Hashable, Iterator, TypeVar

from backend.models.state import PuzzleState

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class PriorityQueue(Generic[T]):
    """Binary min-heap keyed by a numeric score.

    Equal scores pop in insertion order, so searches are reproducible.
    """

    def __init__(self) -> None:
        self._heap: list[tuple[float, int, T]] = []
        self._counter = itertools.count()

    def push(self, score: float, item: T) -> None:
        heapq.heappush(self._heap, (score, next(self._counter), item))

    def pop(self) -> T:
        return heapq.heappop(self._heap)[2]

    def peek_score(self) -> float:
        return self._heap[0][0]

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)


class FifoQueue(Generic[T]):
    def __init__(self) -> None:
        self._items: deque[T] = deque()

    def push(self, item: T) -> None:
        self._items.append(item)

    def pop(self) -> T:
        return self._items.popleft()

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)


class LRUCache(Generic[K, V]):
    """Fixed-capacity mapping that drops the least recently used entry."""

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("LRUCache capacity must be at least 1.")
        self.capacity = capacity
        self._data: OrderedDict[K, V] = OrderedDict()

    def get(self, key: K, default: V | None = None) -> V | None:
        if key not in self._data:
            return default
        self._data.move_to_end(key)
        return self._data[key]

    def set(self, key: K, value: V) -> None:
        if key in self._data:
            self._data.move_to_end(key)
        self._data[key] = value
        while len(self._data) > self.capacity:
            self._data.popitem(last=False)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


# -- symmetry -----------------------------------------------------------------


def _rotate90(tiles: tuple[int, ...], n: int) -> tuple[int, ...]:
    res = [0] * (n * n)
    for r in range(n):
        for c in range(n):
            res[c * n + n - 1 - r] = tiles[r * n + c]
    return tuple(res)


def _reflect(tiles: tuple[int, ...], n: int) -> tuple[int, ...]:
    res = [0] * (n * n)
    for r in range(n):
        for c in range(n):
            res[r * n + n - 1 - c] = tiles[r * n + c]
    return tuple(res)


def symmetries(tiles: tuple[int, ...], n: int) -> list[tuple[int, ...]]:
    """The 8 rotations/reflections of a tile grid (identity first)."""
    r90 = _rotate90(tiles, n)
    r180 = _rotate90(r90, n)
    r270 = _rotate90(r180, n)
    rotations = [tiles, r90, r180, r270]
    return rotations + [_reflect(t, n) for t in rotations]


class SymmetryTable:
    """Duplicate filter that treats a state and its 8 symmetric images alike.

    ``add`` stores all images of an expanded state; ``seen`` is then a
    single set lookup per candidate.
    """

    def __init__(self) -> None:
        self._keys: set[tuple[int, ...]] = set()

    def add(self, state: PuzzleState) -> None:
        self._keys.update(symmetries(state.key(), state.size))

    def seen(self, state: PuzzleState) -> bool:
        return state.key() in self._keys

    def clear(self) -> None:
        self._keys.clear()

    def __len__(self) -> int:
        return len(self._keys)
