"""Immutable puzzle state used by every search algorithm."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterable

EMPTY = 0
SUPPORTED_SIZES = (3, 4, 5)


class InvalidInput(ValueError):
    """The tile array is not a permutation of ``0..n²-1`` for a supported size."""


def validate_tiles(tiles: Iterable[int], size: int) -> tuple[int, ...]:
    """Return *tiles* as a tuple, or raise ``InvalidInput``."""
    if size not in SUPPORTED_SIZES:
        raise InvalidInput(
            f"Unsupported board size {size}; expected one of {SUPPORTED_SIZES}."
        )
    flat = tuple(tiles)
    if len(flat) != size * size:
        raise InvalidInput(
            f"Expected {size * size} tiles for a {size}×{size} board, "
            f"got {len(flat)}."
        )
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in flat):
        raise InvalidInput("Tiles must be integers.")
    counts = Counter(flat)
    if any(counts[v] != 1 for v in range(size * size)):
        missing = [v for v in range(size * size) if counts[v] == 0]
        repeated = sorted(v for v, n in counts.items() if n > 1)
        raise InvalidInput(
            f"Tiles must hold each of 0..{size * size - 1} exactly once "
            f"(missing={missing}, repeated={repeated})."
        )
    return flat


@lru_cache(maxsize=None)
def adjacency(size: int) -> tuple[tuple[int, ...], ...]:
    """Blank destinations per cell, ordered up, down, left, right."""
    adj: list[tuple[int, ...]] = []
    for i in range(size * size):
        r, c = divmod(i, size)
        nb: list[int] = []
        if r > 0:        nb.append(i - size)
        if r < size - 1: nb.append(i + size)
        if c > 0:        nb.append(i - 1)
        if c < size - 1: nb.append(i + 1)
        adj.append(tuple(nb))
    return tuple(adj)


@lru_cache(maxsize=None)
def goal_tiles(size: int) -> tuple[int, ...]:
    return tuple(range(1, size * size)) + (EMPTY,)


def count_inversions(tiles: Iterable[int]) -> int:
    arr = [v for v in tiles if v != EMPTY]
    inversions = 0
    for i in range(len(arr)):
        for j in range(i + 1, len(arr)):
            if arr[i] > arr[j]:
                inversions += 1
    return inversions


@dataclass(frozen=True)
class PuzzleState:
    """A board configuration; ``tiles`` is row-major with ``0`` as the blank.

    Equality and hashing look at the tile sequence only.  Every transition
    builds a new state, so states can be shared freely between searches.
    """

    tiles: tuple[int, ...]
    size: int = field(compare=False)
    empty: int = field(compare=False)

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_flat(cls, size: int, flat: Iterable[int]) -> PuzzleState:
        """Validate a flat row-major tile list and wrap it.

        Example::

            PuzzleState.from_flat(3, [1, 2, 3, 4, 5, 6, 7, 0, 8])
        """
        tiles = validate_tiles(flat, size)
        return cls(tiles=tiles, size=size, empty=tiles.index(EMPTY))

    @classmethod
    def solved(cls, size: int) -> PuzzleState:
        tiles = goal_tiles(size)
        return cls(tiles=tiles, size=size, empty=size * size - 1)

    # -- queries --------------------------------------------------------------

    def key(self) -> tuple[int, ...]:
        """Canonical identity token (the tile tuple itself)."""
        return self.tiles

    def is_solved(self) -> bool:
        return self.tiles == goal_tiles(self.size)

    def is_solvable(self) -> bool:
        """Return True if the goal state is reachable from this state."""
        inversions = count_inversions(self.tiles)
        if self.size % 2 == 1:
            return inversions % 2 == 0
        blank_row_from_bottom = self.size - 1 - self.empty // self.size
        return (inversions + blank_row_from_bottom) % 2 == 0

    def is_tile_correct(self, index: int) -> bool:
        return self.tiles[index] == goal_tiles(self.size)[index]

    def position_of(self, tile: int) -> int:
        return self.tiles.index(tile)

    def rows(self) -> list[list[int]]:
        n = self.size
        return [list(self.tiles[r * n : (r + 1) * n]) for r in range(n)]

    # -- transitions ----------------------------------------------------------

    def slide(self, index: int) -> PuzzleState:
        """Move the tile at *index* into the blank (no adjacency check)."""
        lst = list(self.tiles)
        lst[self.empty], lst[index] = lst[index], EMPTY
        return PuzzleState(tiles=tuple(lst), size=self.size, empty=index)

    def neighbors(
        self, locked: frozenset[int] = frozenset()
    ) -> list[tuple[PuzzleState, int]]:
        """Return ``(next_state, tile_moved)`` for every legal swap.

        Order is fixed (blank up, down, left, right).  Tiles sitting on a
        *locked* cell are never moved.
        """
        out: list[tuple[PuzzleState, int]] = []
        for j in adjacency(self.size)[self.empty]:
            if j in locked:
                continue
            out.append((self.slide(j), self.tiles[j]))
        return out

    def apply(self, tile: int) -> PuzzleState:
        """Slide *tile* into the blank.  Raises ``ValueError`` if illegal."""
        if tile == EMPTY or tile not in self.tiles:
            raise ValueError(f"Tile {tile} is not on the board.")
        index = self.tiles.index(tile)
        if index not in adjacency(self.size)[self.empty]:
            raise ValueError(f"Tile {tile} is not adjacent to the blank.")
        return self.slide(index)

    def apply_all(self, moves: Iterable[int]) -> PuzzleState:
        state = self
        for tile in moves:
            state = state.apply(tile)
        return state

    def can_apply(self, tile: int) -> bool:
        for j in adjacency(self.size)[self.empty]:
            if self.tiles[j] == tile:
                return True
        return False

    def __str__(self) -> str:
        width = len(str(self.size * self.size - 1))
        return "\n".join(
            " ".join(f"{v:>{width}}" if v else "·".rjust(width) for v in row)
            for row in self.rows()
        )
