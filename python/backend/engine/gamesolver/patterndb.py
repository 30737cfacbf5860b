"""Pattern databases: exact sub-goal distances used as stage heuristics.

A table covers one stage of one board size: the tiles being placed and the
cells already locked.  Its key is the positions of those tiles followed by
the blank position; every other tile is treated as indistinguishable, so
the abstract moves are exactly the real moves projected onto the pattern.
Tables come from one backward breadth-first search seeded with every
abstract goal configuration (pattern tiles home, blank anywhere free).
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Iterable

from backend.engine.gamesolver.heuristics import Heuristic, pattern_manhattan
from backend.engine.gamesolver.primitives import FifoQueue
from backend.models.state import PuzzleState, adjacency

if TYPE_CHECKING:
    from backend.engine.gamesolver.stages import Stage

logger = logging.getLogger(__name__)

PatternKey = tuple[int, ...]


class PatternDatabase:
    """Lazily built stage tables for one board size.

    Attributes:
        size: Board side length
        max_depth: Stop the backward search at this depth (None = exhaustive)
    """

    def __init__(self, size: int, max_depth: int | None = None) -> None:
        self.size = size
        self.max_depth = max_depth
        self._tables: dict[tuple[tuple[int, ...], frozenset[int]], dict[PatternKey, int]] = {}
        self._lock = threading.Lock()

    # -- tables ---------------------------------------------------------------

    def table(self, tiles: Iterable[int], locked: frozenset[int]) -> dict[PatternKey, int]:
        """Return (building on first use) the table for a tile group."""
        key = (tuple(tiles), frozenset(locked))
        with self._lock:
            if key not in self._tables:
                self._tables[key] = self._build(key[0], key[1])
            return self._tables[key]

    def _build(self, tiles: tuple[int, ...], locked: frozenset[int]) -> dict[PatternKey, int]:
        n = self.size
        adj = adjacency(n)
        homes = tuple(t - 1 for t in tiles)
        table: dict[PatternKey, int] = {}
        frontier: FifoQueue[PatternKey] = FifoQueue()

        for blank in range(n * n):
            if blank in locked or blank in homes:
                continue
            key = homes + (blank,)
            table[key] = 0
            frontier.push(key)

        while frontier:
            key = frontier.pop()
            depth = table[key]
            if self.max_depth is not None and depth >= self.max_depth:
                continue
            blank = key[-1]
            for j in adj[blank]:
                if j in locked:
                    continue
                # The blank steps onto j; a pattern tile sitting there moves
                # back into the old blank cell.
                nxt = tuple(blank if pos == j else pos for pos in key[:-1]) + (j,)
                if nxt in table:
                    continue
                table[nxt] = depth + 1
                frontier.push(nxt)

        logger.info(
            f"Pattern database for tiles {list(tiles)} on {n}x{n}: "
            f"{len(table)} entries"
        )
        return table

    # -- lookups --------------------------------------------------------------

    def key_for(self, state: PuzzleState, tiles: Iterable[int]) -> PatternKey:
        return tuple(state.position_of(t) for t in tiles) + (state.empty,)

    def estimate(
        self, state: PuzzleState, tiles: tuple[int, ...], locked: frozenset[int]
    ) -> int:
        """Exact distance from the table, or a Manhattan-based lower bound.

        A key missing from a depth-bounded table is known to be deeper than
        the bound, so the fallback never drops below ``max_depth + 1``.
        """
        distance = self.table(tiles, locked).get(self.key_for(state, tiles))
        if distance is not None:
            return distance
        return self._beyond_table(state, tiles)

    def _beyond_table(self, state: PuzzleState, tiles: tuple[int, ...]) -> int:
        fallback = pattern_manhattan(tiles)(state)
        if self.max_depth is not None:
            return max(self.max_depth + 1, fallback)
        return fallback

    def heuristic(self, stage: Stage) -> Heuristic:
        """Bind :meth:`estimate` to one stage's table."""
        table = self.table(stage.tiles, stage.locked)
        tiles = stage.tiles

        def estimate(state: PuzzleState) -> int:
            distance = table.get(self.key_for(state, tiles))
            if distance is not None:
                return distance
            return self._beyond_table(state, tiles)

        return estimate

    def __len__(self) -> int:
        return len(self._tables)


def pdb_heuristic(state: PuzzleState, stage: Stage, database: PatternDatabase) -> int:
    """Stage distance for *state* from *database* (Manhattan fallback)."""
    if database.size != state.size:
        raise ValueError(
            f"Pattern database is for {database.size}x{database.size}, "
            f"state is {state.size}x{state.size}."
        )
    return database.estimate(state, stage.tiles, stage.locked)
