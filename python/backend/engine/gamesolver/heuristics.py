"""Distance estimators over ``PuzzleState``."""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Iterable

from backend.models.state import EMPTY, PuzzleState

Heuristic = Callable[[PuzzleState], int]


@lru_cache(maxsize=None)
def _goal_coords(size: int) -> tuple[tuple[int, int], ...]:
    """Goal ``(row, col)`` indexed by tile value (entry 0 is unused)."""
    coords = [(size - 1, size - 1)]
    for t in range(1, size * size):
        coords.append(divmod(t - 1, size))
    return tuple(coords)


def manhattan(state: PuzzleState) -> int:
    """Sum of row + column offsets of every tile from its goal cell."""
    n = state.size
    goal = _goal_coords(n)
    dist = 0
    for idx, tile in enumerate(state.tiles):
        if tile == EMPTY:
            continue
        r, c = divmod(idx, n)
        gr, gc = goal[tile]
        dist += abs(r - gr) + abs(c - gc)
    return dist


def misplaced(state: PuzzleState) -> int:
    """Number of tiles (blank excluded) not on their goal cell."""
    return sum(
        1 for idx, tile in enumerate(state.tiles)
        if tile != EMPTY and tile != idx + 1
    )


def zero(state: PuzzleState) -> int:
    return 0


def _conflict_removals(goals: list[int]) -> int:
    """Tiles that must leave the line so the rest keep their goal order."""
    if len(goals) < 2:
        return 0
    best = [1] * len(goals)
    for i in range(len(goals)):
        for j in range(i):
            if goals[j] < goals[i] and best[j] + 1 > best[i]:
                best[i] = best[j] + 1
    return len(goals) - max(best)


def linear_conflict(state: PuzzleState) -> int:
    """Manhattan + 2 per tile that has to step out of its goal row/column.

    Each line is charged for the tiles outside its longest run of tiles
    already in goal order, which keeps the estimate admissible.
    """
    m = manhattan(state)
    n = state.size
    goal = _goal_coords(n)
    s = state.tiles
    for r in range(n):
        row = s[r * n:(r + 1) * n]
        m += 2 * _conflict_removals(
            [goal[t][1] for t in row if t != EMPTY and goal[t][0] == r]
        )
    for c in range(n):
        col = [s[c + r * n] for r in range(n)]
        m += 2 * _conflict_removals(
            [goal[t][0] for t in col if t != EMPTY and goal[t][1] == c]
        )
    return m


def pattern_manhattan(tiles: Iterable[int]) -> Heuristic:
    """Manhattan distance restricted to *tiles* (a sub-goal estimate)."""
    wanted = frozenset(tiles)

    def estimate(state: PuzzleState) -> int:
        n = state.size
        goal = _goal_coords(n)
        dist = 0
        for idx, tile in enumerate(state.tiles):
            if tile in wanted:
                r, c = divmod(idx, n)
                gr, gc = goal[tile]
                dist += abs(r - gr) + abs(c - gc)
        return dist

    return estimate


HEURISTICS: dict[str, Heuristic] = {
    "manhattan": manhattan,
    "misplaced": misplaced,
    "linear_conflict": linear_conflict,
    "zero": zero,
}


def get_heuristic(name: str) -> Heuristic:
    if name not in HEURISTICS:
        available = ", ".join(HEURISTICS)
        raise ValueError(f"Unknown heuristic: {name}. Available: {available}")
    return HEURISTICS[name]
