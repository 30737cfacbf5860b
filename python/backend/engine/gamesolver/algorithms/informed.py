"""Heuristic-guided searches: IDA*, A*, Dijkstra, greedy, RBFS, SMA*."""

from __future__ import annotations

import logging
import random

from backend.engine.gamesolver.context import Node, SearchBudget, SearchProblem
from backend.engine.gamesolver.heuristics import Heuristic, zero
from backend.engine.gamesolver.primitives import LRUCache, PriorityQueue, SymmetryTable
from backend.models.state import PuzzleState

from .base import SearchAlgorithm
from .registry import register_algorithm

logger = logging.getLogger(__name__)


def _tighter(a: int | None, b: int | None) -> int | None:
    """Smaller of two bounds where ``None`` means unbounded."""
    if a is None:
        return b
    if b is None:
        return a
    return min(a, b)


# -- IDA* ---------------------------------------------------------------------


@register_algorithm
class IDAStar(SearchAlgorithm):
    """
    Iterative-deepening A*.

    Each iteration is a depth-first probe bounded by an f = g + h threshold;
    the next threshold is the smallest f that exceeded the current one.  The
    probe runs on an explicit stack whose depth always equals the length of
    the current path, so backtracking is a single pop.

    Attributes:
        max_depth: Give up once the threshold exceeds this (None = no bound)
        order_seed: Shuffle child order with this seed (racing instances)
        prune_symmetric: Skip children whose rotation/reflection was expanded
            in the current iteration; faster, but may miss solutions
    """
    name = "ida_star"
    description = "Iterative-deepening A* on f = g + h"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 1_000_000,
        timeout_sec: float | None = 10.0,
        max_depth: int | None = None,
        order_seed: int | None = None,
        prune_symmetric: bool = False,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_depth = max_depth
        self.order_seed = order_seed
        self.prune_symmetric = prune_symmetric

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        rng = random.Random(self.order_seed) if self.order_seed is not None else None
        bound = problem.heuristic(problem.start)
        while True:
            if self.max_depth is not None and bound > self.max_depth:
                logger.debug(f"ida_star: threshold {bound} beyond max depth {self.max_depth}")
                return None
            moves, next_bound = self._probe(problem, bound, budget, rng)
            if moves is not None:
                return moves
            if next_bound is None:
                return None
            logger.debug(f"ida_star: threshold {bound} -> {next_bound} ({budget.expanded} nodes)")
            bound = next_bound

    def _children(
        self, problem: SearchProblem, state: PuzzleState, rng: random.Random | None
    ) -> list[tuple[PuzzleState, int]]:
        children = problem.expand(state)
        if rng is not None:
            rng.shuffle(children)
        return children

    def _probe(
        self,
        problem: SearchProblem,
        bound: int,
        budget: SearchBudget,
        rng: random.Random | None,
    ) -> tuple[list[int] | None, int | None]:
        """Depth-first search bounded by *bound*.

        Returns the path on success, otherwise ``(None, next_bound)`` where
        ``next_bound`` is None if nothing was cut off.
        """
        h = problem.heuristic
        symmetry = SymmetryTable() if self.prune_symmetric else None
        if symmetry is not None:
            symmetry.add(problem.start)

        budget.tick()
        stack = [(problem.start, 0, iter(self._children(problem, problem.start, rng)))]
        path: list[int] = []
        next_bound: int | None = None

        while stack:
            state, g, children = stack[-1]
            child = next(children, None)
            if child is None:
                stack.pop()
                if path:
                    path.pop()
                continue

            nxt, tile = child
            if len(stack) > 1 and nxt == stack[-2][0]:
                continue
            if symmetry is not None and symmetry.seen(nxt):
                continue

            f = g + 1 + h(nxt)
            if f > bound:
                next_bound = _tighter(next_bound, f)
                continue

            path.append(tile)
            if problem.is_goal(nxt):
                return path, None

            budget.tick()
            if symmetry is not None:
                symmetry.add(nxt)
            stack.append((nxt, g + 1, iter(self._children(problem, nxt, rng))))

        return None, next_bound


# -- best-first family --------------------------------------------------------


class _BestFirst(SearchAlgorithm):
    """Priority-queue search; subclasses choose the priority."""

    def _estimate(self, problem: SearchProblem) -> Heuristic:
        return problem.heuristic

    def _priority(self, g: int, h: int) -> int:
        return g + h

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = self._estimate(problem)
        open_nodes: PriorityQueue[Node] = PriorityQueue()
        open_nodes.push(self._priority(0, h(problem.start)), Node(problem.start))
        best_g: dict[tuple[int, ...], int] = {problem.start.key(): 0}
        closed: set[tuple[int, ...]] = set()

        while open_nodes:
            node = open_nodes.pop()
            key = node.state.key()
            if key in closed:
                continue
            if problem.is_goal(node.state):
                return node.path()
            closed.add(key)
            budget.tick()

            for nxt, tile in problem.expand(node.state):
                k = nxt.key()
                if k in closed:
                    continue
                g2 = node.g + 1
                if k not in best_g or g2 < best_g[k]:
                    best_g[k] = g2
                    open_nodes.push(self._priority(g2, h(nxt)), node.child(nxt, tile))
        return None


@register_algorithm
class AStar(_BestFirst):
    name = "a_star"
    description = "A* best-first search on f = g + h"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 1_000_000,
        timeout_sec: float | None = 10.0,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)


@register_algorithm
class Dijkstra(_BestFirst):
    """Uniform-cost search: A* with h = 0."""
    name = "dijkstra"
    description = "Dijkstra / uniform-cost search (A* with h = 0)"
    optimal = True

    def _estimate(self, problem: SearchProblem) -> Heuristic:
        return zero


@register_algorithm
class GreedyBestFirst(_BestFirst):
    name = "greedy_best_first"
    description = "Greedy best-first search on h alone"

    def _priority(self, g: int, h: int) -> int:
        return h


# -- RBFS ---------------------------------------------------------------------


@register_algorithm
class RecursiveBestFirst(SearchAlgorithm):
    """
    Recursive best-first search (Korf).

    Each call owns its path as a tuple, so nothing has to be undone when a
    subtree is abandoned.  Backed-up f-values replace a child's estimate
    once its subtree has been explored up to the current f-limit.
    """
    name = "rbfs"
    description = "Recursive best-first search with backed-up f-values"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
        f_limit: int | None = None,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.f_limit = f_limit

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        f0 = problem.heuristic(problem.start)
        moves, _ = self._rbfs(problem, problem.start, None, 0, f0, self.f_limit, (), budget)
        return list(moves) if moves is not None else None

    def _rbfs(
        self,
        problem: SearchProblem,
        state: PuzzleState,
        previous: PuzzleState | None,
        g: int,
        f_state: int,
        f_limit: int | None,
        path: tuple[int, ...],
        budget: SearchBudget,
    ) -> tuple[tuple[int, ...] | None, int | None]:
        if problem.is_goal(state):
            return path, g
        budget.tick()

        successors: list[list] = []
        for nxt, tile in problem.expand(state):
            if nxt == previous:
                continue
            f = max(g + 1 + problem.heuristic(nxt), f_state)
            successors.append([f, nxt, tile])

        while successors:
            successors.sort(key=lambda s: s[0])
            best = successors[0]
            if f_limit is not None and best[0] > f_limit:
                return None, best[0]
            alternative = successors[1][0] if len(successors) > 1 else None
            moves, best[0] = self._rbfs(
                problem, best[1], state, g + 1, best[0],
                _tighter(f_limit, alternative), path + (best[2],), budget,
            )
            if moves is not None:
                return moves, best[0]
            if best[0] is None:
                successors.pop(0)
        return None, None


# -- SMA* ---------------------------------------------------------------------


@register_algorithm
class MemoryBoundedAStar(SearchAlgorithm):
    """A* whose closed set is an LRU cache of ``memory_limit`` states."""
    name = "sma_star"
    description = "Memory-bounded A* (LRU-evicting closed set)"

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
        memory_limit: int = 10_000,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.memory_limit = memory_limit

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = problem.heuristic
        open_nodes: PriorityQueue[Node] = PriorityQueue()
        open_nodes.push(h(problem.start), Node(problem.start))
        closed: LRUCache[tuple[int, ...], bool] = LRUCache(self.memory_limit)

        while open_nodes:
            node = open_nodes.pop()
            if problem.is_goal(node.state):
                return node.path()
            key = node.state.key()
            if key in closed:
                continue
            closed.set(key, True)
            budget.tick()

            for nxt, tile in problem.expand(node.state):
                if nxt == node.previous or nxt.key() in closed:
                    continue
                open_nodes.push(node.g + 1 + h(nxt), node.child(nxt, tile))
        return None
