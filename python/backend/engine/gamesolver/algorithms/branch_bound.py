"""Depth-first and breadth-first branch-and-bound.

Both prune any node whose g + h cannot beat the best solution found so
far.  They are anytime searches: if the budget runs out after a solution
was found, that solution is returned.
"""

from __future__ import annotations

import logging

from backend.engine.gamesolver.context import (
    Node,
    ResourceExhausted,
    SearchBudget,
    SearchProblem,
)
from backend.engine.gamesolver.primitives import FifoQueue
from backend.models.state import PuzzleState

from .base import SearchAlgorithm
from .registry import register_algorithm

logger = logging.getLogger(__name__)


@register_algorithm
class DepthFirstBranchAndBound(SearchAlgorithm):
    """
    Depth-first branch-and-bound over an explicit stack.

    Children are tried in increasing h order.  States on the current path
    are skipped; the on-path set is updated only where frames are pushed
    and popped.

    Attributes:
        max_depth: Initial bound on solution length (None = no bound)
    """
    name = "dfbnb"
    description = "Depth-first branch-and-bound"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
        max_depth: int | None = 80,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_depth = max_depth

    @staticmethod
    def _ordered(problem: SearchProblem, state: PuzzleState):
        h = problem.heuristic
        children = [(h(nxt), nxt, tile) for nxt, tile in problem.expand(state)]
        children.sort(key=lambda c: c[0])
        return iter(children)

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        bound = self.max_depth + 1 if self.max_depth is not None else None
        best: list[int] | None = None
        budget.tick()
        stack = [(problem.start, 0, self._ordered(problem, problem.start))]
        on_path = {problem.start.key()}
        path: list[int] = []

        try:
            while stack:
                state, g, children = stack[-1]
                child = next(children, None)
                if child is None:
                    stack.pop()
                    on_path.discard(state.key())
                    if path:
                        path.pop()
                    continue

                h_next, nxt, tile = child
                g2 = g + 1
                if nxt.key() in on_path:
                    continue
                if bound is not None and g2 + h_next >= bound:
                    continue
                if problem.is_goal(nxt):
                    best = path + [tile]
                    bound = g2
                    logger.debug(f"dfbnb: improved solution, {g2} moves")
                    continue

                budget.tick()
                path.append(tile)
                on_path.add(nxt.key())
                stack.append((nxt, g2, self._ordered(problem, nxt)))
        except ResourceExhausted:
            if best is None:
                raise
            logger.debug(f"dfbnb: budget spent, keeping best ({len(best)} moves)")
        return best


@register_algorithm
class BreadthFirstBranchAndBound(SearchAlgorithm):
    """
    Breadth-first branch-and-bound.

    A state is queued again only when reached with a smaller g.

    Attributes:
        max_depth: Initial bound on solution length (None = no bound)
    """
    name = "bfbnb"
    description = "Breadth-first branch-and-bound"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
        max_depth: int | None = 80,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_depth = max_depth

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        h = problem.heuristic
        bound = self.max_depth + 1 if self.max_depth is not None else None
        best: list[int] | None = None
        queue: FifoQueue[Node] = FifoQueue()
        queue.push(Node(problem.start))
        best_g = {problem.start.key(): 0}

        try:
            while queue:
                node = queue.pop()
                if bound is not None and node.g + h(node.state) >= bound:
                    continue
                budget.tick()
                for nxt, tile in problem.expand(node.state):
                    g2 = node.g + 1
                    if problem.is_goal(nxt):
                        if bound is None or g2 < bound:
                            best = node.child(nxt, tile).path()
                            bound = g2
                        continue
                    if bound is not None and g2 + h(nxt) >= bound:
                        continue
                    k = nxt.key()
                    if k in best_g and best_g[k] <= g2:
                        continue
                    best_g[k] = g2
                    queue.push(node.child(nxt, tile))
        except ResourceExhausted:
            if best is None:
                raise
            logger.debug(f"bfbnb: budget spent, keeping best ({len(best)} moves)")
        return best
