"""Blind searches: BFS, depth-limited DFS, IDDFS, bidirectional BFS."""

from __future__ import annotations

import logging

from backend.engine.gamesolver.context import Node, SearchBudget, SearchProblem
from backend.engine.gamesolver.primitives import FifoQueue

from .base import SearchAlgorithm
from .registry import register_algorithm

logger = logging.getLogger(__name__)


@register_algorithm
class BreadthFirst(SearchAlgorithm):
    name = "bfs"
    description = "Breadth-first search (level order)"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 200_000,
        timeout_sec: float | None = 10.0,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        frontier: FifoQueue[Node] = FifoQueue()
        frontier.push(Node(problem.start))
        seen = {problem.start.key()}

        while frontier:
            node = frontier.pop()
            budget.tick()
            for nxt, tile in problem.expand(node.state):
                k = nxt.key()
                if k in seen:
                    continue
                child = node.child(nxt, tile)
                if problem.is_goal(nxt):
                    return child.path()
                seen.add(k)
                frontier.push(child)
        return None


def depth_limited(
    problem: SearchProblem, limit: int, budget: SearchBudget
) -> list[int] | None:
    """Depth-first search that never extends a path beyond *limit* moves.

    A state is re-opened only when reached at a shallower depth than
    before, which keeps the search complete up to *limit*.
    """
    stack = [Node(problem.start)]
    best_depth = {problem.start.key(): 0}

    while stack:
        node = stack.pop()
        if problem.is_goal(node.state):
            return node.path()
        if node.g >= limit:
            continue
        budget.tick()
        # Reversed so children pop in the state's neighbour order.
        for nxt, tile in reversed(problem.expand(node.state)):
            if nxt == node.previous:
                continue
            k = nxt.key()
            depth = node.g + 1
            if k in best_depth and best_depth[k] <= depth:
                continue
            best_depth[k] = depth
            stack.append(node.child(nxt, tile))
    return None


@register_algorithm
class DepthLimitedDFS(SearchAlgorithm):
    name = "dfs_limited"
    description = "Depth-first search with a depth ceiling"

    def __init__(
        self,
        max_nodes: int | None = 1_000_000,
        timeout_sec: float | None = 10.0,
        depth_limit: int = 50,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.depth_limit = depth_limit

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        return depth_limited(problem, self.depth_limit, budget)


@register_algorithm
class IterativeDeepeningDFS(SearchAlgorithm):
    name = "iddfs"
    description = "Iterative-deepening depth-first search"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
        max_depth: int = 45,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)
        self.max_depth = max_depth

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        for limit in range(1, self.max_depth + 1):
            moves = depth_limited(problem, limit, budget)
            if moves is not None:
                return moves
        return None


@register_algorithm
class BidirectionalBFS(SearchAlgorithm):
    """
    Breadth-first search from both ends, one full level per side in turn.

    The first state generated by one side that the other side has already
    reached joins the two half-paths.  Needs ``problem.goal_state``.
    """
    name = "bibfs"
    description = "Bidirectional breadth-first search"
    optimal = True

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
    ) -> None:
        super().__init__(max_nodes, timeout_sec)

    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        goal = problem.goal_state
        if goal is None:
            logger.debug("bibfs: no explicit goal state, skipping")
            return None

        forward = {problem.start.key(): Node(problem.start)}
        backward = {goal.key(): Node(goal)}
        f_frontier: FifoQueue[Node] = FifoQueue()
        f_frontier.push(forward[problem.start.key()])
        b_frontier: FifoQueue[Node] = FifoQueue()
        b_frontier.push(backward[goal.key()])

        while f_frontier and b_frontier:
            meet = self._expand_level(problem, f_frontier, forward, backward, budget)
            if meet is not None:
                return self._join(forward[meet], backward[meet])
            meet = self._expand_level(problem, b_frontier, backward, forward, budget)
            if meet is not None:
                return self._join(forward[meet], backward[meet])
        return None

    @staticmethod
    def _expand_level(
        problem: SearchProblem,
        frontier: FifoQueue[Node],
        visited: dict[tuple[int, ...], Node],
        other: dict[tuple[int, ...], Node],
        budget: SearchBudget,
    ) -> tuple[int, ...] | None:
        """Expand every node currently queued; return a meeting key if found."""
        for _ in range(len(frontier)):
            node = frontier.pop()
            budget.tick()
            for nxt, tile in problem.expand(node.state):
                k = nxt.key()
                if k in visited:
                    continue
                visited[k] = node.child(nxt, tile)
                if k in other:
                    return k
                frontier.push(visited[k])
        return None

    @staticmethod
    def _join(forward_node: Node, backward_node: Node) -> list[int]:
        # Every move is its own inverse: replaying the backward half in
        # reverse walks from the meeting state to the goal.
        return forward_node.path() + backward_node.path()[::-1]
