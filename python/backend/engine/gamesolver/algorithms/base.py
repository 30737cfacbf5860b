"""Base class shared by every search algorithm."""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod

from backend.engine.gamesolver.context import (
    ALREADY_SOLVED,
    ERROR,
    EXHAUSTED,
    OK,
    UNSOLVABLE,
    ResourceExhausted,
    SearchBudget,
    SearchProblem,
    SearchResult,
)

logger = logging.getLogger(__name__)


class SearchAlgorithm(ABC):
    """
    Abstract base class for all search algorithms.

    Subclasses implement ``_run()`` and define ``name`` and
    ``description``.  ``search()`` wraps it with the behaviour every
    algorithm shares: an already-solved start returns ``[]`` without
    expanding anything, an unsolvable whole-board start fails at once,
    budget exhaustion and unexpected faults become a failed result.

    Attributes:
        name: Short identifier used by the registry and in traces
        description: Human-readable description
        optimal: True if the returned path is shortest when run to completion
    """
    name: str = "base"
    description: str = "Base algorithm"
    optimal: bool = False

    def __init__(
        self,
        max_nodes: int | None = 100_000,
        timeout_sec: float | None = 10.0,
    ) -> None:
        self.max_nodes = max_nodes
        self.timeout_sec = timeout_sec

    def search(
        self,
        problem: SearchProblem,
        cancel: threading.Event | None = None,
    ) -> SearchResult:
        """
        Run the algorithm on *problem*.

        Args:
            problem: Start state, goal test, heuristic and locked cells
            cancel: Optional flag checked cooperatively at every expansion

        Returns:
            SearchResult whose ``moves`` is None on failure
        """
        t0 = time.perf_counter()
        if problem.is_goal(problem.start):
            return SearchResult([], self.name, ALREADY_SOLVED)
        if problem.is_whole_board and not problem.start.is_solvable():
            return SearchResult(None, self.name, UNSOLVABLE)

        budget = SearchBudget(self.max_nodes, self.timeout_sec, cancel)
        try:
            budget.check()
            moves = self._run(problem, budget)
        except ResourceExhausted as exc:
            logger.debug(f"{self.name}: stopped ({exc.reason}) after {budget.expanded} nodes")
            return SearchResult(
                None, self.name, exc.reason, budget.expanded, budget.elapsed()
            )
        except RecursionError as exc:
            logger.warning(f"{self.name}: recursion limit reached")
            return SearchResult(
                None, self.name, ERROR, budget.expanded, budget.elapsed(), str(exc)
            )
        except Exception as exc:
            logger.exception(f"{self.name}: search failed")
            return SearchResult(
                None, self.name, ERROR, budget.expanded, budget.elapsed(), str(exc)
            )

        elapsed = time.perf_counter() - t0
        termination = OK if moves is not None else EXHAUSTED
        logger.debug(
            f"{self.name}: {termination} in {elapsed:.3f}s, "
            f"{budget.expanded} nodes, "
            f"{len(moves) if moves is not None else '-'} moves"
        )
        return SearchResult(moves, self.name, termination, budget.expanded, elapsed)

    @abstractmethod
    def _run(self, problem: SearchProblem, budget: SearchBudget) -> list[int] | None:
        """
        Search for a move list reaching ``problem.is_goal``.

        Must call ``budget.tick()`` once per expansion.  The start state
        is known not to be a goal.

        Returns:
            Move list, or None when the search space is exhausted
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(max_nodes={self.max_nodes}, timeout_sec={self.timeout_sec})"
