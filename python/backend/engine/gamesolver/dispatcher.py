"""
Hybrid dispatcher - try several algorithms against the same start state.

Sequential mode runs the configured algorithms in order and stops at the
first one returning a non-empty move list.  Parallel mode submits all of
them to a thread pool; the first success wins and the rest are told to
stop through a shared cancel event.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from backend.engine.gamesolver.algorithms import SearchAlgorithm, create_algorithm
from backend.engine.gamesolver.context import ERROR, LinkedEvent, SearchProblem, SearchResult
from backend.engine.gamesolver.heuristics import Heuristic, manhattan
from backend.engine.gamesolver.presets import EngineConfig
from backend.models.messages import Attempt
from backend.models.state import PuzzleState

logger = logging.getLogger(__name__)


@dataclass
class DispatchOutcome:
    """Winning move list (None if every attempt failed) plus the trace."""
    moves: list[int] | None
    algorithm: str | None = None
    trace: list[Attempt] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.moves is not None


def _attempt(result: SearchResult) -> Attempt:
    return Attempt(
        algorithm=result.algorithm,
        moves=result.moves,
        termination=result.termination,
        expanded=result.expanded,
        elapsed=result.elapsed,
    )


class HybridDispatcher:
    """
    Runs a list of algorithms on one whole-board problem.

    Attributes:
        config: Algorithm order and per-algorithm options
        heuristic: Heuristic handed to every algorithm
    """

    def __init__(self, config: EngineConfig, heuristic: Heuristic = manhattan) -> None:
        self.config = config
        self.heuristic = heuristic

    def build(self, size: int) -> list[SearchAlgorithm]:
        """Fresh algorithm instances for a board of side *size*."""
        return [
            create_algorithm(name, **self.config.options_for(name, size))
            for name in self.config.algorithms
        ]

    def _problem(self, start: PuzzleState) -> SearchProblem:
        return SearchProblem.whole_board(start, heuristic=self.heuristic)

    # -- sequential -----------------------------------------------------------

    def run(
        self, start: PuzzleState, cancel: threading.Event | None = None
    ) -> DispatchOutcome:
        """Try each algorithm in turn; stop at the first non-empty result."""
        problem = self._problem(start)
        trace: list[Attempt] = []

        for algorithm in self.build(start.size):
            result = algorithm.search(problem, cancel)
            trace.append(_attempt(result))
            if result.moves:
                logger.info(
                    f"{algorithm.name} solved the board in {len(result.moves)} moves"
                )
                return DispatchOutcome(result.moves, algorithm.name, trace)
            logger.debug(f"{algorithm.name} gave up ({result.termination})")
            if cancel is not None and cancel.is_set():
                break

        logger.warning(f"No algorithm solved the board ({len(trace)} attempts)")
        return DispatchOutcome(None, None, trace)

    # -- parallel -------------------------------------------------------------

    def run_parallel(
        self, start: PuzzleState, cancel: threading.Event | None = None
    ) -> DispatchOutcome:
        """
        Run every algorithm concurrently; the first non-empty result wins.

        Each algorithm gets its own instance and budget; the start state is
        immutable, so nothing mutable is shared besides the cancel event.
        Setting *cancel* stops every search; losing searches stop at their next expansion; the pool is shut down
        without waiting for them.
        """
        problem = self._problem(start)
        algorithms = self.build(start.size)
        stop = LinkedEvent(cancel)
        trace: list[Attempt] = []
        winner: SearchResult | None = None
        t0 = time.perf_counter()

        workers = self.config.parallel_workers or len(algorithms)
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hybrid")
        try:
            futures = {
                executor.submit(algorithm.search, problem, stop): algorithm
                for algorithm in algorithms
            }
            for future in as_completed(futures):
                algorithm = futures[future]
                try:
                    result = future.result()
                except Exception as exc:
                    logger.exception(f"{algorithm.name} crashed")
                    result = SearchResult(None, algorithm.name, ERROR, error=str(exc))
                trace.append(_attempt(result))
                if result.moves:
                    winner = result
                    break
        finally:
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

        elapsed = time.perf_counter() - t0
        if winner is None:
            logger.warning(f"No algorithm solved the board in parallel ({elapsed:.2f}s)")
            return DispatchOutcome(None, None, trace)

        logger.info(
            f"{winner.algorithm} won the parallel race with "
            f"{len(winner.moves)} moves ({elapsed:.2f}s)"
        )
        return DispatchOutcome(winner.moves, winner.algorithm, trace)
