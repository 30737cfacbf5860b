"""
Stage controller - progressive tile locking for 4x4 and 5x5 boards.

While the free region is larger than 3x3 its top row is placed, then its
left column.  Every tile of a row or column is a stage of its own except
the last two, which go in together: a corner tile cannot be brought home
on its own once its neighbour is locked.  The remaining 3x3 region is then
solved as a whole with IDA*, falling back to breadth-first search.

Any failing stage fails the whole solve; partial progress is discarded.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from backend.engine.gamesolver.algorithms import BreadthFirst, IDAStar
from backend.engine.gamesolver.context import LinkedEvent, SearchProblem, SearchResult
from backend.engine.gamesolver.heuristics import Heuristic, pattern_manhattan
from backend.engine.gamesolver.patterndb import PatternDatabase
from backend.engine.gamesolver.presets import BoardProfile
from backend.models.messages import Attempt, stage_tag
from backend.models.state import PuzzleState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Stage:
    """
    One placement sub-goal.

    Attributes:
        index: Position in the plan
        tiles: Tiles brought home by this stage
        locked: Cells fixed before the stage starts
    """
    index: int
    tiles: tuple[int, ...]
    locked: frozenset[int]

    @property
    def targets(self) -> frozenset[int]:
        """Goal cells of this stage's tiles."""
        return frozenset(t - 1 for t in self.tiles)

    @property
    def locked_after(self) -> frozenset[int]:
        return self.locked | self.targets

    def is_goal(self, state: PuzzleState) -> bool:
        return all(state.tiles[t - 1] == t for t in self.tiles)

    def __str__(self) -> str:
        return f"stage {self.index} {list(self.tiles)}"


def _groups(line: list[int]) -> list[tuple[int, ...]]:
    """Singletons, except the last two tiles which are paired."""
    return [(t,) for t in line[:-2]] + [tuple(line[-2:])]


def plan_stages(size: int) -> list[Stage]:
    """
    Placement stages for a board of side *size* (empty for 3x3).

    Example::

        >>> [s.tiles for s in plan_stages(4)]
        [(1,), (2,), (3, 4), (5,), (9, 13)]
    """
    stages: list[Stage] = []
    locked: frozenset[int] = frozenset()
    top = left = 0

    def add(line: list[int]) -> None:
        nonlocal locked
        for tiles in _groups(line):
            stage = Stage(len(stages), tiles, locked)
            stages.append(stage)
            locked = stage.locked_after

    while size - top > 3:
        add([top * size + c + 1 for c in range(left, size)])
        top += 1
        add([r * size + left + 1 for r in range(top, size)])
        left += 1
    return stages


def finish_tiles(size: int, locked: frozenset[int]) -> tuple[int, ...]:
    """Tiles still free once every cell in *locked* is placed."""
    return tuple(i + 1 for i in range(size * size - 1) if i not in locked)


@dataclass
class StageOutcome:
    """Result of a staged solve; ``attempts`` lists every search run."""
    moves: list[int] | None
    method: str
    attempts: list[Attempt] = field(default_factory=list)

    @property
    def solved(self) -> bool:
        return self.moves is not None


def _attempt(label: str, result: SearchResult) -> Attempt:
    return Attempt(
        algorithm=label,
        moves=result.moves,
        termination=result.termination,
        expanded=result.expanded,
        elapsed=result.elapsed,
    )


class StageController:
    """
    Runs the stage plan for one board size.

    Attributes:
        size: Board side length
        profile: Limits for placement, finish and fallback searches
        heuristic: Whole-board heuristic used when no pattern database is set
        database: Pattern database for stage heuristics (None = pattern Manhattan)
        cancel: Optional flag stopping every search cooperatively
    """

    def __init__(
        self,
        size: int,
        profile: BoardProfile,
        heuristic: Heuristic,
        database: PatternDatabase | None = None,
        cancel: threading.Event | None = None,
    ) -> None:
        self.size = size
        self.profile = profile
        self.heuristic = heuristic
        self.database = database
        self.cancel = cancel
        self.stages = plan_stages(size)

    def run(self, start: PuzzleState) -> StageOutcome:
        """Place every stage, then finish the free 3x3 region."""
        if start.size != self.size:
            raise ValueError(f"Controller is for {self.size}x{self.size} boards.")

        t0 = time.perf_counter()
        state = start
        moves: list[int] = []
        attempts: list[Attempt] = []

        for stage in self.stages:
            if stage.is_goal(state):
                logger.debug(f"{stage}: already in place")
                continue
            result = self.place(state, stage)
            attempts.append(_attempt(f"stage{stage.index}:{result.algorithm}", result))
            if not result.success:
                logger.warning(f"{stage} failed ({result.termination}), giving up")
                return StageOutcome(None, stage_tag(self.size, "stage1_fail"), attempts)
            state = state.apply_all(result.moves)
            moves.extend(result.moves)
            logger.info(f"{stage}: placed in {len(result.moves)} moves")

        locked = self.stages[-1].locked_after if self.stages else frozenset()
        result, method = self.finish(state, locked, attempts)
        if not result.success:
            logger.warning(f"{self.size}x{self.size} finish failed, giving up")
            return StageOutcome(None, method, attempts)
        moves.extend(result.moves)

        logger.info(
            f"{self.size}x{self.size} staged solve: {len(moves)} moves "
            f"in {time.perf_counter() - t0:.2f}s ({method})"
        )
        return StageOutcome(moves, method, attempts)

    # -- placement ------------------------------------------------------------

    def stage_heuristic(self, stage: Stage) -> Heuristic:
        if self.database is not None:
            return self.database.heuristic(stage)
        return pattern_manhattan(stage.tiles)

    def place(self, state: PuzzleState, stage: Stage) -> SearchResult:
        """Bring *stage*'s tiles home without touching locked cells."""
        problem = SearchProblem(
            start=state,
            heuristic=self.stage_heuristic(stage),
            is_goal=stage.is_goal,
            locked=stage.locked,
        )
        search = IDAStar(**self.profile.placement.to_options())
        return search.search(problem, self.cancel)

    # -- finish ---------------------------------------------------------------

    def finish_heuristic(self, locked: frozenset[int]) -> Heuristic:
        if self.database is not None and locked:
            final = Stage(len(self.stages), finish_tiles(self.size, locked), locked)
            return self.database.heuristic(final)
        return self.heuristic

    def finish(
        self,
        state: PuzzleState,
        locked: frozenset[int],
        attempts: list[Attempt],
    ) -> tuple[SearchResult, str]:
        """Solve the free region: IDA* (raced when configured), then BFS."""
        problem = SearchProblem(
            start=state,
            heuristic=self.finish_heuristic(locked),
            locked=locked,
            goal_state=PuzzleState.solved(self.size),
        )

        if self.profile.race_threads > 1:
            result = self.race(problem)
        else:
            result = IDAStar(**self.profile.finish.to_options()).search(problem, self.cancel)
        attempts.append(_attempt(f"finish:{result.algorithm}", result))
        if result.success:
            return result, stage_tag(self.size, "stage2_ida")

        logger.warning(f"finish IDA* stopped ({result.termination}), trying BFS")
        result = BreadthFirst(**self.profile.fallback.to_options()).search(problem, self.cancel)
        attempts.append(_attempt(f"finish:{result.algorithm}", result))
        if result.success:
            return result, stage_tag(self.size, "stage2_bfs")
        return result, stage_tag(self.size, "stage2_fail")

    def race(self, problem: SearchProblem) -> SearchResult:
        """
        Run several IDA* instances with different child orders.

        The first success sets a shared ``found`` event, which the others
        check at every expansion; their results are discarded. The controller's
        cancel flag stops every racer too.
        """
        found = LinkedEvent(self.cancel)
        racers = [
            IDAStar(order_seed=None if i == 0 else i, **self.profile.finish.to_options())
            for i in range(self.profile.race_threads)
        ]

        def run(racer: IDAStar) -> SearchResult:
            result = racer.search(problem, found)
            if result.success:
                found.set()
            return result

        winner: SearchResult | None = None
        last: SearchResult | None = None
        executor = ThreadPoolExecutor(
            max_workers=len(racers), thread_name_prefix="ida-race"
        )
        try:
            futures = [executor.submit(run, racer) for racer in racers]
            for future in as_completed(futures):
                result = future.result()
                last = result
                if result.success:
                    winner = result
                    break
        finally:
            found.set()
            executor.shutdown(wait=False, cancel_futures=True)

        if winner is not None:
            logger.debug(f"race won with {len(winner.moves)} moves")
            return winner
        return last
