"""Sliding puzzle solver engine."""

from __future__ import annotations

import logging
import threading
import time
from typing import Iterable

from backend.engine.gamesolver.dispatcher import HybridDispatcher
from backend.engine.gamesolver.heuristics import get_heuristic
from backend.engine.gamesolver.patterndb import PatternDatabase
from backend.engine.gamesolver.presets import EngineConfig, get_preset
from backend.engine.gamesolver.stages import StageController
from backend.models.messages import (
    ALREADY_SOLVED,
    HYBRID_ALL,
    HYBRID_MULTI,
    INVALID_INPUT,
    UNSOLVABLE,
    WORKER_CRASH,
    Mode,
    SolveRequest,
    SolveResponse,
)
from backend.models.state import InvalidInput, PuzzleState

logger = logging.getLogger(__name__)


class Solver:
    """
    Long-lived solver engine.

    Owns one pattern database per board size, built on first use and kept
    for later requests.  ``handle()`` never raises: every failure becomes a
    response with ``moves=None`` and a method tag.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or get_preset("hybrid")
        self._heuristic = get_heuristic(self.config.heuristic)
        self._databases: dict[int, PatternDatabase] = {}
        self._lock = threading.Lock()

    # -- public API -----------------------------------------------------------

    def handle(
        self, request: SolveRequest, cancel: threading.Event | None = None
    ) -> SolveResponse:
        """Turn one solve request into exactly one response."""
        t0 = time.perf_counter()
        try:
            response = self._handle(request, cancel)
        except InvalidInput as exc:
            logger.warning(f"Rejected request: {exc}")
            response = SolveResponse(None, INVALID_INPUT)
        except Exception as exc:
            logger.exception("Solver crashed")
            response = SolveResponse(None, WORKER_CRASH, error=str(exc))
        response.elapsed = time.perf_counter() - t0
        return response

    def solve(
        self, tiles: Iterable[int], size: int, mode: Mode = Mode.SEQUENTIAL
    ) -> list[int] | None:
        """Return the move list (tile values) for *tiles*, or None."""
        return self.handle(SolveRequest(tuple(tiles), size, mode)).moves

    def hint(self, tiles: Iterable[int], size: int) -> int | None:
        """Return the next tile to move, or ``None`` if solved / unsolvable."""
        moves = self.solve(tiles, size)
        return moves[0] if moves else None

    # -- internals ------------------------------------------------------------

    def _handle(
        self, request: SolveRequest, cancel: threading.Event | None
    ) -> SolveResponse:
        start = PuzzleState.from_flat(request.size, request.tiles)

        if start.is_solved():
            return SolveResponse([], ALREADY_SOLVED)
        if not start.is_solvable():
            logger.info("Board fails the parity check, not searching")
            return SolveResponse(None, UNSOLVABLE)

        if start.size == 3 or not self.config.staged:
            return self._dispatch(start, request.mode, cancel)

        controller = StageController(
            size=start.size,
            profile=self.config.profile(start.size),
            heuristic=self._heuristic,
            database=self._database(start.size),
            cancel=cancel,
        )
        outcome = controller.run(start)
        if outcome.solved or not self.config.fallback_to_hybrid:
            return SolveResponse(outcome.moves, outcome.method, trace=outcome.attempts)

        logger.warning(f"Staged solve failed ({outcome.method}), falling back to hybrid")
        response = self._dispatch(start, request.mode, cancel)
        if not response.solved:
            # The staged tag says where the whole solve first broke down.
            response.method = outcome.method
        response.trace = outcome.attempts + (response.trace or [])
        return response

    def _dispatch(
        self, start: PuzzleState, mode: Mode, cancel: threading.Event | None
    ) -> SolveResponse:
        dispatcher = HybridDispatcher(self.config, self._heuristic)
        if mode == Mode.ALL:
            outcome = dispatcher.run_parallel(start, cancel)
            method = HYBRID_ALL
        else:
            outcome = dispatcher.run(start, cancel)
            method = HYBRID_MULTI
        return SolveResponse(outcome.moves, method, trace=outcome.trace)

    def _database(self, size: int) -> PatternDatabase | None:
        if self.config.stage_heuristic != "pdb":
            return None
        with self._lock:
            if size not in self._databases:
                profile = self.config.profile(size)
                self._databases[size] = PatternDatabase(size, profile.pdb_max_depth)
            return self._databases[size]
