"""Hybrid dispatcher: sequential trace and parallel race."""

from __future__ import annotations

import threading
from dataclasses import replace

from backend.engine.gamesolver.dispatcher import HybridDispatcher
from backend.engine.gamesolver.presets import get_preset
from backend.models.state import PuzzleState

HARDEST = [8, 6, 7, 2, 5, 4, 3, 0, 1]


def _dispatcher(*algorithms: str, **options) -> HybridDispatcher:
    config = get_preset("hybrid")
    if algorithms:
        config = replace(config, algorithms=tuple(algorithms))
    for name, overrides in options.items():
        config.algorithm_options.setdefault(name, {}).update(overrides)
    return HybridDispatcher(config)


def test_sequential_stops_at_first_success(scrambled, replay) -> None:
    tiles = scrambled(3, 20, 3)
    outcome = _dispatcher().run(PuzzleState.from_flat(3, tiles))
    assert outcome.solved
    assert outcome.algorithm == "ida_star"
    assert [a.algorithm for a in outcome.trace] == ["ida_star"]
    assert replay(tiles, 3, outcome.moves).is_won


def test_sequential_records_failed_attempts(replay) -> None:
    tiles = HARDEST
    outcome = _dispatcher(
        "bfs", "a_star",
        bfs={"max_nodes": 3},
    ).run(PuzzleState.from_flat(3, tiles))
    assert outcome.algorithm == "a_star"
    assert [a.algorithm for a in outcome.trace] == ["bfs", "a_star"]
    assert outcome.trace[0].moves is None
    assert outcome.trace[0].termination == "node_limit"
    assert replay(tiles, 3, outcome.moves).is_won


def test_sequential_reports_total_failure() -> None:
    tiles = HARDEST
    outcome = _dispatcher(
        "bfs", "a_star",
        bfs={"max_nodes": 1},
        a_star={"max_nodes": 1},
    ).run(PuzzleState.from_flat(3, tiles))
    assert not outcome.solved
    assert outcome.algorithm is None
    assert len(outcome.trace) == 2


def test_every_attempt_starts_from_the_original_state(scrambled) -> None:
    tiles = scrambled(3, 24, 6)
    start = PuzzleState.from_flat(3, tiles)
    _dispatcher("hill_climbing", "bfs").run(start)
    assert list(start.tiles) == tiles


def test_parallel_first_success_wins(scrambled, replay) -> None:
    tiles = scrambled(3, 20, 7)
    outcome = _dispatcher().run_parallel(PuzzleState.from_flat(3, tiles))
    assert outcome.solved
    assert outcome.algorithm is not None
    assert outcome.trace[-1].algorithm == outcome.algorithm
    assert replay(tiles, 3, outcome.moves).is_won


def test_parallel_reports_total_failure() -> None:
    tiles = HARDEST
    outcome = _dispatcher(
        "bfs", "dijkstra",
        bfs={"max_nodes": 1},
        dijkstra={"max_nodes": 1},
    ).run_parallel(PuzzleState.from_flat(3, tiles))
    assert not outcome.solved
    assert sorted(a.algorithm for a in outcome.trace) == ["bfs", "dijkstra"]


def test_parallel_honours_the_callers_cancel() -> None:
    cancel = threading.Event()
    cancel.set()
    outcome = _dispatcher("bfs", "a_star", "ida_star").run_parallel(
        PuzzleState.from_flat(3, HARDEST), cancel
    )
    assert not outcome.solved
    assert len(outcome.trace) == 3
    assert {a.termination for a in outcome.trace} == {"cancelled"}
