"""Pattern databases: exact stage distances and the bounded fallback."""

from __future__ import annotations

import random

import pytest

from backend.engine.gamesolver.algorithms import BreadthFirst
from backend.engine.gamesolver.context import SearchProblem
from backend.engine.gamesolver.heuristics import pattern_manhattan
from backend.engine.gamesolver.patterndb import PatternDatabase, pdb_heuristic
from backend.engine.gamesolver.stages import Stage, plan_stages
from backend.models.state import PuzzleState


def _stage_distance(state: PuzzleState, stage: Stage) -> int:
    problem = SearchProblem(start=state, is_goal=stage.is_goal, locked=stage.locked)
    result = BreadthFirst(max_nodes=None, timeout_sec=None).search(problem)
    assert result.success
    return len(result.moves)


def _random_walk(state: PuzzleState, steps: int, seed: int, locked=frozenset()):
    rng = random.Random(seed)
    for _ in range(steps):
        state, _ = rng.choice(state.neighbors(locked))
    return state


@pytest.mark.parametrize("seed", range(5))
def test_table_is_exact_for_a_tile_pair(seed: int, scrambled) -> None:
    stage = Stage(0, (1, 2), frozenset())
    state = PuzzleState.from_flat(3, scrambled(3, 30, seed))
    database = PatternDatabase(3)
    assert pdb_heuristic(state, stage, database) == _stage_distance(state, stage)


def test_table_respects_locked_cells() -> None:
    stage = plan_stages(4)[2]                      # tiles 3 and 4, cells 0-1 locked
    assert stage.tiles == (3, 4)
    database = PatternDatabase(4)
    start = _random_walk(PuzzleState.solved(4), 12, seed=3, locked=stage.locked)
    assert pdb_heuristic(start, stage, database) == _stage_distance(start, stage)


def test_heuristic_is_consistent_along_a_walk() -> None:
    stage = plan_stages(4)[0]
    h = PatternDatabase(4).heuristic(stage)
    state = _random_walk(PuzzleState.solved(4), 60, seed=11)
    rng = random.Random(5)
    for _ in range(200):
        nxt, _ = rng.choice(state.neighbors(stage.locked))
        assert abs(h(state) - h(nxt)) <= 1
        state = nxt


def test_tables_are_cached_per_stage() -> None:
    database = PatternDatabase(4)
    stages = plan_stages(4)
    database.heuristic(stages[0])
    database.heuristic(stages[0])
    database.heuristic(stages[1])
    assert len(database) == 2


def test_bounded_table_falls_back_above_the_bound() -> None:
    stage = Stage(0, (1, 2, 3), frozenset())
    database = PatternDatabase(3, max_depth=2)
    state = PuzzleState.from_flat(3, [8, 7, 6, 5, 4, 3, 2, 1, 0])
    estimate = pdb_heuristic(state, stage, database)
    assert estimate >= 3
    assert estimate >= pattern_manhattan(stage.tiles)(state)


def test_size_mismatch_is_rejected() -> None:
    stage = Stage(0, (1,), frozenset())
    with pytest.raises(ValueError):
        pdb_heuristic(PuzzleState.solved(3), stage, PatternDatabase(4))
