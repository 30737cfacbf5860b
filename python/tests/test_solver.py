"""Solver engine - request in, exactly one response out.

Boards come from seeded scrambles.  Every test is hard-killed by
``pytest-timeout`` (configured in ``pyproject.toml``).  Returned move lists
are replayed through the real game engine to verify correctness.
"""

from __future__ import annotations

import threading
from dataclasses import replace

import pytest

from backend.engine.gamesolver.presets import Limits, get_preset
from backend.engine.gamesolver.solver import Solver
from backend.models.messages import Mode, SolveRequest, SolveResponse

# Six moves from the goal, with tile 1 off its cell.
EDGE_4X4 = [0, 1, 2, 3, 5, 6, 7, 4, 9, 10, 11, 8, 13, 14, 15, 12]


# -- helpers ------------------------------------------------------------------


def _assert_solve(solver: Solver, tiles: list[int], size: int, replay, **kwargs) -> SolveResponse:
    """Solve the board and verify the returned moves reach the goal state."""
    response = solver.handle(SolveRequest(tuple(tiles), size, **kwargs))

    # ---- move-list sanity ---------------------------------------------------
    assert response.moves is not None, f"no solution ({response.method})"
    assert len(response.moves) > 0, "Solvable board returned 0 moves"
    assert all(isinstance(m, int) for m in response.moves)

    # ---- apply moves via the real game engine and check win -----------------
    assert replay(tiles, size, response.moves).is_won, (
        f"Board not solved after {len(response.moves)} moves"
    )
    return response


def _with_placement(config, max_nodes: int):
    profiles = {
        size: replace(profile, placement=Limits(max_nodes, None))
        for size, profile in config.profiles.items()
    }
    return replace(config, profiles=profiles)


# -- concrete scenarios -------------------------------------------------------


def test_one_move_from_goal(replay) -> None:
    response = _assert_solve(Solver(), [1, 2, 3, 4, 5, 6, 7, 0, 8], 3, replay)
    assert response.moves == [8]
    assert response.method == "hybrid-multi"
    assert [a.algorithm for a in response.trace] == ["ida_star"]


@pytest.mark.parametrize("size", [3, 4, 5])
def test_already_solved(size: int) -> None:
    tiles = list(range(1, size * size)) + [0]
    response = Solver().handle(SolveRequest(tuple(tiles), size))
    assert response.moves == []
    assert response.method == "already_solved"


def test_unsolvable_board_is_reported() -> None:
    response = Solver().handle(SolveRequest((2, 1, 3, 4, 5, 6, 7, 8, 0), 3))
    assert response.moves is None
    assert response.method == "unsolvable"


@pytest.mark.parametrize(
    "tiles, size",
    [
        ((1, 2, 3, 4, 5, 6, 7, 8), 3),
        ((1, 1, 3, 4, 5, 6, 7, 8, 0), 3),
        (tuple(range(15)) + (99,), 4),
        (tuple(range(1, 25)), 5),
        (tuple(range(36)), 6),
    ],
)
def test_invalid_input(tiles: tuple, size: int) -> None:
    response = Solver().handle(SolveRequest(tiles, size))
    assert response.moves is None
    assert response.method == "invalid_input"
    assert "error" not in response.to_dict()


# -- 3×3 ----------------------------------------------------------------------


@pytest.mark.parametrize("seed", range(5))
def test_solve_3x3(seed: int, scrambled, replay) -> None:
    _assert_solve(Solver(), scrambled(3, 100, seed), 3, replay)


def test_solve_3x3_all_algorithms(scrambled, replay) -> None:
    response = _assert_solve(Solver(), scrambled(3, 20, 11), 3, replay, mode=Mode.ALL)
    assert response.method == "hybrid-all"
    assert response.trace


# -- 4×4 / 5×5 ----------------------------------------------------------------


@pytest.mark.parametrize("seed", range(3))
def test_solve_4x4(seed: int, scrambled, replay) -> None:
    response = _assert_solve(Solver(), scrambled(4, 300, seed), 4, replay)
    assert response.method in ("4x4_stage2_ida", "4x4_stage2_bfs")


def test_solve_5x5(scrambled, replay) -> None:
    response = _assert_solve(Solver(), scrambled(5, 400, 1), 5, replay)
    assert response.method in ("5x5_stage2_ida", "5x5_stage2_bfs")


def test_pattern_databases_are_reused(scrambled) -> None:
    solver = Solver()
    first = solver._database(4)
    solver.solve(scrambled(4, 100, 3), 4)
    assert solver._database(4) is first
    assert len(first) > 0


def test_legacy_preset_solves_whole_board(scrambled, replay) -> None:
    solver = Solver(get_preset("legacy"))
    response = _assert_solve(solver, scrambled(4, 12, 2), 4, replay)
    assert response.method == "hybrid-multi"


def test_failed_stage_falls_back_to_hybrid(replay) -> None:
    solver = Solver(_with_placement(get_preset("hybrid"), 0))
    response = _assert_solve(solver, EDGE_4X4, 4, replay)
    assert response.method == "hybrid-multi"
    assert response.trace[0].algorithm.startswith("stage")
    assert response.trace[0].moves is None


def test_failed_stage_without_fallback() -> None:
    config = replace(_with_placement(get_preset("hybrid"), 0), fallback_to_hybrid=False)
    response = Solver(config).handle(SolveRequest(tuple(EDGE_4X4), 4))
    assert response.moves is None
    assert response.method == "4x4_stage1_fail"


# -- failures and helpers -----------------------------------------------------


def test_internal_fault_becomes_worker_crash(monkeypatch) -> None:
    def boom(*args, **kwargs):
        raise RuntimeError("search exploded")

    solver = Solver()
    monkeypatch.setattr(solver, "_dispatch", boom)
    response = solver.handle(SolveRequest((1, 2, 3, 4, 5, 6, 7, 0, 8), 3))
    assert response.moves is None
    assert response.method == "worker_crash"
    assert response.error == "search exploded"
    assert response.to_dict()["error"] == "search exploded"


def test_hint() -> None:
    solver = Solver()
    assert solver.hint([1, 2, 3, 4, 5, 6, 7, 0, 8], 3) == 8
    assert solver.hint(list(range(1, 9)) + [0], 3) is None
    assert solver.hint([2, 1, 3, 4, 5, 6, 7, 8, 0], 3) is None


def test_request_from_message() -> None:
    request = SolveRequest.from_dict(
        {"type": "solve", "state": [1, 2, 3, 4, 5, 6, 7, None, 8], "size": 3, "useAllAlgos": True}
    )
    assert request.tiles == (1, 2, 3, 4, 5, 6, 7, 0, 8)
    assert request.mode == Mode.ALL
    assert request.to_dict()["mode"] == "hybrid-all"


def test_response_message_shape() -> None:
    response = Solver().handle(SolveRequest((1, 2, 3, 4, 5, 6, 7, 0, 8), 3))
    message = response.to_dict()
    assert message["type"] == "done"
    assert message["moves"] == [8]
    assert message["method"] == "hybrid-multi"
    assert message["trace"][0] == {"algorithm": "ida_star", "result": [8], "termination": "ok"}
    assert "error" not in message


def test_parallel_mode_respects_cancel() -> None:
    cancel = threading.Event()
    cancel.set()
    request = SolveRequest((8, 6, 7, 2, 5, 4, 3, 0, 1), 3, Mode.ALL)
    response = Solver().handle(request, cancel)
    assert response.moves is None
    assert response.method == "hybrid-all"
    assert {a.termination for a in response.trace} == {"cancelled"}
