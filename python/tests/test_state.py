"""State model: validation, parity, neighbour generation and transitions."""

from __future__ import annotations

import pytest

from backend.models.board import Board
from backend.models.state import InvalidInput, PuzzleState, count_inversions


# -- validation ---------------------------------------------------------------


@pytest.mark.parametrize(
    "size, tiles",
    [
        (3, [1, 2, 3, 4, 5, 6, 7, 8]),                 # too short
        (3, [1, 2, 3, 4, 5, 6, 7, 8, 8]),              # duplicate, no blank
        (3, [1, 2, 3, 4, 5, 6, 7, 8, 9]),              # out of range
        (4, list(range(15)) + [15, 3]),                # too long
        (5, list(range(24)) + [2]),                    # 24 missing, 2 repeated
        (6, list(range(36))),                          # unsupported size
    ],
)
def test_from_flat_rejects_bad_tiles(size: int, tiles: list[int]) -> None:
    with pytest.raises(InvalidInput):
        PuzzleState.from_flat(size, tiles)


def test_invalid_input_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        PuzzleState.from_flat(3, [0] * 9)


def test_from_flat_finds_blank() -> None:
    state = PuzzleState.from_flat(3, [1, 2, 3, 4, 0, 5, 6, 7, 8])
    assert state.empty == 4
    assert state.key() == (1, 2, 3, 4, 0, 5, 6, 7, 8)


def test_solved_state() -> None:
    state = PuzzleState.solved(4)
    assert state.is_solved()
    assert state.tiles[-1] == 0
    assert state.tiles[:3] == (1, 2, 3)


# -- parity -------------------------------------------------------------------


def test_count_inversions_ignores_blank() -> None:
    assert count_inversions([2, 1, 0, 3]) == 1
    assert count_inversions([1, 2, 3, 0]) == 0


@pytest.mark.parametrize(
    "size, tiles, expected",
    [
        (3, [1, 2, 3, 4, 5, 6, 7, 0, 8], True),
        (3, [2, 1, 3, 4, 5, 6, 7, 8, 0], False),
        (3, [1, 2, 3, 4, 5, 6, 8, 7, 0], False),
        (4, list(range(1, 16)) + [0], True),
        (4, [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 15, 14, 0], False),
        # Blank moved up a row: 3 inversions, blank row from bottom = 1.
        (4, [1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 0, 13, 14, 15, 12], True),
        (5, list(range(1, 25)) + [0], True),
    ],
)
def test_is_solvable(size: int, tiles: list[int], expected: bool) -> None:
    assert PuzzleState.from_flat(size, tiles).is_solvable() is expected


# -- transitions --------------------------------------------------------------


def test_neighbors_order_up_down_left_right() -> None:
    state = PuzzleState.from_flat(3, [1, 2, 3, 4, 0, 5, 6, 7, 8])
    assert [tile for _, tile in state.neighbors()] == [2, 7, 4, 5]


def test_neighbors_skip_locked_cells() -> None:
    state = PuzzleState.from_flat(3, [1, 2, 3, 4, 0, 5, 6, 7, 8])
    moved = [tile for _, tile in state.neighbors(frozenset({1, 3}))]
    assert moved == [7, 5]


def test_neighbors_do_not_mutate_original() -> None:
    state = PuzzleState.from_flat(3, [1, 2, 3, 4, 5, 6, 7, 0, 8])
    before = state.tiles
    for nxt, _ in state.neighbors():
        assert nxt != state
    assert state.tiles == before


def test_apply_and_apply_all() -> None:
    state = PuzzleState.from_flat(3, [1, 2, 3, 4, 5, 6, 0, 7, 8])
    assert state.apply(7).tiles == (1, 2, 3, 4, 5, 6, 7, 0, 8)
    assert state.apply_all([7, 8]).is_solved()


def test_apply_rejects_non_adjacent_tile() -> None:
    state = PuzzleState.solved(3)
    assert not state.can_apply(1)
    with pytest.raises(ValueError):
        state.apply(1)
    with pytest.raises(ValueError):
        state.apply(42)


def test_board_round_trip() -> None:
    tiles = [1, 2, 3, 4, 5, 6, 7, 0, 8]
    board = Board.from_flat(3, tiles)
    assert board.blank_pos == (2, 1)
    assert board.to_flat() == tiles
    assert board.to_state() == PuzzleState.from_flat(3, tiles)
    assert not board.is_solved()
    assert board.is_tile_correct(0, 0)
    assert not board.is_tile_correct(2, 2)


def test_board_from_flat_validates() -> None:
    with pytest.raises(InvalidInput):
        Board.from_flat(3, [1, 1, 3, 4, 5, 6, 7, 0, 8])
