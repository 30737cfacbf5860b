"""Live-board move application and seeded scrambles."""

from __future__ import annotations

import pytest

from backend.engine.gamegenerator import GameGenerator
from backend.engine.gameplay import GamePlay, IllegalMove
from backend.models.board import Board
from backend.models.state import InvalidInput, PuzzleState


def test_apply_move_slides_tile_into_blank() -> None:
    game = GamePlay.from_tiles([1, 2, 3, 4, 5, 6, 7, 0, 8], 3)
    assert game.apply_move(8)
    assert game.is_won
    assert game.moves == 1
    assert game.board.blank_pos == (2, 2)


def test_apply_move_rejects_far_tiles() -> None:
    game = GamePlay.from_tiles([1, 2, 3, 4, 5, 6, 7, 0, 8], 3)
    assert not game.apply_move(1)
    assert not game.apply_move(0)
    assert not game.apply_move(99)
    assert game.moves == 0


def test_play_raises_on_illegal_move() -> None:
    game = GamePlay.from_tiles([1, 2, 3, 4, 5, 6, 0, 7, 8], 3)
    with pytest.raises(IllegalMove):
        game.play([7, 1])
    assert game.moves == 1


def test_from_board_leaves_original_untouched() -> None:
    board = Board.from_flat(3, [1, 2, 3, 4, 5, 6, 7, 0, 8])
    game = GamePlay.from_board(board)
    game.apply_move(8)
    assert board.to_flat() == [1, 2, 3, 4, 5, 6, 7, 0, 8]
    assert game.state == PuzzleState.solved(3)


@pytest.mark.parametrize("size", [3, 4, 5])
def test_generated_boards_are_solvable_and_scrambled(size: int) -> None:
    board = GameGenerator.generate(size, seed=size)
    assert not board.is_solved()
    assert board.to_state().is_solvable()


def test_generate_is_reproducible_with_a_seed() -> None:
    a = GameGenerator.generate(4, moves=50, seed=123)
    b = GameGenerator.generate(4, moves=50, seed=123)
    assert a.to_flat() == b.to_flat()


def test_scramble_returns_the_tiles_it_moved() -> None:
    board = GameGenerator.solved(4)
    played = GameGenerator.scramble(board, moves=25, seed=9)
    assert len(played) == 25

    # Replaying the same tiles in reverse undoes the scramble.
    game = GamePlay(board)
    game.play(reversed(played))
    assert game.is_won


def test_generator_rejects_bad_arguments() -> None:
    with pytest.raises(InvalidInput):
        GameGenerator.solved(7)
    with pytest.raises(ValueError):
        GameGenerator.generate(3, moves=0)
