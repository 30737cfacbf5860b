"""Shared fixtures: seeded scrambles and move-list replay.

Every returned move list is replayed through the real ``GamePlay`` engine,
the same way a caller would animate it on a live board.
"""

from __future__ import annotations

from typing import Callable

import pytest

from backend.engine.gamegenerator import GameGenerator
from backend.engine.gameplay import GamePlay


@pytest.fixture
def scrambled() -> Callable[[int, int, int], list[int]]:
    """``scrambled(size, moves, seed)`` -> flat tiles of a solvable board."""

    def make(size: int, moves: int, seed: int) -> list[int]:
        return GameGenerator.generate(size, moves, seed).to_flat()

    return make


@pytest.fixture
def replay() -> Callable[[list[int], int, list[int]], GamePlay]:
    """``replay(tiles, size, moves)`` -> the game after every move was applied."""

    def play(tiles: list[int], size: int, moves: list[int]) -> GamePlay:
        game = GamePlay.from_tiles(tiles, size)
        for i, tile in enumerate(moves):
            ok = game.apply_move(tile)
            assert ok, (
                f"Move {i} (tile {tile}) was invalid at blank {game.board.blank_pos}"
            )
        return game

    return play
