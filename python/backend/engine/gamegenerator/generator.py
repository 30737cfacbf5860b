"""Generates solvable sliding puzzle boards."""

from __future__ import annotations

import random

from backend.models.board import Board
from backend.models.state import EMPTY, SUPPORTED_SIZES, InvalidInput


class GameGenerator:
    """Creates solvable puzzles by random walks from the solved state.

    Every walk is built from legal moves, so the result always passes the
    parity check.  Pass a ``seed`` for a reproducible board.
    """

    @staticmethod
    def solved(size: int) -> Board:
        """Return the goal-state board (all tiles in order, blank bottom-right)."""
        if size not in SUPPORTED_SIZES:
            raise InvalidInput(
                f"Unsupported board size {size}; expected one of {SUPPORTED_SIZES}."
            )
        tiles: list[list[int]] = []
        num = 1
        for r in range(size):
            row: list[int] = []
            for c in range(size):
                if r == size - 1 and c == size - 1:
                    row.append(EMPTY)
                else:
                    row.append(num)
                    num += 1
            tiles.append(row)
        return Board(size=size, tiles=tiles, blank_pos=(size - 1, size - 1))

    @staticmethod
    def scramble(board: Board, moves: int | None = None, seed: int | None = None) -> list[int]:
        """Scramble *board* in-place with *moves* random blank steps.

        The blank never steps straight back.  Returns the tiles moved, in
        order; replaying them reversed restores the board.
        """
        rng = random.Random(seed)
        num_shuffles = moves if moves is not None else board.size * board.size * 100
        prev_pos: tuple[int, int] | None = None
        played: list[int] = []

        for _ in range(num_shuffles):
            neighbors = GameGenerator._get_neighbors(board)
            if prev_pos in neighbors and len(neighbors) > 1:
                neighbors.remove(prev_pos)
            target = rng.choice(neighbors)
            prev_pos = board.blank_pos
            played.append(board.tiles[target[0]][target[1]])
            GameGenerator._swap(board, target)
        return played

    @staticmethod
    def generate(size: int, moves: int | None = None, seed: int | None = None) -> Board:
        """Return a random *solvable*, unsolved board of the given size."""
        if moves is not None and moves < 1:
            raise ValueError("A scramble needs at least one move.")
        rng = random.Random(seed)
        while True:
            board = GameGenerator.solved(size)
            GameGenerator.scramble(board, moves, rng.randrange(2**32))
            if not board.is_solved():
                return board

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def _get_neighbors(board: Board) -> list[tuple[int, int]]:
        br, bc = board.blank_pos
        neighbors: list[tuple[int, int]] = []
        for dr, dc in ((-1, 0), (1, 0), (0, -1), (0, 1)):
            nr, nc = br + dr, bc + dc
            if 0 <= nr < board.size and 0 <= nc < board.size:
                neighbors.append((nr, nc))
        return neighbors

    @staticmethod
    def _swap(board: Board, target: tuple[int, int]) -> None:
        br, bc = board.blank_pos
        tr, tc = target
        board.tiles[br][bc], board.tiles[tr][tc] = (
            board.tiles[tr][tc],
            board.tiles[br][bc],
        )
        board.blank_pos = (tr, tc)
