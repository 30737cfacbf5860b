"""Move application - plays solver output on a live board."""

from __future__ import annotations

from typing import Iterable

from backend.models.board import Board
from backend.models.state import EMPTY, PuzzleState


class IllegalMove(ValueError):
    """A tile that is not adjacent to the blank was asked to move."""


class GamePlay:
    """Applies tile-value moves to a mutable board and counts them."""

    def __init__(self, board: Board) -> None:
        self.board = board
        self.size = board.size
        self.moves: int = 0

    @classmethod
    def from_board(cls, board: Board) -> GamePlay:
        """Play on a copy of *board*; the caller's board is left untouched."""
        return cls(board.copy())

    @classmethod
    def from_tiles(cls, tiles: Iterable[int], size: int) -> GamePlay:
        return cls(Board.from_flat(size, list(tiles)))

    # -- movement (a move names the tile that slides into the blank) ---------

    def apply_move(self, tile: int) -> bool:
        """Slide *tile* into the adjacent blank.

        Returns True if the tile was adjacent to the blank and the move
        was applied.
        """
        if tile == EMPTY:
            return False
        pos = self.board.find(tile)
        if pos is None:
            return False
        return self.move_tile(*pos)

    def move_tile(self, row: int, col: int) -> bool:
        """Move a tile at (row, col) into the adjacent blank.

        Returns True if the tile was adjacent to the blank and the move
        was applied.
        """
        br, bc = self.board.blank_pos

        if abs(row - br) + abs(col - bc) != 1:
            return False

        self._swap(self.board, (row, col))
        self.moves += 1
        return True

    def play(self, moves: Iterable[int]) -> None:
        """Apply every move in order.  Raises ``IllegalMove`` on the first bad one."""
        for i, tile in enumerate(moves):
            if not self.apply_move(tile):
                raise IllegalMove(
                    f"Move {i} (tile {tile}) is not adjacent to the blank "
                    f"at {self.board.blank_pos}."
                )

    # -- queries --------------------------------------------------------------

    @property
    def is_won(self) -> bool:
        return self.board.is_solved()

    @property
    def state(self) -> PuzzleState:
        return self.board.to_state()

    # -- helpers --------------------------------------------------------------

    @staticmethod
    def _swap(board: Board, target: tuple[int, int]) -> None:
        br, bc = board.blank_pos
        tr, tc = target
        board.tiles[br][bc], board.tiles[tr][tc] = (
            board.tiles[tr][tc],
            board.tiles[br][bc],
        )
        board.blank_pos = (tr, tc)
