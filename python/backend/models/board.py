"""Live board model: the mutable grid that solved move lists are played on."""

from __future__ import annotations

from dataclasses import dataclass

from backend.models.state import EMPTY, PuzzleState, validate_tiles


@dataclass
class Board:
    """Represents the sliding puzzle board being played.

    Tiles are stored as a 2D list of ints. 0 represents the blank space.
    """

    size: int
    tiles: list[list[int]]
    blank_pos: tuple[int, int]

    # -- construction helpers -------------------------------------------------

    @classmethod
    def from_flat(cls, size: int, flat: list[int]) -> Board:
        """Create a board from a flat row-major tile list.

        Raises ``InvalidInput`` for anything that is not a permutation of
        ``0..size²-1``.

        Example::

            Board.from_flat(3, [1, 2, 3, 4, 5, 6, 7, 0, 8])
        """
        flat = list(validate_tiles(flat, size))
        tiles: list[list[int]] = []
        blank_pos: tuple[int, int] = (0, 0)
        for r in range(size):
            row = flat[r * size : (r + 1) * size]
            for c, v in enumerate(row):
                if v == EMPTY:
                    blank_pos = (r, c)
            tiles.append(row)
        return cls(size=size, tiles=tiles, blank_pos=blank_pos)

    # -- queries --------------------------------------------------------------

    def find(self, tile: int) -> tuple[int, int] | None:
        for r, row in enumerate(self.tiles):
            for c, v in enumerate(row):
                if v == tile:
                    return (r, c)
        return None

    def to_flat(self) -> list[int]:
        return [v for row in self.tiles for v in row]

    def to_state(self) -> PuzzleState:
        return PuzzleState.from_flat(self.size, self.to_flat())

    def is_solved(self) -> bool:
        """Check if all tiles are in their goal positions."""
        expected = 1
        for r in range(self.size):
            for c in range(self.size):
                if r == self.size - 1 and c == self.size - 1:
                    return self.tiles[r][c] == EMPTY
                if self.tiles[r][c] != expected:
                    return False
                expected += 1
        return True

    def is_tile_correct(self, row: int, col: int) -> bool:
        """Check if a specific tile is in its goal position."""
        val = self.tiles[row][col]
        if val == EMPTY:
            return row == self.size - 1 and col == self.size - 1
        expected_row = (val - 1) // self.size
        expected_col = (val - 1) % self.size
        return row == expected_row and col == expected_col

    def copy(self) -> Board:
        return Board(
            size=self.size,
            tiles=[row[:] for row in self.tiles],
            blank_pos=self.blank_pos,
        )
