"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass

# Draughts is played on the dark squares of an 8x8 board.
BOARD_SIZE = 8
FILES = "abcdefgh"


@dataclass(frozen=True)
class Square:
    row: int
    col: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7). The file is the column, the rank is the row."""
        col = ord(sq[0]) - ord("a")
        row = int(sq[1:]) - 1
        return cls(row, col)

    def to_algebraic(self) -> str:
        return f"{FILES[self.col]}{self.row + 1}"

    def is_within_bounds(self) -> bool:
        return (0 <= self.row < BOARD_SIZE) and (0 <= self.col < BOARD_SIZE)

    def is_dark(self) -> bool:
        """Pieces only ever stand on the dark squares"""
        return (self.row + self.col) % 2 == 1

    def offset(self, d_row: int, d_col: int) -> Square:
        return Square(self.row + d_row, self.col + d_col)

    def manhattan_distance(self, other: Square) -> int:
        return abs(self.row - other.row) + abs(self.col - other.col)

    def is_edge_column(self) -> bool:
        return self.col in (0, BOARD_SIZE - 1)

    def center_distance(self) -> float:
        """Manhattan distance to the middle of the board (3.5, 3.5)"""
        middle = (BOARD_SIZE - 1) / 2
        return abs(self.row - middle) + abs(self.col - middle)


def dark_squares() -> list[Square]:
    """All playable squares, row by row"""
    return [
        Square(row, col)
        for row in range(BOARD_SIZE)
        for col in range(BOARD_SIZE)
        if (row + col) % 2 == 1
    ]
