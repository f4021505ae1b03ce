"""The Game board holds the `position` (the configuration of pieces on the dark squares)"""

from copy import deepcopy
from dataclasses import dataclass, field
from itertools import count
from typing import Optional, Self

from src.core.shared_types import Side
from src.draughts.pieces import CHAR_TO_SIDE, EMPTY_CHAR, Piece
from src.draughts.square import BOARD_SIZE, Square, dark_squares

# Rows each side fills at the start of a game
STARTING_ROWS: dict[Side, range] = {
    Side.A: range(0, 3),
    Side.B: range(BOARD_SIZE - 3, BOARD_SIZE),
}

# Every write to any board draws a fresh number, so a version is never reused (not even after restoring a snapshot).
_versions = count(1)

Grid = list[list[Optional[Piece]]]


def _empty_grid() -> Grid:
    return [[None] * BOARD_SIZE for _ in range(BOARD_SIZE)]


@dataclass
class Board:
    grid: Grid = field(default_factory=_empty_grid)
    version: int = field(default_factory=lambda: next(_versions), compare=False)

    @classmethod
    def starting(cls) -> Self:
        """12 men per side on the dark squares of their three starting rows"""
        board = cls()
        for square in dark_squares():
            for side, rows in STARTING_ROWS.items():
                if square.row in rows:
                    board.set(square, Piece(side))
        return board

    @classmethod
    def from_layout(cls, layout: str) -> Self:
        """Construct a board from a layout string.

        The layout lists the rows from row 0 to row 7 separated by slashes, 8 characters per row:
        * '.' an empty square
        * 'a' / 'b' a man of side A / B
        * 'A' / 'B' a king of side A / B

        ex. a single man of side A on (2,1) and one of side B on (3,2):
        ......../......../.a....../..b...../......../......../......../........

        NOTE: The layout is trusted here. Use `validate_layout` on anything coming from outside.
        """
        board = cls()
        for row, row_layout in enumerate(layout.split("/")):
            for col, character in enumerate(row_layout):
                if character != EMPTY_CHAR:
                    board.grid[row][col] = Piece.from_char(character)
        return board

    def to_layout(self) -> str:
        """Rows are separated by slashes in the layout string."""
        return "/".join(self._row_to_layout(row) for row in range(BOARD_SIZE))

    def _row_to_layout(self, row: int) -> str:
        return "".join(
            piece.to_char() if piece else EMPTY_CHAR for piece in self.grid[row]
        )

    # --- CELL ACCESS ---
    def is_on_board(self, square: Square) -> bool:
        return square.is_within_bounds()

    def get(self, square: Square) -> Optional[Piece]:
        """The piece on the square. Off-board squares are simply empty."""
        if not self.is_on_board(square):
            return None
        return self.grid[square.row][square.col]

    def set(self, square: Square, piece: Optional[Piece]) -> None:
        """Write a single cell. Writing off the board does nothing."""
        if not self.is_on_board(square):
            return
        self.grid[square.row][square.col] = piece
        self.version = next(_versions)

    def is_empty(self, square: Square) -> bool:
        return self.is_on_board(square) and self.get(square) is None

    # --- LOOKUPS ---
    def locate_side(self, side: Side) -> list[Square]:
        """Squares holding pieces of the side, row by row"""
        return [
            Square(row, col)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if (piece := self.grid[row][col]) is not None and piece.side == side
        ]

    def pieces(self) -> list[tuple[Square, Piece]]:
        return [
            (Square(row, col), piece)
            for row in range(BOARD_SIZE)
            for col in range(BOARD_SIZE)
            if (piece := self.grid[row][col]) is not None
        ]

    def count_pieces(self) -> dict[Side, int]:
        """Tally the pieces each side still has on the board"""
        return {side: len(self.locate_side(side)) for side in Side}

    def copy(self) -> Self:
        """Independent copy: pieces get promoted in place, so they must not be shared."""
        return type(self)(grid=deepcopy(self.grid))


def validate_layout(layout: str) -> list[str]:
    """
    Check a layout string coming from outside.

    Returns a list of problems found (empty list means the layout is fine).
    """
    problems: list[str] = []
    rows = layout.split("/")
    if len(rows) != BOARD_SIZE:
        return [f"layout must have {BOARD_SIZE} rows, got {len(rows)}"]

    counts = {side: 0 for side in Side}
    for row, row_layout in enumerate(rows):
        if len(row_layout) != BOARD_SIZE:
            problems.append(
                f"row {row} must have {BOARD_SIZE} squares, got {len(row_layout)}"
            )
            continue
        for col, character in enumerate(row_layout):
            if character == EMPTY_CHAR:
                continue
            if character.lower() not in CHAR_TO_SIDE:
                problems.append(f"unknown piece {character!r} on ({row},{col})")
                continue
            if not Square(row, col).is_dark():
                problems.append(f"piece on light square ({row},{col})")
            counts[CHAR_TO_SIDE[character.lower()]] += 1

    for side, amount in counts.items():
        if amount > 12:
            problems.append(f"side {side.value} has {amount} pieces (max 12)")
    return problems
