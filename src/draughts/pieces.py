"""Defines the draughts pieces: men and kings of either side"""

from dataclasses import dataclass
from typing import Self

from src.core.shared_types import Side
from src.draughts.square import BOARD_SIZE

# Layout characters: lower case for men, upper case for kings
SIDE_TO_CHAR: dict[Side, str] = {
    Side.A: "a",
    Side.B: "b",
}
CHAR_TO_SIDE: dict[str, Side] = {value: key for key, value in SIDE_TO_CHAR.items()}
EMPTY_CHAR = "."

# Side A starts at the top rows (0-2) and moves down the board (increasing row). Side B the reverse.
FORWARD: dict[Side, int] = {
    Side.A: 1,
    Side.B: -1,
}

# The row a man of this side must reach to be crowned
PROMOTION_ROW: dict[Side, int] = {
    Side.A: BOARD_SIZE - 1,
    Side.B: 0,
}

# Own back row, used to measure how far a man has advanced
HOME_ROW: dict[Side, int] = {
    Side.A: 0,
    Side.B: BOARD_SIZE - 1,
}


@dataclass
class Piece:
    side: Side
    is_king: bool = False

    @classmethod
    def from_char(cls, character: str) -> Self:
        # lower case: men, upper case: kings
        side = CHAR_TO_SIDE[character.lower()]
        return cls(side, is_king=character.isupper())

    def to_char(self) -> str:
        char = SIDE_TO_CHAR[self.side]
        return char.upper() if self.is_king else char

    def promote(self) -> None:
        self.is_king = True

    def is_opponent_of(self, other: "Piece") -> bool:
        return self.side != other.side


def rows_advanced(side: Side, row: int) -> int:
    """How many rows a man on `row` has travelled away from its own back row"""
    return abs(row - HOME_ROW[side])
