"""
Geometry of draughts moves: steps and jumps along the diagonals

Key idea: Use strategy pattern to define the diagonal directions for men and kings.

Which of these candidates are actually legal (forced capture, capture chains, turn order) is decided later by Game
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Self

from src.core.shared_types import Side
from src.draughts.pieces import FORWARD, Piece
from src.draughts.square import Square


class Board(Protocol):
    """Just the parts the movement strategies need"""

    def get(self, square: Square) -> Optional[Piece]: ...
    def is_empty(self, square: Square) -> bool: ...


Vector = tuple[int, int]

ALL_DIAGONALS: list[Vector] = [(-1, -1), (-1, 1), (1, -1), (1, 1)]


@dataclass(frozen=True)
class MoveCandidate:
    """basic definition of a move to be made"""

    origin: Square
    destination: Square
    is_capture: bool = False
    captured_square: Optional[Square] = None

    @classmethod
    def from_notation(cls, notation: str) -> Self:
        """
        ex.
        * "c3-d4": the piece on c3 steps to d4
        * "c3xe5": the piece on c3 jumps to e5, taking the piece on d4

        NOTE: the jumped square follows from the geometry (it is always the square in the middle)
        """
        is_capture = "x" in notation
        origin_alg, destination_alg = notation.split("x" if is_capture else "-")
        origin = Square.from_algebraic(origin_alg)
        destination = Square.from_algebraic(destination_alg)
        captured = (
            Square(
                (origin.row + destination.row) // 2,
                (origin.col + destination.col) // 2,
            )
            if is_capture
            else None
        )
        return cls(origin, destination, is_capture, captured)

    def to_notation(self) -> str:
        return move_notation(self.origin, self.destination, self.is_capture)


def move_notation(origin: Square, destination: Square, is_capture: bool) -> str:
    """'<from>-<to>' for a simple move, '<from>x<to>' for a capture"""
    separator = "x" if is_capture else "-"
    return f"{origin.to_algebraic()}{separator}{destination.to_algebraic()}"


# --- MOVEMENT DIRECTIONS ---
def man_directions(piece: Piece) -> list[Vector]:
    """Men only go forward: toward the opponent's side of the board"""
    forward = FORWARD[piece.side]
    return [(forward, -1), (forward, 1)]


def king_directions(piece: Piece) -> list[Vector]:
    """Kings go along all four diagonals"""
    return ALL_DIAGONALS


# -- STRATEGY PATTERN: DIRECTION RULES ---
DirectionsFn = Callable[[Piece], list[Vector]]
DIRECTION_RULES: dict[bool, DirectionsFn] = {
    False: man_directions,
    True: king_directions,
}


def piece_directions(piece: Piece) -> list[Vector]:
    return DIRECTION_RULES[piece.is_king](piece)


# --- MOVEMENT RULES ---
def candidate_steps(square: Square, board: Board) -> list[MoveCandidate]:
    """A simple move goes to the adjacent diagonal square, which must be empty."""
    piece = board.get(square)
    if piece is None:
        return []

    moves: list[MoveCandidate] = []
    for d_row, d_col in piece_directions(piece):
        target = square.offset(d_row, d_col)
        if board.is_empty(target):
            moves.append(MoveCandidate(origin=square, destination=target))
    return moves


def candidate_captures(square: Square, board: Board) -> list[MoveCandidate]:
    """
    A capture jumps over an adjacent opponent piece
    ----

    The jumped (middle) square must hold a piece of the opponent and the landing square two steps away must be empty.
    """
    piece = board.get(square)
    if piece is None:
        return []

    captures: list[MoveCandidate] = []
    for d_row, d_col in piece_directions(piece):
        jumped = square.offset(d_row, d_col)
        landing = square.offset(2 * d_row, 2 * d_col)
        if not board.is_empty(landing):
            continue

        jumped_piece = board.get(jumped)
        if jumped_piece is not None and jumped_piece.is_opponent_of(piece):
            captures.append(
                MoveCandidate(
                    origin=square,
                    destination=landing,
                    is_capture=True,
                    captured_square=jumped,
                )
            )
    return captures


def rule_moves(square: Square, board: Board) -> list[MoveCandidate]:
    """
    The moves a piece has by the rules of the board alone
    ----

    Forced capture: if the piece can capture, the simple moves are not allowed.
    """
    captures = candidate_captures(square, board)
    if captures:
        return captures
    return candidate_steps(square, board)


def can_be_captured(square: Square, by_side: Side, board: Board, attackers: list[Square]) -> bool:
    """Is the piece standing on `square` in reach of a jump by one of the `attackers` (all pieces of `by_side`)?"""
    for attacker in attackers:
        attacker_piece = board.get(attacker)
        if attacker_piece is None or attacker_piece.side != by_side:
            continue
        if any(
            capture.captured_square == square
            for capture in candidate_captures(attacker, board)
        ):
            return True
    return False
