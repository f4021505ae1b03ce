"""
Snapshot of everything needed to put a game back into an earlier state.

A snapshot is an immutable value: the board is stored as its layout string, so two snapshots of the same position
compare (and hash) equal and a snapshot can never alias the live board.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Self

from src.core.exceptions import InvalidBoardStateError
from src.core.shared_types import Side, Status
from src.draughts.board import Board, validate_layout
from src.draughts.moves import candidate_captures
from src.draughts.pieces import CHAR_TO_SIDE
from src.draughts.square import Square


@dataclass(frozen=True)
class BoardSnapshot:
    layout: str
    side_to_move: Side
    scores: tuple[tuple[Side, int], ...]
    status: Status = Status.IN_PROGRESS
    move_count: int = 0
    chain_square: Optional[Square] = field(default=None)
    winner: Optional[Side] = None

    @property
    def game_over(self) -> bool:
        return self.status == Status.OVER

    def score(self, side: Side) -> int:
        return dict(self.scores)[side]

    def validate(self) -> None:
        """Fail fast on a malformed snapshot (before a Game gets mutated with it)."""
        problems = validate_layout(self.layout)

        if not isinstance(self.side_to_move, Side):
            problems.append(f"unknown side to move {self.side_to_move!r}")
        if not isinstance(self.status, Status):
            problems.append(f"unknown status {self.status!r}")

        score_sides = [side for side, _ in self.scores]
        if sorted(score_sides) != sorted(Side):
            problems.append("scores must list every side exactly once")
        if any(points < 0 for _, points in self.scores):
            problems.append("scores cannot be negative")
        if self.move_count < 0:
            problems.append("move count cannot be negative")
        if self.winner is not None and self.status != Status.OVER:
            problems.append("a game in progress cannot have a winner")

        if self.chain_square is not None and not problems:
            problems.extend(self._chain_problems())

        if problems:
            raise InvalidBoardStateError("; ".join(problems))

    def _chain_problems(self) -> list[str]:
        """A pending capture chain must belong to a piece of the side to move that still has a capture"""
        assert self.chain_square is not None
        square = self.chain_square
        if not square.is_within_bounds():
            return [f"chain square {square} is off the board"]
        character = self.layout.split("/")[square.row][square.col]
        owner = CHAR_TO_SIDE.get(character.lower())
        if owner != self.side_to_move:
            return [f"chain square {square} does not hold a piece of the side to move"]
        if not candidate_captures(square, Board.from_layout(self.layout)):
            return [f"the piece on chain square {square} has no capture to continue with"]
        return []

    # --- PLAIN DATA (for export / transport) ---
    def to_dict(self) -> dict[str, Any]:
        return {
            "layout": self.layout,
            "side_to_move": self.side_to_move.value,
            "scores": {side.value: points for side, points in self.scores},
            "status": self.status.value,
            "move_count": self.move_count,
            "chain_square": (
                self.chain_square.to_algebraic() if self.chain_square else None
            ),
            "winner": self.winner.value if self.winner else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Parse plain data. Anything that does not fit the expected shape is rejected with InvalidBoardStateError."""
        try:
            chain = data.get("chain_square")
            winner = data.get("winner")
            snapshot = cls(
                layout=str(data["layout"]),
                side_to_move=Side(data["side_to_move"]),
                scores=tuple(
                    sorted(
                        (Side(side), int(points))
                        for side, points in data["scores"].items()
                    )
                ),
                status=Status(data.get("status", Status.IN_PROGRESS)),
                move_count=int(data.get("move_count", 0)),
                chain_square=Square.from_algebraic(chain) if chain else None,
                winner=Side(winner) if winner else None,
            )
        except (KeyError, ValueError, TypeError, AttributeError, IndexError) as error:
            raise InvalidBoardStateError(f"Malformed board snapshot: {error}") from error
        snapshot.validate()
        return snapshot
