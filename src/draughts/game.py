"""
The Game class is the entrypoint into the domain layer for the service layer and the move search.
It is responsible for all the business logic of a turn: which moves are legal, applying them, capture chains,
crowning kings and detecting the end of the game.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator, Optional, Self

from src.core.shared_types import Side, Status
from src.draughts.board import Board
from src.draughts.moves import (
    MoveCandidate,
    candidate_captures,
    rule_moves,
)
from src.draughts.pieces import PROMOTION_ROW, Piece
from src.draughts.snapshot import BoardSnapshot
from src.draughts.square import Square

logger = logging.getLogger(__name__)

MoveCacheKey = tuple[int, Square, Optional[Square], Side]


@dataclass(frozen=True)
class MoveResult:
    """What happened when a move got applied"""

    move: MoveCandidate
    side: Side
    captured_piece: Optional[Piece] = None
    promoted: bool = False
    can_continue_capture: bool = False

    @property
    def notation(self) -> str:
        return self.move.to_notation()


def _zero_scores() -> dict[Side, int]:
    return {side: 0 for side in Side}


@dataclass
class Game:
    board: Board = field(default_factory=Board.starting)
    side_to_move: Side = Side.A
    status: Status = Status.IN_PROGRESS
    scores: dict[Side, int] = field(default_factory=_zero_scores)
    move_count: int = 0
    chain_square: Optional[Square] = None
    winner: Optional[Side] = None
    _move_cache: dict[MoveCacheKey, tuple[MoveCandidate, ...]] = field(
        default_factory=dict, repr=False, compare=False
    )

    @classmethod
    def new_game(cls, first_side: Side = Side.A) -> Self:
        return cls(side_to_move=first_side)

    @classmethod
    def from_snapshot(cls, snapshot: BoardSnapshot) -> Self:
        game = cls()
        game.set_board_state(snapshot)
        return game

    # --- QUERIES ---
    @property
    def chain_in_progress(self) -> bool:
        return self.chain_square is not None

    @property
    def is_over(self) -> bool:
        return self.status == Status.OVER

    def get_piece(self, square: Square) -> Optional[Piece]:
        return self.board.get(square)

    def get_all_pieces(self, side: Side) -> list[tuple[Square, Piece]]:
        return [(square, piece) for square, piece in self.board.pieces() if piece.side == side]

    def legal_moves(self, square: Square) -> list[MoveCandidate]:
        """
        The legal moves of the piece on the square
        ----

        ----
        1. Empty or off-board square? No moves.
        2. A capture chain is running? The chain piece may only capture, the other pieces of that side stay put.
        3. Otherwise the rules of the board: captures only when the piece has one (forced capture), else simple moves.

        NOTE: Forced capture is decided per piece. Another piece of the same side that cannot capture may still move.
        """
        piece = self.board.get(square)
        if piece is None:
            return []

        key = (self.board.version, square, self.chain_square, self.side_to_move)
        cached = self._move_cache.get(key)
        if cached is None:
            cached = tuple(self._generate_legal_moves(square, piece))
            if len(self._move_cache) > 4096:
                self._move_cache.clear()
            self._move_cache[key] = cached
        return list(cached)

    # aliases used by the presentation layer
    get_valid_moves = legal_moves

    def all_moves(self, side: Side) -> list[MoveCandidate]:
        """Every legal move of the side, piece by piece (row by row)"""
        moves: list[MoveCandidate] = []
        for square in self.board.locate_side(side):
            moves.extend(self.legal_moves(square))
        return moves

    def any_capture_available(self, side: Side) -> bool:
        return any(
            move.is_capture
            for square in self.board.locate_side(side)
            for move in self.legal_moves(square)
        )

    def has_any_move(self, side: Side) -> bool:
        """Early exit as soon as one piece of the side can move"""
        return any(self.legal_moves(square) for square in self.board.locate_side(side))

    def check_win_condition(self) -> Optional[Side]:
        """
        The winner, if there is one
        ----

        A side without pieces, or without any legal move, loses.
        """
        counts = self.board.count_pieces()
        for side in (Side.A, Side.B):
            if counts[side] == 0:
                return side.opponent
        for side in (Side.A, Side.B):
            if not self.has_any_move(side):
                return side.opponent
        return None

    # --- MOVE EXECUTION ---
    def apply_move(self, origin: Square, destination: Square) -> Optional[MoveResult]:
        """
        Attempt to make a move
        -----

        Returns None (and leaves the game untouched) if the move is not allowed.

        1. move the piece
        2. remove the captured piece + update the score. Can the same piece capture again? --> the chain continues
        3. crown the piece when it reaches the far edge
        4. update the game status
        """
        if self.is_over:
            logger.debug("Rejected %s -> %s: game is over", origin, destination)
            return None

        piece = self.board.get(origin)
        if piece is None or piece.side != self.side_to_move:
            logger.debug("Rejected %s -> %s: no piece of side %s", origin, destination, self.side_to_move)
            return None

        move = next(
            (m for m in self.legal_moves(origin) if m.destination == destination),
            None,
        )
        if move is None:
            logger.debug("Rejected %s -> %s: not a legal move", origin, destination)
            return None

        # 1. relocate
        self.board.set(destination, piece)
        self.board.set(origin, None)

        # 2. capture (+ chain)
        captured_piece: Optional[Piece] = None
        can_continue = False
        if move.is_capture:
            assert move.captured_square is not None
            captured_piece = self.board.get(move.captured_square)
            self.board.set(move.captured_square, None)
            self.scores[piece.side] += 1
            can_continue = self._start_or_end_chain(destination, piece)

        # 3. crowning (a man reaching the far edge has no forward jump left, so it never continues a chain)
        promoted = self._promote_if_needed(destination, piece)

        self.move_count += 1

        # 4. status
        self._update_game_status()

        return MoveResult(
            move=move,
            side=piece.side,
            captured_piece=captured_piece,
            promoted=promoted,
            can_continue_capture=can_continue,
        )

    # presentation layer name
    move_piece = apply_move

    def switch_turn(self) -> None:
        """Hand the turn to the other side. Only call this once the move result reports no pending capture chain."""
        self.side_to_move = self.side_to_move.opponent
        self.chain_square = None

    # --- SNAPSHOTS ---
    def get_board_state(self) -> BoardSnapshot:
        return BoardSnapshot(
            layout=self.board.to_layout(),
            side_to_move=self.side_to_move,
            scores=tuple((side, self.scores[side]) for side in Side),
            status=self.status,
            move_count=self.move_count,
            chain_square=self.chain_square,
            winner=self.winner,
        )

    def set_board_state(self, snapshot: BoardSnapshot) -> None:
        """Restore a snapshot. The snapshot is validated first: a malformed one raises and leaves the game as it was."""
        snapshot.validate()
        self._restore(snapshot)

    @contextmanager
    def preserved_state(self) -> Iterator[BoardSnapshot]:
        """Everything done inside the block is rolled back on the way out, however the block is left."""
        snapshot = self.get_board_state()
        try:
            yield snapshot
        finally:
            self._restore(snapshot)

    def reset(self, first_side: Side = Side.A) -> None:
        """Start over with a fresh board"""
        self.board = Board.starting()
        self.side_to_move = first_side
        self.status = Status.IN_PROGRESS
        self.scores = _zero_scores()
        self.move_count = 0
        self.chain_square = None
        self.winner = None
        self._move_cache.clear()

    # -- PRIVATE HELPERS ---
    def _generate_legal_moves(self, square: Square, piece: Piece) -> list[MoveCandidate]:
        if self.chain_in_progress and piece.side == self.side_to_move:
            if square != self.chain_square:
                return []
            return candidate_captures(square, self.board)
        return rule_moves(square, self.board)

    def _promote_if_needed(self, square: Square, piece: Piece) -> bool:
        if piece.is_king or square.row != PROMOTION_ROW[piece.side]:
            return False
        piece.promote()
        # the piece changed in place: make sure cached moves of the old man are not reused
        self.board.set(square, piece)
        return True

    def _start_or_end_chain(self, square: Square, piece: Piece) -> bool:
        """After a capture: if the same piece can capture again, the turn does not end."""
        self.chain_square = None
        if candidate_captures(square, self.board):
            self.chain_square = square
            logger.debug("Capture chain continues from %s for side %s", square, piece.side)
            return True
        return False

    def _update_game_status(self) -> None:
        """
        The side to move next (the opponent, unless a chain keeps the turn with the mover) loses
        if it has no pieces or no legal move left.
        """
        next_side = self.side_to_move if self.chain_in_progress else self.side_to_move.opponent
        if self.board.count_pieces()[next_side] == 0 or not self._side_can_move(next_side):
            self.status = Status.OVER
            self.winner = next_side.opponent
            logger.info("Game over: side %s cannot move, side %s wins", next_side, next_side.opponent)

    def _side_can_move(self, side: Side) -> bool:
        """Mobility of a side as it will be on its own turn (no chain of the other side in the way)"""
        if self.chain_in_progress and side == self.side_to_move:
            return bool(self.legal_moves(self.chain_square))  # type: ignore[arg-type]
        return any(rule_moves(square, self.board) for square in self.board.locate_side(side))

    def _restore(self, snapshot: BoardSnapshot) -> None:
        """Internal restore of a snapshot this game produced itself (no validation needed)."""
        self.board = Board.from_layout(snapshot.layout)
        self.side_to_move = snapshot.side_to_move
        self.scores = dict(snapshot.scores)
        self.status = snapshot.status
        self.move_count = snapshot.move_count
        self.chain_square = snapshot.chain_square
        self.winner = snapshot.winner
