"""
Scoring of positions and single moves
-----

* `evaluate_board`: static evaluation of the whole board, used at the leaves of the lookahead search.
* `score_move`: quick heuristic for one candidate move, used by the medium difficulty.

Both score from the point of view of the given side (higher is better for that side).
"""

from typing import Optional, Protocol

from src.core.config import EvalConfig, HeuristicConfig
from src.core.shared_types import Side
from src.draughts.board import Board
from src.draughts.moves import MoveCandidate, can_be_captured
from src.draughts.pieces import Piece, rows_advanced
from src.draughts.square import Square


class Game(Protocol):
    """Just the parts the evaluation needs"""

    board: Board

    def all_moves(self, side: Side) -> list[MoveCandidate]: ...


# --- LEAF EVALUATION ---
def piece_value(piece: Piece, square: Square, weights: EvalConfig) -> float:
    """Material + position of a single piece"""
    value = weights.king_value if piece.is_king else weights.man_value

    # closer to being crowned
    position_bonus = 0.0
    if not piece.is_king:
        position_bonus = rows_advanced(piece.side, square.row) * weights.advancement_weight

    # center control
    position_bonus += (7 - square.center_distance()) * weights.center_weight

    # pieces on the side of the board are easier to trap
    if square.is_edge_column():
        position_bonus -= weights.edge_penalty

    return value + position_bonus


def evaluate_board(
    game: Game,
    side: Side,
    weights: EvalConfig,
    last_move: Optional[MoveCandidate] = None,
    last_mover: Optional[Side] = None,
) -> float:
    """
    Static evaluation
    ----

    ----
    1. material and position of every piece (own pieces count positive, opponent pieces negative)
    2. bonus when the move under evaluation is a capture (a penalty when the opponent makes it)
    3. mobility: own number of legal moves minus the opponent's
    """
    score = 0.0
    for square, piece in game.board.pieces():
        value = piece_value(piece, square, weights)
        score += value if piece.side == side else -value

    if last_move is not None and last_move.is_capture:
        score += weights.capture_bonus if last_mover in (None, side) else -weights.capture_bonus

    own_moves = len(game.all_moves(side))
    opponent_moves = len(game.all_moves(side.opponent))
    score += (own_moves - opponent_moves) * weights.mobility_weight

    return score


# --- SINGLE MOVE HEURISTIC ---
def score_move(game: Game, move: MoveCandidate, side: Side, weights: HeuristicConfig) -> float:
    """
    Heuristic for a non-capturing move
    ----

    * prefer moves toward being crowned
    * prefer the center, avoid the edge columns
    * avoid squares where the piece can be jumped right away
    * prefer squares next to other own pieces (they cover each other)
    """
    piece = game.board.get(move.origin)
    if piece is None:
        return float("-inf")

    score = 0.0
    destination = move.destination
    if not piece.is_king:
        score += rows_advanced(side, destination.row) * weights.advancement_weight

    score += 7 - destination.center_distance()

    if destination.is_edge_column():
        score -= weights.edge_penalty

    if would_be_in_danger(game.board, move, side):
        score -= weights.danger_penalty

    if helps_protect_piece(game.board, move, side, weights.protection_distance):
        score += weights.protection_bonus

    return score


def would_be_in_danger(board: Board, move: MoveCandidate, side: Side) -> bool:
    """Could the opponent jump the piece right after it lands on the destination?

    Checked on a copy of the board with the move played out, so the live board is never touched.
    """
    hypothetical = board.copy()
    piece = hypothetical.get(move.origin) or Piece(side)
    hypothetical.set(move.origin, None)
    hypothetical.set(move.destination, piece)
    opponent = side.opponent
    return can_be_captured(
        move.destination, opponent, hypothetical, hypothetical.locate_side(opponent)
    )


def helps_protect_piece(board: Board, move: MoveCandidate, side: Side, distance: int) -> bool:
    """Is another own piece close to the destination (Manhattan distance)?"""
    for square in board.locate_side(side):
        if square == move.origin:
            continue
        if square.manhattan_distance(move.destination) <= distance:
            return True
    return False
