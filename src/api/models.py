"""Requests and Response models"""

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from src.core.exceptions import InvalidBoardStateError, InvalidRequestError
from src.core.shared_types import Difficulty, Side, Status, TranscriptFormat
from src.draughts.board import validate_layout
from src.draughts.snapshot import BoardSnapshot
from src.draughts.square import BOARD_SIZE, FILES


def _is_algebraic_notation(value: str) -> bool:
    """'a1' - 'h8'"""
    if len(value) != 2:
        return False
    file_character, rank_character = value[0], value[1]
    if file_character not in FILES:
        return False
    return rank_character.isdigit() and 1 <= int(rank_character) <= BOARD_SIZE


def _validate_square(value: str) -> str:
    if not _is_algebraic_notation(value):
        raise InvalidRequestError(
            f"Cannot interpret {value!r} as a valid square name."
        )
    return value


# --- REQUEST MODELS ---
class CreateGameRequest(BaseModel):
    human_side: Side = Side.A
    difficulty: Difficulty = Difficulty.MEDIUM
    first_side: Side = Side.A


class GetGameRequest(BaseModel):
    game_id: UUID


class DeleteGameRequest(BaseModel):
    game_id: UUID


class RestartGameRequest(BaseModel):
    game_id: UUID


class LegalMovesRequest(BaseModel):
    game_id: UUID
    square: str

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class MoveRequest(BaseModel):
    game_id: UUID
    from_square: str
    to_square: str

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square(value)


class ComputerMoveRequest(BaseModel):
    game_id: UUID


class JumpRequest(BaseModel):
    game_id: UUID
    index: int = Field(ge=0)


class ExportRequest(BaseModel):
    game_id: UUID
    format: TranscriptFormat = TranscriptFormat.TEXT


class BoardStateModel(BaseModel):
    """A board snapshot coming from outside. The shape is checked here, before it can reach a Game."""

    layout: str
    side_to_move: Side
    scores: dict[Side, int]
    status: Status = Status.IN_PROGRESS
    move_count: int = Field(default=0, ge=0)
    chain_square: Optional[str] = None
    winner: Optional[Side] = None

    @field_validator("layout")
    @classmethod
    def validate_layout(cls, value: str) -> str:
        problems = validate_layout(value)
        if problems:
            raise InvalidRequestError(f"Invalid board layout: {'; '.join(problems)}")
        return value

    @field_validator("chain_square")
    @classmethod
    def validate_chain_square(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _validate_square(value)

    def to_snapshot(self) -> BoardSnapshot:
        try:
            return BoardSnapshot.from_dict(self.model_dump(mode="json"))
        except InvalidBoardStateError as error:
            raise InvalidRequestError(str(error)) from error


class SetBoardStateRequest(BaseModel):
    game_id: UUID
    state: BoardStateModel


# --- RESPONSE MODELS ---
class GameResponse(BaseModel):
    game_id: UUID
    layout: str
    side_to_move: Side
    human_side: Side
    difficulty: Difficulty
    scores: dict[Side, int]
    status: Status
    winner: Optional[Side]
    chain_square: Optional[str]
    move_history: list[str]


class LegalMovesResponse(BaseModel):
    game_id: UUID
    square: str
    legal_moves: list[str]


class MoveResponse(BaseModel):
    game: GameResponse
    notation: str
    captured_square: Optional[str]
    promoted: bool
    can_continue_capture: bool


class ComputerTurnResponse(BaseModel):
    game: GameResponse
    moves: list[str]
    handed_back: bool


class TranscriptResponse(BaseModel):
    game_id: UUID
    format: TranscriptFormat
    content: str | dict[str, Any]
