"""Unit tests for src/services/draughts_service.py"""

import random
from uuid import UUID, uuid4

import pytest

from src.api.models import (
    BoardStateModel,
    ComputerMoveRequest,
    CreateGameRequest,
    DeleteGameRequest,
    ExportRequest,
    GameResponse,
    GetGameRequest,
    JumpRequest,
    LegalMovesRequest,
    MoveRequest,
    RestartGameRequest,
    SetBoardStateRequest,
)
from src.core.config import Config
from src.core.exceptions import (
    GameError,
    GameStateError,
    IllegalMoveError,
    InvalidRequestError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.shared_types import Difficulty, Side, Status, TranscriptFormat
from src.db.memory_repository import InMemoryGameRepository
from src.draughts.board import Board
from src.services.draughts_service import DraughtsService
from tests.conftest import build_layout

STARTING_LAYOUT = Board.starting().to_layout()


@pytest.fixture
def service(memory_repository: InMemoryGameRepository, config: Config) -> DraughtsService:
    return DraughtsService(memory_repository, config, random.Random(99))


@pytest.fixture
def new_game(service: DraughtsService) -> GameResponse:
    """Human plays side A (moving first) against a medium computer"""
    return service.create_new_game(CreateGameRequest())


def set_state(
    service: DraughtsService,
    game_id: UUID,
    pieces: dict[tuple[int, int], str],
    side_to_move: Side = Side.A,
) -> GameResponse:
    state = BoardStateModel(
        layout=build_layout(pieces),
        side_to_move=side_to_move,
        scores={Side.A: 0, Side.B: 0},
    )
    return service.set_board_state(SetBoardStateRequest(game_id=game_id, state=state))


# -- CREATION LOGIC ---
def test_create_new_game(new_game: GameResponse, memory_repository: InMemoryGameRepository) -> None:
    assert new_game.layout == STARTING_LAYOUT
    assert new_game.side_to_move == Side.A
    assert new_game.human_side == Side.A
    assert new_game.difficulty == Difficulty.MEDIUM
    assert new_game.scores == {Side.A: 0, Side.B: 0}
    assert new_game.status == Status.IN_PROGRESS
    assert new_game.winner is None
    assert new_game.move_history == []
    assert memory_repository.get_game(new_game.game_id) is not None


def test_get_game_state(service: DraughtsService, new_game: GameResponse) -> None:
    assert service.get_game_state(GetGameRequest(game_id=new_game.game_id)) == new_game


def test_unknown_game(service: DraughtsService) -> None:
    with pytest.raises(RepositoryError):
        service.get_game_state(GetGameRequest(game_id=uuid4()))


def test_legal_moves(service: DraughtsService, new_game: GameResponse) -> None:
    response = service.legal_moves(LegalMovesRequest(game_id=new_game.game_id, square="b3"))
    assert response.legal_moves == ["b3-a4", "b3-c4"]

    empty = service.legal_moves(LegalMovesRequest(game_id=new_game.game_id, square="d4"))
    assert empty.legal_moves == []


# -- HUMAN MOVES ---
def test_make_move(service: DraughtsService, new_game: GameResponse) -> None:
    response = service.make_move(MoveRequest(game_id=new_game.game_id, from_square="b3", to_square="c4"))

    assert response.notation == "b3-c4"
    assert response.captured_square is None
    assert not response.can_continue_capture
    assert response.game.side_to_move == Side.B
    assert response.game.move_history == ["b3-c4"]


def test_illegal_move(service: DraughtsService, new_game: GameResponse) -> None:
    with pytest.raises(IllegalMoveError):
        service.make_move(MoveRequest(game_id=new_game.game_id, from_square="b3", to_square="d5"))

    state = service.get_game_state(GetGameRequest(game_id=new_game.game_id))
    assert state.layout == STARTING_LAYOUT
    assert state.move_history == []


def test_not_your_turn(service: DraughtsService, new_game: GameResponse) -> None:
    service.make_move(MoveRequest(game_id=new_game.game_id, from_square="b3", to_square="c4"))
    with pytest.raises(NotYourTurnError):
        service.make_move(MoveRequest(game_id=new_game.game_id, from_square="d3", to_square="e4"))


def test_human_capture_chain(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    set_state(service, game_id, {(2, 1): "a", (3, 2): "b", (5, 4): "b", (0, 7): "a"})

    first = service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="d5"))
    assert first.captured_square == "c4"
    assert first.can_continue_capture
    assert first.game.chain_square == "d5"
    assert first.game.side_to_move == Side.A

    # the chain piece must keep capturing, the other pieces wait
    with pytest.raises(IllegalMoveError):
        service.make_move(MoveRequest(game_id=game_id, from_square="d5", to_square="c6"))
    with pytest.raises(IllegalMoveError):
        service.make_move(MoveRequest(game_id=game_id, from_square="h1", to_square="g2"))

    second = service.make_move(MoveRequest(game_id=game_id, from_square="d5", to_square="f7"))
    assert not second.can_continue_capture
    assert second.game.status == Status.OVER
    assert second.game.winner == Side.A
    assert second.game.scores == {Side.A: 2, Side.B: 0}
    assert second.game.move_history == ["b3xd5", "d5xf7"]


def test_no_moves_after_the_game_is_over(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    set_state(service, game_id, {(2, 1): "a", (3, 2): "b", (7, 0): "a"})
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="d5"))

    with pytest.raises(GameStateError):
        service.make_move(MoveRequest(game_id=game_id, from_square="a8", to_square="b7"))
    with pytest.raises(GameStateError):
        service.play_computer_turn(ComputerMoveRequest(game_id=game_id))


# -- COMPUTER MOVES ---
def test_computer_turn(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))

    response = service.play_computer_turn(ComputerMoveRequest(game_id=game_id))

    assert len(response.moves) == 1
    assert not response.handed_back
    assert response.game.side_to_move == Side.A
    assert response.game.move_history == ["b3-c4", response.moves[0]]


def test_computer_waits_for_its_turn(service: DraughtsService, new_game: GameResponse) -> None:
    with pytest.raises(NotYourTurnError):
        service.play_computer_turn(ComputerMoveRequest(game_id=new_game.game_id))


def test_computer_moves_first(service: DraughtsService) -> None:
    created = service.create_new_game(CreateGameRequest(human_side=Side.B, difficulty=Difficulty.EASY))
    response = service.play_computer_turn(ComputerMoveRequest(game_id=created.game_id))

    assert len(response.moves) == 1
    assert response.game.side_to_move == Side.B


def test_computer_plays_the_whole_chain(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    set_state(service, game_id, {(5, 4): "b", (4, 3): "a", (2, 1): "a"}, side_to_move=Side.B)

    response = service.play_computer_turn(ComputerMoveRequest(game_id=game_id))

    assert response.moves == ["e6xc4", "c4xa2"]
    assert response.game.status == Status.OVER
    assert response.game.winner == Side.B
    assert response.game.scores == {Side.A: 0, Side.B: 2}


def test_computer_out_of_time_hands_the_turn_back(memory_repository: InMemoryGameRepository) -> None:
    config = Config()
    config.search.time_limit_s = -1.0
    service = DraughtsService(memory_repository, config, random.Random(0))
    created = service.create_new_game(CreateGameRequest(human_side=Side.B, difficulty=Difficulty.HARD))

    response = service.play_computer_turn(ComputerMoveRequest(game_id=created.game_id))

    assert response.handed_back
    assert response.moves == []
    assert response.game.side_to_move == Side.B
    assert response.game.layout == STARTING_LAYOUT


def test_handed_back_turn_survives_navigation(memory_repository: InMemoryGameRepository) -> None:
    config = Config()
    config.search.time_limit_s = -1.0
    service = DraughtsService(memory_repository, config, random.Random(0))
    created = service.create_new_game(CreateGameRequest(difficulty=Difficulty.HARD))
    game_id = created.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))

    assert service.play_computer_turn(ComputerMoveRequest(game_id=game_id)).handed_back

    service.jump_to_state(JumpRequest(game_id=game_id, index=0))
    latest = service.jump_to_state(JumpRequest(game_id=game_id, index=1))
    assert latest.side_to_move == Side.A

    # the human side keeps the turn when a move returns to the latest state
    service.jump_to_state(JumpRequest(game_id=game_id, index=0))
    response = service.make_move(MoveRequest(game_id=game_id, from_square="f3", to_square="g4"))
    assert response.game.move_history == ["b3-c4", "f3-g4"]


def test_hard_computer_turn(memory_repository: InMemoryGameRepository) -> None:
    config = Config()
    config.search.depth = 2
    config.search.time_limit_s = None
    service = DraughtsService(memory_repository, config, random.Random(0))
    created = service.create_new_game(CreateGameRequest(human_side=Side.B, difficulty=Difficulty.HARD))

    response = service.play_computer_turn(ComputerMoveRequest(game_id=created.game_id))
    assert len(response.moves) == 1
    assert not response.handed_back


# -- HISTORY ---
def test_jump_to_state(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))
    service.play_computer_turn(ComputerMoveRequest(game_id=game_id))

    earlier = service.jump_to_state(JumpRequest(game_id=game_id, index=0))
    assert earlier.layout == STARTING_LAYOUT
    assert len(earlier.move_history) == 2

    with pytest.raises(InvalidRequestError):
        service.jump_to_state(JumpRequest(game_id=game_id, index=3))

    # the next move is played on the latest state
    response = service.make_move(MoveRequest(game_id=game_id, from_square="f3", to_square="g4"))
    assert len(response.game.move_history) == 3
    assert response.game.side_to_move == Side.B


def test_set_board_state_starts_a_new_history(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))

    response = set_state(service, game_id, {(2, 1): "a", (5, 2): "b"})
    assert response.move_history == []
    assert response.layout == build_layout({(2, 1): "a", (5, 2): "b"})


def test_export_transcript(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))

    text = service.export_transcript(ExportRequest(game_id=game_id))
    assert text.format == TranscriptFormat.TEXT
    assert isinstance(text.content, str)
    assert "1. Side A: b3-c4" in text.content

    exported = service.export_transcript(ExportRequest(game_id=game_id, format=TranscriptFormat.JSON))
    assert isinstance(exported.content, dict)
    assert exported.content["game"]["total_moves"] == 1
    assert exported.content["moves"][0]["notation"] == "b3-c4"


def test_restart_game(service: DraughtsService, new_game: GameResponse) -> None:
    game_id = new_game.game_id
    service.make_move(MoveRequest(game_id=game_id, from_square="b3", to_square="c4"))

    response = service.restart_game(RestartGameRequest(game_id=game_id))
    assert response.layout == STARTING_LAYOUT
    assert response.side_to_move == Side.A
    assert response.move_history == []


def test_delete_game(service: DraughtsService, new_game: GameResponse) -> None:
    service.delete_game(DeleteGameRequest(game_id=new_game.game_id))
    with pytest.raises(GameError):
        service.get_game_state(GetGameRequest(game_id=new_game.game_id))


# -- COMPUTER AGAINST COMPUTER ---
def test_computers_take_turns(memory_repository: InMemoryGameRepository) -> None:
    """Two easy computers alternate (by swapping the human side after every turn). The log keeps up with the game."""
    service = DraughtsService(memory_repository, Config(), random.Random(5))
    created = service.create_new_game(CreateGameRequest(human_side=Side.B, difficulty=Difficulty.EASY))
    session = memory_repository.get_game(created.game_id)
    assert session is not None

    for _ in range(30):
        mover = session.computer_side
        response = service.play_computer_turn(ComputerMoveRequest(game_id=created.game_id))
        assert response.moves
        assert not response.handed_back
        assert len(response.game.move_history) == session.game.move_count
        if response.game.status == Status.OVER:
            assert response.game.winner == mover
            break
        assert response.game.side_to_move == mover.opponent
        session.human_side = session.human_side.opponent
