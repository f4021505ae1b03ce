"""Orchestration of communication from API models to the game logic, the move search and the move log (and the reverse direction)."""

import logging
import random
import time
from typing import Optional
from uuid import UUID

from src.api.models import (
    ComputerMoveRequest,
    ComputerTurnResponse,
    CreateGameRequest,
    DeleteGameRequest,
    ExportRequest,
    GameResponse,
    GetGameRequest,
    JumpRequest,
    LegalMovesRequest,
    LegalMovesResponse,
    MoveRequest,
    MoveResponse,
    RestartGameRequest,
    SetBoardStateRequest,
    TranscriptResponse,
)
from src.core.config import CONFIG, Config
from src.core.exceptions import (
    GameStateError,
    IllegalMoveError,
    InvalidRequestError,
    NotYourTurnError,
    RepositoryError,
)
from src.core.log import configure_logging
from src.core.shared_types import TranscriptFormat
from src.db.repository import GameRepository
from src.draughts.game import Game, MoveResult
from src.draughts.search import MoveSearcher
from src.draughts.square import Square
from src.services.session import GameSession

logger = logging.getLogger(__name__)


class DraughtsService:
    """Orchestration of layers for a game of draughts against the computer."""

    def __init__(
        self,
        repository: GameRepository,
        config: Config = CONFIG,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.repo = repository
        self.config = config
        self.rng = rng or random.Random()
        configure_logging(config.log_level)

    # -- API logic ---
    def create_new_game(self, request: CreateGameRequest) -> GameResponse:
        """Start a new game. If the computer moves first, call `play_computer_turn` next."""
        session = GameSession(
            game=Game.new_game(first_side=request.first_side),
            human_side=request.human_side,
            difficulty=request.difficulty,
            first_side=request.first_side,
            replay_interval=self.config.replay.interval_s,
        )
        stored_session, game_id = self.repo.create_game(session)
        logger.info(
            "New game %s: human plays side %s, difficulty %s",
            game_id,
            request.human_side,
            request.difficulty,
        )
        return self._create_game_response(game_id, stored_session)

    def get_game_state(self, request: GetGameRequest) -> GameResponse:
        session = self._fetch_game(request.game_id)
        return self._create_game_response(request.game_id, session)

    def legal_moves(self, request: LegalMovesRequest) -> LegalMovesResponse:
        """The legal moves of the piece on a square (empty list for an empty square)."""
        session = self._fetch_game(request.game_id)
        square = Square.from_algebraic(request.square)
        moves = session.game.legal_moves(square)
        return LegalMovesResponse(
            game_id=request.game_id,
            square=request.square,
            legal_moves=[move.to_notation() for move in moves],
        )

    def make_move(self, request: MoveRequest) -> MoveResponse:
        """
        The human side attempts a move
        ----

        1. the game must still be in progress and it must be the human's turn
        2. a running replay is stopped (the game returns to its latest state)
        3. apply the move --> rejected moves raise IllegalMoveError
        4. hand the turn over, unless a capture chain continues
        5. record the move
        """
        session = self._fetch_game(request.game_id)
        game = session.game
        self._return_to_latest(session)

        if game.is_over:
            raise GameStateError(f"Game is not in progress. status: {game.status}")
        if game.side_to_move != session.human_side:
            raise NotYourTurnError(
                f"It is not your turn. Waiting for side {game.side_to_move} to make a move first."
            )

        origin = Square.from_algebraic(request.from_square)
        destination = Square.from_algebraic(request.to_square)
        result = self._play(session, origin, destination)
        if result is None:
            raise IllegalMoveError(
                f"Move not allowed: {request.from_square} -> {request.to_square}"
            )

        self.repo.update_game(request.game_id, session)
        return MoveResponse(
            game=self._create_game_response(request.game_id, session),
            notation=result.notation,
            captured_square=(
                result.move.captured_square.to_algebraic()
                if result.move.captured_square
                else None
            ),
            promoted=result.promoted,
            can_continue_capture=result.can_continue_capture,
        )

    def play_computer_turn(self, request: ComputerMoveRequest) -> ComputerTurnResponse:
        """
        Let the computer play its whole turn (every jump of a capture chain)
        ----

        The search gets one deadline for the whole turn. If it comes back empty handed (no move, or the deadline passed
        before any move was found) the turn goes back to the human side, with the board as it was after the last
        committed move.
        """
        session = self._fetch_game(request.game_id)
        game = session.game
        self._return_to_latest(session)

        if game.is_over:
            raise GameStateError(f"Game is not in progress. status: {game.status}")
        if not session.is_computer_turn:
            raise NotYourTurnError("It is not the computer's turn.")

        time_limit = self.config.search.time_limit_s
        deadline = time.monotonic() + time_limit if time_limit is not None else None
        searcher = MoveSearcher(game, self.config, self.rng)

        played: list[str] = []
        handed_back = False
        while not game.is_over:
            move = searcher.choose_move(session.difficulty, deadline)
            if move is None:
                logger.warning(
                    "No move found for side %s in game %s, handing the turn back",
                    game.side_to_move,
                    request.game_id,
                )
                self._hand_back(session)
                handed_back = True
                break

            result = self._play(session, move.origin, move.destination)
            if result is None:
                # not expected: the search only proposes legal moves
                self._hand_back(session)
                handed_back = True
                break
            played.append(result.notation)
            if not result.can_continue_capture:
                break

        self.repo.update_game(request.game_id, session)
        return ComputerTurnResponse(
            game=self._create_game_response(request.game_id, session),
            moves=played,
            handed_back=handed_back,
        )

    def jump_to_state(self, request: JumpRequest) -> GameResponse:
        """Show an earlier state of the game (the next move returns to the latest state)."""
        session = self._fetch_game(request.game_id)
        if not session.log.jump_to_state(request.index):
            raise InvalidRequestError(
                f"No state with index {request.index}. The game has {len(session.log.snapshots)} states."
            )
        return self._create_game_response(request.game_id, session)

    def set_board_state(self, request: SetBoardStateRequest) -> GameResponse:
        """Load a position from outside. The move log starts over from there."""
        session = self._fetch_game(request.game_id)
        snapshot = request.state.to_snapshot()
        session.log.clear()
        session.game.set_board_state(snapshot)
        self.repo.update_game(request.game_id, session)
        return self._create_game_response(request.game_id, session)

    def export_transcript(self, request: ExportRequest) -> TranscriptResponse:
        session = self._fetch_game(request.game_id)
        content = (
            session.log.export_as_json()
            if request.format == TranscriptFormat.JSON
            else session.log.export_as_text()
        )
        return TranscriptResponse(
            game_id=request.game_id, format=request.format, content=content
        )

    def restart_game(self, request: RestartGameRequest) -> GameResponse:
        session = self._fetch_game(request.game_id)
        session.log.clear()
        session.game.reset(first_side=session.first_side)
        self.repo.update_game(request.game_id, session)
        return self._create_game_response(request.game_id, session)

    def delete_game(self, request: DeleteGameRequest) -> None:
        """Handle a request to delete a Game record."""
        self.repo.delete_game(request.game_id)

    # -- Internal helpers --
    def _play(
        self, session: GameSession, origin: Square, destination: Square
    ) -> Optional[MoveResult]:
        """Apply + switch turn + record. Returns None when the game rejects the move."""
        game = session.game
        snapshot_before = game.get_board_state()
        result = game.apply_move(origin, destination)
        if result is None:
            return None

        if not result.can_continue_capture and not game.is_over:
            game.switch_turn()

        session.log.record(result, snapshot_before)
        return result

    def _hand_back(self, session: GameSession) -> None:
        """The computer gives up its turn. The log keeps the handed back state as its latest one."""
        session.game.switch_turn()
        session.log.update_latest_state()

    def _return_to_latest(self, session: GameSession) -> None:
        """A move is always played on the latest state: stop a replay, leave an earlier state that was being viewed."""
        session.log.stop_replay()
        if session.log.snapshots and not session.log.is_at_latest():
            session.log.jump_to_state(len(session.log.snapshots) - 1)

    def _create_game_response(self, game_id: UUID, session: GameSession) -> GameResponse:
        game = session.game
        return GameResponse(
            game_id=game_id,
            layout=game.board.to_layout(),
            side_to_move=game.side_to_move,
            human_side=session.human_side,
            difficulty=session.difficulty,
            scores=dict(game.scores),
            status=game.status,
            winner=game.winner,
            chain_square=(
                game.chain_square.to_algebraic() if game.chain_square else None
            ),
            move_history=[move.notation for move in session.log.moves],
        )

    def _fetch_game(self, game_id: UUID) -> GameSession:
        """Attempt to find the game in the repository and raise error if it fails."""
        session = self.repo.get_game(game_id)
        if session is None:
            raise RepositoryError(f"Game with {game_id=} not found.")
        return session
