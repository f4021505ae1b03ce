"""
Move selection for the computer-controlled side
-----

Key idea: Use strategy pattern, one strategy per difficulty.

* easy: mostly random, misses captures now and then
* medium: always takes a capture, otherwise the best scoring moves of a quick heuristic
* hard: minimax lookahead with alpha-beta pruning

Every strategy works on the full list of legal moves of the side to move. The lookahead plays moves out on the
live game, but always inside `Game.preserved_state()`, so whatever happens (a deadline passing included) the game
is back in its committed state when the search returns.
"""

import asyncio
import logging
import math
import random
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from src.core.config import CONFIG, Config
from src.core.exceptions import SearchTimeoutError
from src.core.shared_types import Difficulty, Side
from src.draughts.evaluate import evaluate_board, score_move
from src.draughts.game import Game
from src.draughts.moves import MoveCandidate

logger = logging.getLogger(__name__)


class Strategy(Protocol):
    def choose(
        self, game: Game, moves: list[MoveCandidate], deadline: Optional[float]
    ) -> Optional[MoveCandidate]: ...


def _check_deadline(deadline: Optional[float]) -> None:
    if deadline is not None and time.monotonic() > deadline:
        raise SearchTimeoutError("Search deadline passed")


# --- EASY ---
@dataclass
class RandomStrategy:
    """Picks a random capture, but with a fixed chance it ignores captures and picks any random move."""

    rng: random.Random
    capture_miss_rate: float = 0.4

    def choose(
        self, game: Game, moves: list[MoveCandidate], deadline: Optional[float]
    ) -> Optional[MoveCandidate]:
        if not moves:
            return None
        captures = [move for move in moves if move.is_capture]
        should_miss_capture = self.rng.random() < self.capture_miss_rate
        if captures and not should_miss_capture:
            return self.rng.choice(captures)
        return self.rng.choice(moves)


# --- MEDIUM ---
@dataclass
class HeuristicStrategy:
    """Captures first. Otherwise rank the moves with `score_move` and pick among the top fraction."""

    rng: random.Random
    config: Config
    top_fraction: float = 0.3

    def choose(
        self, game: Game, moves: list[MoveCandidate], deadline: Optional[float]
    ) -> Optional[MoveCandidate]:
        if not moves:
            return None

        captures = [move for move in moves if move.is_capture]
        if captures:
            return self.rng.choice(captures)

        ranked = self.rank(game, moves)
        top_count = max(1, math.floor(len(ranked) * self.top_fraction))
        return self.rng.choice(ranked[:top_count])[0]

    def rank(
        self, game: Game, moves: list[MoveCandidate]
    ) -> list[tuple[MoveCandidate, float]]:
        """Highest score first. `sorted` is stable, so equal scores keep the order in which moves were generated."""
        side = game.side_to_move
        scored = [
            (move, score_move(game, move, side, self.config.heuristic))
            for move in moves
        ]
        return sorted(scored, key=lambda item: item[1], reverse=True)


# --- HARD ---
@dataclass
class LookaheadStrategy:
    """
    Fixed depth minimax with alpha-beta pruning
    ----

    ----
    Scores are from the point of view of the side that is searching.
    A capture chain keeps the turn with the same side, so the tree does not alternate blindly: after every simulated
    move we ask the game whose turn it is.

    Pruning only skips branches that cannot change the result; `prune=False` gives plain minimax (same move, more nodes).
    """

    config: Config
    depth: int = 3
    prune: bool = True
    nodes: int = field(default=0, init=False)

    def choose(
        self, game: Game, moves: list[MoveCandidate], deadline: Optional[float]
    ) -> Optional[MoveCandidate]:
        self.nodes = 0
        searching_side = game.side_to_move
        best_move: Optional[MoveCandidate] = None
        best_score = -math.inf

        try:
            for move in moves:
                score = self.minimax(game, move, self.depth, -math.inf, math.inf, searching_side, deadline)
                # strictly better only: ties keep the first move generated
                if score > best_score:
                    best_score = score
                    best_move = move
        except SearchTimeoutError:
            logger.warning(
                "Search deadline passed after %d nodes, returning best move so far: %s",
                self.nodes,
                best_move.to_notation() if best_move else None,
            )
            return best_move

        logger.debug("Searched %d nodes, best score %.1f", self.nodes, best_score)
        return best_move

    def minimax(
        self,
        game: Game,
        move: MoveCandidate,
        depth: int,
        alpha: float,
        beta: float,
        searching_side: Side,
        deadline: Optional[float],
    ) -> float:
        """Value of playing `move` in the current position, looking `depth` moves deep."""
        self.nodes += 1
        _check_deadline(deadline)
        weights = self.config.eval

        if depth == 0:
            return evaluate_board(game, searching_side, weights, move, game.side_to_move)

        with game.preserved_state():
            result = game.apply_move(move.origin, move.destination)
            if result is None:
                # not expected for moves taken from the legal move list
                return evaluate_board(game, searching_side, weights)

            if game.is_over:
                return weights.win_score if game.winner == searching_side else -weights.win_score

            if not result.can_continue_capture:
                game.switch_turn()

            mover = game.side_to_move
            replies = game.all_moves(mover)
            if not replies:
                return evaluate_board(game, searching_side, weights)

            if mover == searching_side:
                value = -math.inf
                for reply in replies:
                    value = max(value, self.minimax(game, reply, depth - 1, alpha, beta, searching_side, deadline))
                    alpha = max(alpha, value)
                    if self.prune and beta <= alpha:
                        break
            else:
                value = math.inf
                for reply in replies:
                    value = min(value, self.minimax(game, reply, depth - 1, alpha, beta, searching_side, deadline))
                    beta = min(beta, value)
                    if self.prune and beta <= alpha:
                        break
            return value


# --- STRATEGY PATTERN: ONE STRATEGY PER DIFFICULTY ---
StrategyFactory = Callable[[Config, random.Random], Strategy]
STRATEGIES: dict[Difficulty, StrategyFactory] = {
    Difficulty.EASY: lambda config, rng: RandomStrategy(
        rng, config.search.easy_capture_miss_rate
    ),
    Difficulty.MEDIUM: lambda config, rng: HeuristicStrategy(
        rng, config, config.search.medium_top_fraction
    ),
    Difficulty.HARD: lambda config, rng: LookaheadStrategy(
        config, depth=config.search.depth
    ),
}


class MoveSearcher:
    """Chooses moves for the side to move of one game"""

    def __init__(
        self,
        game: Game,
        config: Config = CONFIG,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.game = game
        self.config = config
        self.rng = rng or random.Random()

    def candidate_moves(self) -> list[MoveCandidate]:
        return self.game.all_moves(self.game.side_to_move)

    def choose_move(
        self, difficulty: Difficulty, deadline: Optional[float] = None
    ) -> Optional[MoveCandidate]:
        """
        Pick a move for the side to move
        ----

        `deadline` is an absolute `time.monotonic()` value. Past it the search stops and the best move found so far
        (possibly None) is returned. Returns None as well when there is nothing to move.
        """
        if self.game.is_over:
            return None
        moves = self.candidate_moves()
        if not moves:
            return None

        strategy = STRATEGIES[difficulty](self.config, self.rng)
        started = time.monotonic()
        move = strategy.choose(self.game, moves, deadline)
        logger.info(
            "Side %s (%s) chose %s out of %d moves in %.3fs",
            self.game.side_to_move,
            difficulty,
            move.to_notation() if move else None,
            len(moves),
            time.monotonic() - started,
        )
        return move

    async def select_move(
        self,
        difficulty: Difficulty,
        time_limit: Optional[float] = None,
        thinking_delay: Optional[float] = None,
    ) -> Optional[MoveCandidate]:
        """
        Asynchronous variant: waits for the thinking delay first (so a caller can show a "thinking" indicator)
        and then searches synchronously. `time_limit` (seconds) bounds the search itself.
        """
        delay = self.config.search.thinking_delay_s if thinking_delay is None else thinking_delay
        if delay > 0:
            await asyncio.sleep(delay)
        limit = self.config.search.time_limit_s if time_limit is None else time_limit
        deadline = time.monotonic() + limit if limit is not None else None
        return self.choose_move(difficulty, deadline)
