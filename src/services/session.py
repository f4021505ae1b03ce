"""
Everything the service keeps about one game: the game itself, its move log and who plays which side.

(placed in its own module as both the service and the repositories need it)
"""

from dataclasses import dataclass, field
from typing import Optional

from src.core.shared_types import Difficulty, Side
from src.draughts.game import Game
from src.draughts.history import MoveLog


@dataclass
class GameSession:
    game: Game
    human_side: Side = Side.A
    difficulty: Difficulty = Difficulty.MEDIUM
    first_side: Side = Side.A
    replay_interval: Optional[float] = None
    log: MoveLog = field(init=False)

    def __post_init__(self) -> None:
        self.log = MoveLog(self.game, self.replay_interval)

    @property
    def computer_side(self) -> Side:
        return self.human_side.opponent

    @property
    def is_computer_turn(self) -> bool:
        return self.game.side_to_move == self.computer_side
