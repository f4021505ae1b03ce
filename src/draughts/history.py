"""
Move log: an append-only record of the moves played plus a snapshot of the game after every move.

The snapshots make it possible to jump back to any earlier state and to replay the game step by step.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from src.core.config import CONFIG
from src.core.shared_types import SIDE_LABELS, Side
from src.draughts.game import Game, MoveResult
from src.draughts.snapshot import BoardSnapshot
from src.draughts.square import Square

logger = logging.getLogger(__name__)

StepCallback = Callable[[int], None]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class MoveRecord:
    number: int
    side: Side
    origin: Square
    destination: Square
    is_capture: bool
    captured_square: Optional[Square]
    promoted: bool
    notation: str
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "side": self.side.value,
            "notation": self.notation,
            "from": self.origin.to_algebraic(),
            "to": self.destination.to_algebraic(),
            "is_capture": self.is_capture,
            "captured": (
                self.captured_square.to_algebraic() if self.captured_square else None
            ),
            "is_king": self.promoted,
        }


class MoveLog:
    """
    History of one game
    ----

    `snapshots[0]` is the state before the first move, `snapshots[i]` the state after move i.
    """

    def __init__(self, game: Game, replay_interval: Optional[float] = None) -> None:
        self.game = game
        self.moves: list[MoveRecord] = []
        self.snapshots: list[BoardSnapshot] = []
        self.current_index = -1
        self.replay_interval = (
            CONFIG.replay.interval_s if replay_interval is None else replay_interval
        )
        self.is_replaying = False
        self._replay_position = 0
        self._on_step: Optional[StepCallback] = None
        self._paused = False

    # --- RECORDING ---
    def record(self, result: MoveResult, snapshot_before: BoardSnapshot) -> MoveRecord:
        """Append the move and keep a snapshot of the game right after it (plus the one before, for the first move)

        NOTE: A running replay must be stopped before the move is applied, not here (the game already moved).
        """
        move = MoveRecord(
            number=len(self.moves) + 1,
            side=result.side,
            origin=result.move.origin,
            destination=result.move.destination,
            is_capture=result.move.is_capture,
            captured_square=result.move.captured_square,
            promoted=result.promoted,
            notation=result.notation,
        )
        self.moves.append(move)

        if len(self.snapshots) == len(self.moves) - 1:
            self.snapshots.append(snapshot_before)

        self.snapshots.append(self.game.get_board_state())
        self.current_index = len(self.snapshots) - 1
        logger.debug("Recorded move %d: %s", move.number, move.notation)
        return move

    def update_latest_state(self) -> None:
        """The game changed without a move (a turn handed back): the latest snapshot takes the current state"""
        if not self.snapshots:
            return
        self.snapshots[-1] = self.game.get_board_state()
        self.current_index = len(self.snapshots) - 1

    def get_move(self, index: int) -> MoveRecord:
        return self.moves[index]

    def current_move(self) -> Optional[MoveRecord]:
        """The move that led to the state currently shown"""
        if self.current_index <= 0:
            return None
        return self.moves[self.current_index - 1]

    def clear(self) -> None:
        self.stop_replay()
        self.moves = []
        self.snapshots = []
        self.current_index = -1

    # --- NAVIGATION ---
    def jump_to_state(self, index: int) -> bool:
        """Put the game in the state of snapshot `index`. Out of range: nothing happens."""
        if index < 0 or index >= len(self.snapshots):
            return False
        self.current_index = index
        self.game.set_board_state(self.snapshots[index])
        return True

    def jump_to_move(self, move_index: int) -> bool:
        """State right after the move with (0-based) index `move_index`"""
        return self.jump_to_state(move_index + 1)

    def is_at_latest(self) -> bool:
        return self.current_index == len(self.snapshots) - 1

    # --- REPLAY ---
    def start_replay(self, on_step: Optional[StepCallback] = None, from_index: int = 0) -> bool:
        """
        Start showing the game from snapshot `from_index`.
        A replay that is already running gets stopped first.

        The caller controls the pace: call `step()` on every tick, or `play()` for a fixed interval.
        """
        if not self.moves or not (0 <= from_index < len(self.snapshots)):
            return False
        if self.is_replaying:
            self.stop_replay()

        self.is_replaying = True
        self._paused = False
        self._on_step = on_step
        logger.info("Replay started at state %d of %d", from_index, len(self.snapshots) - 1)
        self._show(from_index)
        return True

    def step(self) -> bool:
        """Advance the replay one snapshot. Returns False once there is nothing left to show (the replay then stops)."""
        if not self.is_replaying or self._paused:
            return False
        next_index = self._replay_position + 1
        if next_index >= len(self.snapshots):
            self.stop_replay()
            return False
        self._show(next_index)
        return True

    def play(self, interval: Optional[float] = None, sleep: Callable[[float], None] = time.sleep) -> None:
        """Fixed interval playback until the replay ends or is paused (ex. from the step callback)."""
        pause = self.replay_interval if interval is None else interval
        while self.is_replaying and not self._paused:
            sleep(pause)
            if not self.step():
                break

    def pause_replay(self) -> None:
        self._paused = True

    def resume_replay(self) -> bool:
        if not self.is_replaying:
            return False
        self._paused = False
        return True

    def stop_replay(self) -> None:
        """End the replay and go back to the final state of the game"""
        was_replaying = self.is_replaying
        self.is_replaying = False
        self._paused = False
        self._on_step = None
        if was_replaying and self.snapshots:
            self.jump_to_state(len(self.snapshots) - 1)

    def _show(self, index: int) -> None:
        self._replay_position = index
        self.jump_to_state(index)
        if self._on_step:
            self._on_step(index)

    # --- EXPORT ---
    def final_state(self) -> Optional[BoardSnapshot]:
        return self.snapshots[-1] if self.snapshots else None

    def export_as_text(self) -> str:
        final_state = self.final_state()
        if not self.moves or final_state is None:
            return "No moves recorded."

        lines = ["DRAUGHTS/CHECKERS GAME", "======================", ""]
        if final_state.game_over and final_state.winner:
            lines.append(f"Winner: {SIDE_LABELS[final_state.winner]}")
        lines.append(f"Total Moves: {len(self.moves)}")
        lines.append(
            f"Final Score - {SIDE_LABELS[Side.A]}: {final_state.score(Side.A)} | "
            f"{SIDE_LABELS[Side.B]}: {final_state.score(Side.B)}"
        )
        lines.extend(["", "MOVE HISTORY", "------------"])

        for move in self.moves:
            king_text = " (KING!)" if move.promoted else ""
            lines.append(f"{move.number}. {SIDE_LABELS[move.side]}: {move.notation}{king_text}")

        return "\n".join(lines) + "\n"

    def export_as_json(self) -> dict[str, Any]:
        final_state = self.final_state()
        winner = final_state.winner if final_state and final_state.game_over else None
        return {
            "game": {
                "winner": winner.value if winner else None,
                "total_moves": len(self.moves),
                "final_score": {
                    side.value: (final_state.score(side) if final_state else 0)
                    for side in Side
                },
            },
            "moves": [move.to_dict() for move in self.moves],
        }
