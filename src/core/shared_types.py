"""
Type definitions used across layers
"""

from enum import StrEnum


class Status(StrEnum):
    IN_PROGRESS = "in progress"
    OVER = "over"


class Difficulty(StrEnum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Side(StrEnum):
    """The two players. Side A starts on rows 0-2, side B on rows 5-7."""

    A = "a"
    B = "b"

    @property
    def opponent(self) -> "Side":
        return Side.B if self == Side.A else Side.A


# Labels used in transcripts
SIDE_LABELS: dict[Side, str] = {
    Side.A: "Side A",
    Side.B: "Side B",
}


class TranscriptFormat(StrEnum):
    TEXT = "text"
    JSON = "json"
