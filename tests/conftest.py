"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/variables required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest

from src.core.config import Config
from src.core.shared_types import Side
from src.db.memory_repository import InMemoryGameRepository
from src.draughts.board import Board
from src.draughts.game import Game
from src.draughts.square import BOARD_SIZE

EMPTY_LAYOUT = "/".join(["." * BOARD_SIZE] * BOARD_SIZE)

# (row, col) -> layout character ('a', 'b', 'A', 'B')
Placement = dict[tuple[int, int], str]


def build_layout(pieces: Placement) -> str:
    """Layout string with only the given pieces on the board"""
    rows = [["."] * BOARD_SIZE for _ in range(BOARD_SIZE)]
    for (row, col), character in pieces.items():
        rows[row][col] = character
    return "/".join("".join(row) for row in rows)


@pytest.fixture
def game_with() -> Callable[..., Game]:
    """Call the inner function with the pieces to place and (optionally) the side to move"""

    def _create_game(pieces: Placement, side_to_move: Side = Side.A) -> Game:
        board = Board.from_layout(build_layout(pieces))
        return Game(board=board, side_to_move=side_to_move)

    return _create_game


@pytest.fixture
def config() -> Config:
    """Fresh defaults (independent of any config.toml lying around)"""
    return Config()


@pytest.fixture
def memory_repository() -> Generator[InMemoryGameRepository, None, None]:
    """Ensures to clear the repository between tests"""
    repo = InMemoryGameRepository()
    try:
        yield repo
    finally:
        repo.clear()
