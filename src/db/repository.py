"""Protocol repository (games only live in memory, see memory_repository.py)"""

from typing import Protocol
from uuid import UUID

from src.services.session import GameSession


class GameRepository(Protocol):
    """Storage of running game sessions"""

    def get_game(self, game_id: UUID) -> GameSession | None:
        """Get game by ID, if record exists."""
        ...

    def create_game(self, session: GameSession) -> tuple[GameSession, UUID]:
        """Store new game and return the stored data + newly created game ID."""
        ...

    def update_game(self, game_id: UUID, session: GameSession) -> GameSession | None:
        """Replace an existing record."""
        ...

    def delete_game(self, game_id: UUID) -> GameSession | None:
        """Remove a game's record."""
        ...
