"""Custom errors raised across layers. Every error derives from GameError so the API layer can catch them in one place."""


class GameError(Exception):
    """Base class for anything that goes wrong while playing a game."""


class GameStateError(GameError):
    """The game is not in a state that allows the request (ex. game already over)."""


class IllegalMoveError(GameError):
    """The requested move is not in the set of legal moves."""


class NotYourTurnError(GameError):
    """A side tried to act while the other side is to move."""


class InvalidBoardStateError(GameError):
    """A board snapshot supplied from outside is malformed. Raised before anything gets mutated."""


class InvalidRequestError(GameError):
    """Request data could not be interpreted."""


class RepositoryError(GameError):
    """A record could not be found / stored."""


class SearchTimeoutError(GameError):
    """The move search ran past its deadline. Only used internally to unwind the search tree."""
