class GameError(Exception):
    """Base class for every error raised by the game core."""


class InvalidConfiguration(GameError):
    """Board parameters that cannot produce a playable grid."""


class InvalidMove(GameError):
    """Out-of-turn, out-of-bounds or post-game move. Dropped by the gateway."""


class UnknownGame(GameError):
    """Stale or made-up game id."""


class UnknownPlayer(GameError):
    """Connection that never joined, or a player not seated in the game."""
