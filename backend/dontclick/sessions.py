from typing import Dict, Optional

from dontclick.models import Player
from dontclick.services.games.errors import UnknownPlayer


class SessionDirectory:
    """Live connection id -> the Player identity it asserted on join."""

    def __init__(self):
        self._players: Dict[str, Player] = {}

    def __len__(self):
        return len(self._players)

    def set(self, connection_id: str, player: Player) -> None:
        self._players[connection_id] = player

    def get(self, connection_id: str) -> Player:
        player = self._players.get(connection_id)
        if player is None:
            raise UnknownPlayer(f"connection {connection_id!r} has not joined")
        return player

    def delete(self, connection_id: str) -> Optional[Player]:
        return self._players.pop(connection_id, None)

    def holder(self, identity: str) -> Optional[str]:
        """Connection id currently using ``identity``, if any."""
        return next((sid for sid, p in self._players.items() if p.identity == identity), None)
