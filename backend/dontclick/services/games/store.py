import itertools
import logging
from typing import Callable, Dict, Iterator, List, Optional

from dontclick.models import Game, Player
from .errors import UnknownGame
from .grid import Grid


logger = logging.getLogger(__name__)


class GameStore:
    """In-memory registry of games, keyed by monotonically increasing ids.

    The store is the only long-lived owner of Game objects. Everything else
    keeps the id and looks the game up again when it needs it.
    """

    def __init__(self, scheduler, ttl_sec: float = 30, on_evict: Optional[Callable[[int], None]] = None):
        self.scheduler = scheduler
        self.ttl_sec = ttl_sec
        self.on_evict = on_evict
        self._games: Dict[int, Game] = {}
        self._ids = itertools.count(1)
        self._evictions = {}

    def __len__(self) -> int:
        return len(self._games)

    def __iter__(self) -> Iterator[Game]:
        return iter(list(self._games.values()))

    def __contains__(self, game_id) -> bool:
        return game_id in self._games

    def create(self, players: List[Player], grid: Grid, seed: int, stake_amount: float = 0,
               is_test_mode: bool = False) -> Game:
        game = Game(
            id=next(self._ids),
            players=list(players),
            current_turn=players[0].identity,
            grid=grid,
            seed=seed,
            stake_amount=stake_amount,
            is_test_mode=is_test_mode,
        )
        self._games[game.id] = game
        return game

    def get(self, game_id) -> Game:
        game = self._games.get(game_id)
        if game is None:
            raise UnknownGame(f"no game {game_id!r}")
        return game

    def find(self, game_id) -> Optional[Game]:
        return self._games.get(game_id)

    def remove(self, game_id) -> Optional[Game]:
        handle = self._evictions.pop(game_id, None)
        if handle is not None:
            handle.cancel()
        game = self._games.pop(game_id, None)
        if game is not None and self.on_evict:
            self.on_evict(game_id)
        return game

    def expire(self, game_id) -> None:
        """Schedule removal of a finished game after the grace period. Idempotent."""
        if game_id not in self._games or game_id in self._evictions:
            return
        self._evictions[game_id] = self.scheduler.call_later(self.ttl_sec, self._evict, game_id)

    def _evict(self, game_id) -> None:
        self._evictions.pop(game_id, None)
        if self._games.pop(game_id, None) is not None:
            logger.info(f"[evict] game={game_id}")
            if self.on_evict:
                self.on_evict(game_id)
