from dataclasses import dataclass, field
from typing import Dict, List, Optional
import time

from dontclick.services.games.errors import UnknownPlayer
from dontclick.services.games.grid import Grid

PLAYING = 'playing'
FINISHED = 'finished'

BOT_IDENTITY = 'bot-player-ai'
BOT_CONNECTION_ID = 'bot-player'


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Player:
    connection_id: str
    identity: str
    stake_amount: float = 0
    is_bot: bool = False

    def to_dict(self):
        return {
            'publicKey': self.identity,
            'isBot': self.is_bot,
            'stakeAmount': self.stake_amount,
        }


def bot_player() -> Player:
    return Player(connection_id=BOT_CONNECTION_ID, identity=BOT_IDENTITY, stake_amount=0, is_bot=True)


@dataclass
class PlayerStats:
    safe_revealed: int = 0

    def to_dict(self):
        return {'safeRevealed': self.safe_revealed}


@dataclass
class ChatMessage:
    sender: str
    text: str
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self):
        return {'playerId': self.sender, 'message': self.text, 'timestamp': self.timestamp}


@dataclass
class WaitingEntry:
    connection_id: str
    identity: str
    stake_amount: float = 0
    is_test_mode: bool = False

    def to_player(self) -> Player:
        return Player(connection_id=self.connection_id, identity=self.identity, stake_amount=self.stake_amount)


@dataclass
class Game:
    id: int
    players: List[Player]
    current_turn: str
    grid: Grid
    seed: int
    stake_amount: float = 0
    is_test_mode: bool = False
    status: str = PLAYING
    player_stats: Dict[str, PlayerStats] = field(default_factory=dict)
    chat_log: List[ChatMessage] = field(default_factory=list)
    winner: Optional[str] = None
    end_reason: Optional[str] = None
    created_at: int = field(default_factory=now_ms)
    finished_at: Optional[int] = None

    def __post_init__(self):
        for p in self.players:
            self.player_stats.setdefault(p.identity, PlayerStats())

    @property
    def has_bot(self) -> bool:
        return any(p.is_bot for p in self.players)

    @property
    def is_playing(self) -> bool:
        return self.status == PLAYING

    @property
    def room(self) -> str:
        return f"game:{self.id}"

    def player(self, identity: str) -> Optional[Player]:
        return next((p for p in self.players if p.identity == identity), None)

    def opponent_of(self, identity: str) -> Player:
        opponent = next((p for p in self.players if p.identity != identity), None)
        if opponent is None:
            raise UnknownPlayer(f"no opponent for {identity} in game {self.id}")
        return opponent

    def player_for_connection(self, connection_id: str) -> Optional[Player]:
        return next((p for p in self.players if p.connection_id == connection_id), None)

    def total_safe_revealed(self) -> int:
        return sum(s.safe_revealed for s in self.player_stats.values())

    def stats_dict(self):
        return {identity: s.to_dict() for identity, s in self.player_stats.items()}

    def finish(self, winner: str, reason: str) -> None:
        self.status = FINISHED
        self.winner = winner
        self.end_reason = reason
        self.finished_at = now_ms()

    def to_dict(self, include_grid=True):
        data = {
            'id': self.id,
            'players': [p.to_dict() for p in self.players],
            'currentTurn': self.current_turn,
            'seed': self.seed,
            'status': self.status,
            'stakeAmount': self.stake_amount,
            'isTestMode': self.is_test_mode,
            'hasBot': self.has_bot,
            'playerStats': self.stats_dict(),
            'chatMessages': [m.to_dict() for m in self.chat_log],
            'winner': self.winner,
            'reason': self.end_reason,
            'createdAt': self.created_at,
            'finishedAt': self.finished_at,
        }
        if include_grid:
            data['grid'] = self.grid.to_dict()
        return data
