"""First-come-first-served pairing of waiting players."""
from collections import deque
from typing import Callable, Deque, Dict, Optional

from dontclick.models import Game, Player, WaitingEntry, bot_player
from .errors import InvalidConfiguration

BOT_IMMEDIATE = 'bot-immediate'
PEER_QUEUED = 'peer-queued'
POLICIES = (BOT_IMMEDIATE, PEER_QUEUED)

REAL = 'real'
TEST = 'test'


class MatchmakingQueue:
    """Pairs waiting entries into games.

    ``start_game(players, stake_amount, is_test_mode)`` builds and stores the
    game; the queue only decides who plays whom.

    Under ``bot-immediate`` a test-mode entry never waits: it is seated
    against the bot straight away and moves first. Under ``peer-queued``
    test-mode entries wait in their own queue and are paired with each other.
    """

    def __init__(self, start_game: Callable[..., Game], policy: str = BOT_IMMEDIATE):
        if policy not in POLICIES:
            raise InvalidConfiguration(f"unknown matchmaking policy {policy!r}, expected one of {POLICIES}")
        self.start_game = start_game
        self.policy = policy
        self._queues: Dict[str, Deque[WaitingEntry]] = {REAL: deque(), TEST: deque()}

    def depth(self, mode: Optional[str] = None) -> int:
        if mode is not None:
            return len(self._queues[mode])
        return sum(len(q) for q in self._queues.values())

    def is_waiting(self, connection_id: str) -> bool:
        return any(e.connection_id == connection_id for q in self._queues.values() for e in q)

    def enqueue(self, entry: WaitingEntry) -> Optional[Game]:
        """Queue ``entry``; return the new game if it completed a pair."""
        if entry.is_test_mode and self.policy == BOT_IMMEDIATE:
            human = Player(connection_id=entry.connection_id, identity=entry.identity, stake_amount=0)
            return self.start_game([human, bot_player()], stake_amount=0, is_test_mode=True)

        mode = TEST if entry.is_test_mode else REAL
        queue = self._queues[mode]
        queue.append(entry)
        if len(queue) < 2:
            return None

        first = queue.popleft()
        second = queue.popleft()
        if entry.is_test_mode:
            stake = 0
        else:
            stake = max(first.stake_amount, second.stake_amount)
        return self.start_game([first.to_player(), second.to_player()], stake_amount=stake,
                               is_test_mode=entry.is_test_mode)

    def remove(self, connection_id: str) -> int:
        """Drop every waiting entry for ``connection_id``; returns how many were removed."""
        removed = 0
        for mode, queue in self._queues.items():
            kept = deque(e for e in queue if e.connection_id != connection_id)
            removed += len(queue) - len(kept)
            self._queues[mode] = kept
        return removed
