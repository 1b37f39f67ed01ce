"""Scripted opponent for test-mode games.

The bot plays through the same move path as a human. Each time the turn
comes back to it, one delayed move is scheduled; the timer handle is kept
per game so a forfeit or eviction can cancel it. When a timer fires it
still re-checks the game, since the handle may have been superseded.
"""
import logging
import random
from typing import Dict, Optional, Tuple

from dontclick.models import BOT_IDENTITY, Game
from .grid import Grid


logger = logging.getLogger(__name__)

REACTIONS = ['🤖', '🎯', '💭', '⚡', '🔍']

CHAT_REPLIES = [
    '🤖 Beep boop!',
    '🎯 Good move!',
    '💭 Calculating...',
    '⚡ Nice try!',
    '🔍 Interesting choice',
    "🎮 Let's play!",
    '🚀 Game on!',
    '🧠 Processing...',
    '⭐ Well played!',
    '🎲 Random is fun!',
]


def choose_move(grid: Grid, rng=random) -> Optional[Tuple[int, int]]:
    """Pick an unrevealed corner, else an unrevealed edge, else any unrevealed cell."""
    available = list(grid.unrevealed())
    if not available:
        return None
    max_x, max_y = grid.width - 1, grid.height - 1
    corners = [(x, y) for x, y in available if x in (0, max_x) and y in (0, max_y)]
    edges = [(x, y) for x, y in available if x in (0, max_x) or y in (0, max_y)]
    tier = corners or edges or available
    return rng.choice(tier)


class BotController:
    def __init__(self, server, identity: str = BOT_IDENTITY, rng=None, think_ms=(1000, 2000),
                 reaction_probability=0.3, reaction_delay_ms=500,
                 chat_reply_probability=0.4, chat_delay_ms=(1000, 3000)):
        self.server = server
        self.identity = identity
        self.rng = rng or random.Random()
        self.think_ms = think_ms
        self.reaction_probability = reaction_probability
        self.reaction_delay_ms = reaction_delay_ms
        self.chat_reply_probability = chat_reply_probability
        self.chat_delay_ms = chat_delay_ms
        self._pending: Dict[int, object] = {}

    def _delay(self, bounds) -> float:
        low, high = bounds
        return (low + self.rng.random() * (high - low)) / 1000.0

    def is_bot_turn(self, game: Optional[Game]) -> bool:
        return bool(game and game.is_playing and game.current_turn == self.identity)

    def has_pending(self, game_id) -> bool:
        handle = self._pending.get(game_id)
        return handle is not None and handle.pending

    def maybe_schedule(self, game_id, extra_delay: float = 0.0) -> bool:
        """Start thinking if it is the bot's turn in ``game_id``. Returns True if a move was scheduled."""
        game = self.server.store.find(game_id)
        if not self.is_bot_turn(game):
            logger.debug(f"[bot-skip] game={game_id} not the bot's turn")
            return False
        self.cancel(game_id)
        delay = extra_delay + self._delay(self.think_ms)
        self._pending[game_id] = self.server.call_later(delay, self._move, game_id)
        logger.info(f"[bot-think] game={game_id} delay={delay:.2f}s")
        return True

    def cancel(self, game_id) -> None:
        handle = self._pending.pop(game_id, None)
        if handle is not None:
            handle.cancel()

    def _move(self, game_id) -> None:
        handle = self._pending.get(game_id)
        if handle is not None and not handle.pending:
            # only forget the handle that fired, not one scheduled after it
            del self._pending[game_id]
        game = self.server.store.find(game_id)
        if not self.is_bot_turn(game):
            logger.info(f"[bot-abort] game={game_id} state changed while thinking")
            return
        move = choose_move(game.grid, self.rng)
        if move is None:
            return
        x, y = move
        logger.info(f"[bot-move] game={game_id} x={x} y={y}")
        outcome = self.server.apply_move(game_id, x, y, self.identity)
        if outcome.valid and not outcome.ended and self.rng.random() < self.reaction_probability:
            self.server.call_later(self.reaction_delay_ms / 1000.0, self._react, game_id,
                                   self.rng.choice(REACTIONS))

    def _react(self, game_id, reaction: str) -> None:
        game = self.server.store.find(game_id)
        if game is None or not game.is_playing:
            return
        self.server.broadcast_reaction(game, self.identity, reaction)

    def on_chat(self, game: Game, connection_id: str) -> bool:
        """Maybe answer a human's chat line. Returns True if a reply was scheduled."""
        if not game.has_bot or self.rng.random() >= self.chat_reply_probability:
            return False
        reply = self.rng.choice(CHAT_REPLIES)
        self.server.call_later(self._delay(self.chat_delay_ms), self._reply, game.id, connection_id, reply)
        return True

    def _reply(self, game_id, connection_id: str, reply: str) -> None:
        game = self.server.store.find(game_id)
        if game is None:
            return
        self.server.send_chat(game, self.identity, reply, to_connections=[connection_id])
