"""Game server coordinator.

Owns the store, the matchmaking queue, the session directory and the bot,
and is the single place game state is mutated. Every operation, including
timer callbacks, runs under one lock so reveals within a game are totally
ordered no matter which Socket.IO async mode is in use.
"""
import logging
import threading
from typing import Callable, Optional

from dontclick.models import Game, Player, WaitingEntry, ChatMessage, BOT_IDENTITY, now_ms
from dontclick.services.games import engine
from dontclick.services.games.bot import BotController
from dontclick.services.games.errors import UnknownPlayer
from dontclick.services.games.grid import generate, new_seed, validate_dimensions
from dontclick.services.games.matchmaking import MatchmakingQueue, BOT_IMMEDIATE
from dontclick.services.games.scheduler import SocketIOScheduler
from dontclick.services.games.store import GameStore
from dontclick.sessions import SessionDirectory


class GameServer:
    def __init__(self, app=None, socketio=None):
        self.logger = logging.getLogger(__name__)
        self.lock = threading.RLock()
        self.socketio = None
        self.scheduler = None
        self.seed_source: Callable[[], int] = new_seed
        if app is not None:
            self.init_app(app, socketio)

    def init_app(self, app, socketio) -> None:
        cfg = app.config
        self.logger = app.logger
        self.socketio = socketio
        self.scheduler = SocketIOScheduler(socketio)
        self.namespace = cfg.get('SOCKETIO_NAMESPACE', '/')
        self.width = int(cfg.get('GRID_WIDTH', 10))
        self.height = int(cfg.get('GRID_HEIGHT', 10))
        self.mine_count = int(cfg.get('MINE_COUNT', 15))
        self.max_board_cells = int(cfg.get('MAX_BOARD_CELLS', 10000))
        validate_dimensions(self.width, self.height, self.mine_count)
        self.chat_max_length = int(cfg.get('CHAT_MAX_LENGTH', 100))
        self.handoff_sec = int(cfg.get('BOT_TURN_HANDOFF_MS', 500)) / 1000.0

        self.store = GameStore(self, ttl_sec=cfg.get('FINISHED_GAME_TTL_SEC', 30), on_evict=self._on_evict)
        self.matchmaking = MatchmakingQueue(self._start_game, policy=cfg.get('MATCHMAKING_POLICY', BOT_IMMEDIATE))
        self.sessions = SessionDirectory()
        self.bot = BotController(
            self,
            think_ms=(cfg.get('BOT_THINK_MIN_MS', 1000), cfg.get('BOT_THINK_MAX_MS', 2000)),
            reaction_probability=cfg.get('BOT_REACTION_PROBABILITY', 0.3),
            reaction_delay_ms=cfg.get('BOT_REACTION_DELAY_MS', 500),
            chat_reply_probability=cfg.get('BOT_CHAT_REPLY_PROBABILITY', 0.4),
            chat_delay_ms=(cfg.get('BOT_CHAT_DELAY_MIN_MS', 1000), cfg.get('BOT_CHAT_DELAY_MAX_MS', 3000)),
        )
        app.extensions['dontclick'] = self

    # ---- transport helpers ----

    def _emit(self, event: str, payload, to: str, skip_sid: Optional[str] = None) -> None:
        self.socketio.emit(event, payload, to=to, skip_sid=skip_sid, namespace=self.namespace)

    def _enter_room(self, connection_id: str, room: str) -> None:
        self.socketio.server.enter_room(connection_id, room, namespace=self.namespace)

    def call_later(self, delay: float, callback, *args):
        """Schedule ``callback`` to run under the server lock after ``delay`` seconds."""
        handle = None

        def _locked(*a):
            with self.lock:
                # cancel() may have landed while this callback waited on the lock
                if handle.cancelled:
                    return
                callback(*a)
        _locked.__name__ = getattr(callback, '__name__', 'callback')
        handle = self.scheduler.call_later(delay, _locked, *args)
        return handle

    # ---- matchmaking ----

    def _start_game(self, players, stake_amount=0, is_test_mode=False) -> Game:
        seed = self.seed_source()
        grid = generate(self.width, self.height, self.mine_count, seed)
        game = self.store.create(players, grid, seed, stake_amount=stake_amount, is_test_mode=is_test_mode)
        self.logger.info(
            f"[match] game={game.id} players={[p.identity for p in players]} stake={stake_amount} test={is_test_mode} seed={seed}"
        )
        return game

    def find_game_for_connection(self, connection_id: str) -> Optional[Game]:
        """First playing game the connection is seated in. A player is in at most one."""
        for game in self.store:
            if game.is_playing and game.player_for_connection(connection_id) is not None:
                return game
        return None

    def join(self, connection_id: str, identity: Optional[str], stake_amount=0, is_test_mode=False) -> Optional[Game]:
        """Register the connection and queue it; returns the game if one was formed."""
        with self.lock:
            current = self.find_game_for_connection(connection_id)
            if current is not None:
                # Re-join: repeat the start events to this connection only
                self._announce_start(current, to=connection_id)
                return current
            if self.matchmaking.is_waiting(connection_id):
                self._emit('waitingForOpponent', {}, to=connection_id)
                return None

            identity = self._claim_identity(connection_id, identity or f"test-player-{now_ms()}")
            stake = 0 if is_test_mode else stake_amount
            self.sessions.set(connection_id, Player(connection_id=connection_id, identity=identity, stake_amount=stake))
            self.logger.info(f"[join] sid={connection_id} identity={identity} test={is_test_mode}")

            game = self.matchmaking.enqueue(WaitingEntry(connection_id, identity, stake, is_test_mode))
            if game is None:
                self._emit('waitingForOpponent', {}, to=connection_id)
                return None

            for p in game.players:
                if not p.is_bot:
                    self._enter_room(p.connection_id, game.room)
            self._announce_start(game, to=game.room)
            self.bot.maybe_schedule(game.id)
            return game

    def _claim_identity(self, connection_id: str, identity: str) -> str:
        """Two seats never share an identity: the bot's, or one held by another live connection, gets the sid appended."""
        if identity == BOT_IDENTITY or self.sessions.holder(identity) not in (None, connection_id):
            claimed = f"{identity}-{connection_id}"
            self.logger.info(f"[identity-taken] sid={connection_id} asked={identity} using={claimed}")
            return claimed
        return identity

    def _announce_start(self, game: Game, to: str) -> None:
        self._emit('gameJoined', {
            'gameId': game.id,
            'players': [p.to_dict() for p in game.players],
            'stakeAmount': game.stake_amount,
            'isTestMode': game.is_test_mode,
        }, to=to)
        self._emit('gameStarted', {
            'gameId': game.id,
            'currentTurn': game.current_turn,
            'grid': game.grid.to_dict(),
            'seed': game.seed,
        }, to=to)

    # ---- moves ----

    def reveal(self, connection_id: str, game_id, x: int, y: int) -> engine.RevealOutcome:
        with self.lock:
            seat, _ = self._participant(connection_id, game_id)
            return self.apply_move(game_id, x, y, seat.identity)

    def apply_move(self, game_id, x: int, y: int, identity: str) -> engine.RevealOutcome:
        """Validate and apply one reveal, then broadcast the result. Shared by humans and the bot."""
        with self.lock:
            game = self.store.get(game_id)
            engine.check_move(game, x, y, identity)
            outcome = engine.reveal(game, x, y, identity)
            if not outcome.valid:
                self.logger.debug(f"[reveal-noop] game={game.id} ({x}, {y}) already revealed")
                return outcome

            self.logger.info(f"[reveal] game={game.id} by={identity} x={x} y={y} mine={outcome.hit_mine}")
            self._emit('tileRevealed', {
                'x': x,
                'y': y,
                'grid': game.grid.to_dict(),
                'nextTurn': game.current_turn,
                'playerStats': game.stats_dict(),
                'hitMine': outcome.hit_mine,
            }, to=game.room)

            if outcome.ended:
                self._finish(game, to=game.room)
            elif game.has_bot and game.current_turn == self.bot.identity:
                self.bot.maybe_schedule(game.id, extra_delay=self.handoff_sec)
            return outcome

    @staticmethod
    def _ended_payload(game: Game):
        return {'winner': game.winner, 'finalStats': game.stats_dict(), 'reason': game.end_reason}

    def _finish(self, game: Game, to: str) -> None:
        self.logger.info(f"[finish] game={game.id} winner={game.winner} reason={game.end_reason}")
        self._emit('gameEnded', self._ended_payload(game), to=to)
        self.bot.cancel(game.id)
        self.store.expire(game.id)

    # ---- chat & reactions ----

    def _participant(self, connection_id: str, game_id):
        """The connection's own seat in ``game_id``, whatever identity its session asserts."""
        player = self.sessions.get(connection_id)
        game = self.store.get(game_id)
        seat = game.player_for_connection(connection_id)
        if seat is None:
            raise UnknownPlayer(f"{player.identity} is not seated in game {game.id}")
        return seat, game

    def chat(self, connection_id: str, game_id, text: str) -> ChatMessage:
        with self.lock:
            player, game = self._participant(connection_id, game_id)
            msg = self.send_chat(game, player.identity, text[:self.chat_max_length], own_connection=connection_id)
            if game.has_bot:
                self.bot.on_chat(game, connection_id)
            return msg

    def send_chat(self, game: Game, sender: str, text: str, own_connection: Optional[str] = None,
                  to_connections=None) -> ChatMessage:
        """Log a chat line and deliver it with a per-recipient ``isOwn`` flag."""
        msg = ChatMessage(sender=sender, text=text)
        game.chat_log.append(msg)
        if to_connections is None:
            to_connections = [p.connection_id for p in game.players if not p.is_bot]
        for sid in to_connections:
            self._emit('chatMessage', dict(msg.to_dict(), isOwn=(sid == own_connection)), to=sid)
        return msg

    def react(self, connection_id: str, game_id, reaction: str) -> bool:
        """Relay a reaction to the rest of the room. Nobody is watching in bot games."""
        with self.lock:
            player, game = self._participant(connection_id, game_id)
            if game.has_bot:
                return False
            self.broadcast_reaction(game, player.identity, reaction, skip_sid=connection_id)
            return True

    def broadcast_reaction(self, game: Game, sender: str, reaction: str, skip_sid: Optional[str] = None) -> None:
        self._emit('avatarReaction', {
            'playerId': sender,
            'reaction': reaction,
            'timestamp': now_ms(),
        }, to=game.room, skip_sid=skip_sid)

    # ---- connection loss ----

    def disconnect(self, connection_id: str) -> Optional[Game]:
        """Drop the connection; forfeit its first playing game to the other player."""
        with self.lock:
            removed = self.matchmaking.remove(connection_id)
            if removed:
                self.logger.info(f"[unqueue] sid={connection_id}")
            player = self.sessions.delete(connection_id)
            if player is None:
                return None
            game = self.find_game_for_connection(connection_id)
            if game is None or not engine.forfeit(game, game.player_for_connection(connection_id).identity):
                return None
            self.logger.info(f"[forfeit] game={game.id} left={player.identity} winner={game.winner}")
            remaining = game.player(game.winner)
            self.bot.cancel(game.id)
            if not remaining.is_bot:
                self._emit('gameEnded', self._ended_payload(game), to=remaining.connection_id)
            self.store.expire(game.id)
            return game

    def _on_evict(self, game_id) -> None:
        self.bot.cancel(game_id)

    # ---- status ----

    def status(self):
        with self.lock:
            return {
                'games': len(self.store),
                'waitingPlayers': self.matchmaking.depth(),
                'connections': len(self.sessions),
                'botEnabled': self.matchmaking.policy == BOT_IMMEDIATE,
                'botIdentity': BOT_IDENTITY,
            }
