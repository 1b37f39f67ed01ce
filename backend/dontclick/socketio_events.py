from functools import wraps

from flask import current_app, request
from flask_socketio import emit
from pydantic import ValidationError

from dontclick import socketio, arena
from dontclick.messages import JoinGame, RevealTile, ChatLine, AvatarReaction
from dontclick.services.games.errors import GameError


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _dropping_stale(handler):
    """Late, duplicate and malformed commands are routine: log at debug and drop them."""
    @wraps(handler)
    def wrapper(data=None):
        try:
            return handler(data or {})
        except ValidationError as exc:
            current_app.logger.debug(f"[drop] {handler.__name__} sid={_get_sid()} bad payload: {exc.errors()}")
        except GameError as exc:
            current_app.logger.debug(f"[drop] {handler.__name__} sid={_get_sid()} {type(exc).__name__}: {exc}")
    return wrapper


def handle_connect():
    current_app.logger.info(f"[connect] sid={_get_sid()}")


def handle_disconnect(*args):
    sid = _get_sid()
    current_app.logger.info(f"[disconnect] sid={sid}")
    arena.disconnect(sid)


@_dropping_stale
def handle_join_game(data):
    cmd = JoinGame.model_validate(data)
    arena.join(_get_sid(), cmd.identity, stake_amount=cmd.stake_amount, is_test_mode=cmd.is_test_mode)


@_dropping_stale
def handle_reveal_tile(data):
    cmd = RevealTile.model_validate(data)
    arena.reveal(_get_sid(), cmd.game_id, cmd.x, cmd.y)


@_dropping_stale
def handle_chat_message(data):
    cmd = ChatLine.model_validate(data)
    arena.chat(_get_sid(), cmd.game_id, cmd.message)


@_dropping_stale
def handle_avatar_reaction(data):
    cmd = AvatarReaction.model_validate(data)
    arena.react(_get_sid(), cmd.game_id, cmd.reaction)


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Bind the client commands to ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('joinGame', handle_join_game, namespace=namespace)
    socketio.on_event('revealTile', handle_reveal_tile, namespace=namespace)
    socketio.on_event('chatMessage', handle_chat_message, namespace=namespace)
    socketio.on_event('avatarReaction', handle_avatar_reaction, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
