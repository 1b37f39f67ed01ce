import os
import sys
import pytest

# Ensure the backend root (containing the `dontclick` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from dontclick import create_app, socketio, arena
from helpers import ManualScheduler, FixedRandom


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    GRID_WIDTH = 10
    GRID_HEIGHT = 10
    MINE_COUNT = 15
    MAX_BOARD_CELLS = 10000
    MATCHMAKING_POLICY = 'bot-immediate'
    BOT_THINK_MIN_MS = 1000
    BOT_THINK_MAX_MS = 2000
    BOT_TURN_HANDOFF_MS = 500
    BOT_REACTION_PROBABILITY = 0.3
    BOT_REACTION_DELAY_MS = 500
    BOT_CHAT_REPLY_PROBABILITY = 0.4
    BOT_CHAT_DELAY_MIN_MS = 1000
    BOT_CHAT_DELAY_MAX_MS = 3000
    FINISHED_GAME_TTL_SEC = 30
    CHAT_MAX_LENGTH = 100
    CORS_ORIGINS = '*'


class PeerQueuedConfig(TestConfig):
    MATCHMAKING_POLICY = 'peer-queued'


def _build(config_class):
    application = create_app(config_class)
    arena.scheduler = ManualScheduler()
    arena.bot.rng = FixedRandom(default=0.99)
    arena.seed_source = lambda: 12345
    return application


@pytest.fixture()
def flask_app():
    yield _build(TestConfig)


@pytest.fixture()
def peer_app():
    yield _build(PeerQueuedConfig)


@pytest.fixture()
def scheduler(flask_app):
    return arena.scheduler


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio(flask_app):
    """Factory for extra Socket.IO test clients; all are disconnected at teardown."""
    clients = []

    def _make(app=None):
        c = socketio.test_client(app or flask_app, flask_test_client=(app or flask_app).test_client())
        clients.append(c)
        return c

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass


@pytest.fixture()
def sio_client(make_sio):
    return make_sio()
