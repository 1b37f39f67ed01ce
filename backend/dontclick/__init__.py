from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
import click
from config import Config
from dontclick.server import GameServer

socketio = SocketIO(async_mode=None)
arena = GameServer()


def _origins(value):
    if not value or value == '*':
        return '*'
    return [o.strip() for o in value.split(',') if o.strip()]


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    allowed_origins = _origins(flask_app.config.get('CORS_ORIGINS'))

    CORS(flask_app, origins=allowed_origins, methods=['GET', 'POST'])
    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)
    arena.init_app(flask_app, socketio)

    from dontclick.routes import main
    flask_app.register_blueprint(main)

    # Importing here ensures the handlers bind to the initialized socketio instance
    from dontclick.socketio_events import register_socketio_handlers
    register_socketio_handlers(namespace=arena.namespace)

    @click.command('show-board')
    @click.argument('seed', type=int)
    @click.option('--width', default=None, type=int, help='Defaults to GRID_WIDTH.')
    @click.option('--height', default=None, type=int, help='Defaults to GRID_HEIGHT.')
    @click.option('--mines', default=None, type=int, help='Defaults to MINE_COUNT.')
    def show_board_command(seed, width, height, mines):
        """Print the board a seed generates ('*' mine, digits adjacent counts)."""
        from dontclick.services.games.grid import generate
        from dontclick.services.games.errors import InvalidConfiguration
        try:
            grid = generate(width or arena.width, height or arena.height,
                            arena.mine_count if mines is None else mines, seed)
        except InvalidConfiguration as exc:
            raise click.BadParameter(str(exc))
        for row in grid.cells:
            click.echo(' '.join('*' if c.is_mine else str(c.adjacent_mines) for c in row))

    flask_app.cli.add_command(show_board_command)

    return flask_app
