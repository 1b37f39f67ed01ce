from datetime import datetime, timezone

from flask import Blueprint, jsonify, request
from dontclick import arena
from dontclick.services.games.errors import InvalidConfiguration
from dontclick.services.games.grid import generate

main = Blueprint('main', __name__)


@main.route('/health')
def health():
    """Liveness probe: active game count and matchmaking queue depth."""
    payload = arena.status()
    payload['status'] = 'ok'
    payload['timestamp'] = datetime.now(timezone.utc).isoformat()
    return jsonify(payload)


@main.route('/ping')
def ping():
    return 'pong'


@main.route('/api/games/<int:game_id>')
def get_game(game_id):
    with arena.lock:
        game = arena.store.find(game_id)
        if game is None:
            return jsonify({'error': 'Game not found'}), 404
        return jsonify(game.to_dict())


@main.route('/api/boards/<int:seed>')
def get_board(seed):
    """Regenerate the board for ``seed`` so a finished game can be checked."""
    width = request.args.get('width', arena.width, type=int)
    height = request.args.get('height', arena.height, type=int)
    mines = request.args.get('mines', arena.mine_count, type=int)
    if width * height > arena.max_board_cells:
        return jsonify({'error': f"board larger than {arena.max_board_cells} cells"}), 400
    try:
        grid = generate(width, height, mines, seed)
    except InvalidConfiguration as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify({
        'seed': seed,
        'width': width,
        'height': height,
        'mineCount': mines,
        'mines': [{'x': x, 'y': y} for x, y in grid.mine_positions()],
        'grid': grid.to_dict(),
    })
