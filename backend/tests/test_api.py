import pytest

from dontclick import create_app
from dontclick.services.games.errors import InvalidConfiguration


def test_health_reports_games_and_queue(client, make_sio):
    res = client.get('/health')
    assert res.status_code == 200
    data = res.get_json()
    assert data['status'] == 'ok'
    assert data['games'] == 0
    assert data['waitingPlayers'] == 0
    assert data['botEnabled'] is True
    assert 'timestamp' in data

    make_sio().emit('joinGame', {'publicKey': 'alice', 'isTestMode': True})
    make_sio().emit('joinGame', {'publicKey': 'bob'})
    data = client.get('/health').get_json()
    assert data['games'] == 1
    assert data['waitingPlayers'] == 1


def test_ping(client):
    res = client.get('/ping')
    assert res.status_code == 200
    assert res.data == b'pong'


def test_game_snapshot(client, sio_client):
    sio_client.emit('joinGame', {'publicKey': 'alice', 'isTestMode': True})
    game_id = [p for p in sio_client.get_received() if p['name'] == 'gameStarted'][0]['args'][0]['gameId']
    data = client.get(f'/api/games/{game_id}').get_json()
    assert data['id'] == game_id
    assert data['status'] == 'playing'
    assert data['currentTurn'] == 'alice'
    assert data['hasBot'] is True
    assert data['seed'] == 12345
    assert data['winner'] is None


def test_unknown_game_is_404(client):
    assert client.get('/api/games/4242').status_code == 404


def test_board_replay_matches_game(client, sio_client):
    sio_client.emit('joinGame', {'publicKey': 'alice', 'isTestMode': True})
    started = [p for p in sio_client.get_received() if p['name'] == 'gameStarted'][0]['args'][0]
    board = client.get(f"/api/boards/{started['seed']}").get_json()
    assert board['grid'] == started['grid']
    assert len(board['mines']) == 15


def test_board_replay_small(client):
    data = client.get('/api/boards/1000?width=3&height=3&mines=1').get_json()
    assert data['mines'] == [{'x': 0, 'y': 1}]
    assert data['mineCount'] == 1


def test_board_replay_rejects_bad_config(client):
    res = client.get('/api/boards/1000?width=3&height=3&mines=9')
    assert res.status_code == 400
    assert 'error' in res.get_json()


def test_show_board_command(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['show-board', '1000', '--width', '3', '--height', '3', '--mines', '1'])
    assert result.exit_code == 0
    assert result.output.splitlines() == ['1 1 0', '* 1 0', '1 1 0']


def test_show_board_command_rejects_bad_config(flask_app):
    runner = flask_app.test_cli_runner()
    result = runner.invoke(args=['show-board', '1', '--width', '2', '--height', '2', '--mines', '4'])
    assert result.exit_code != 0


def test_invalid_board_config_fails_at_startup():
    class Broken:
        TESTING = True
        GRID_WIDTH = 10
        GRID_HEIGHT = 10
        MINE_COUNT = 100

    with pytest.raises(InvalidConfiguration):
        create_app(Broken)


def test_board_replay_rejects_oversized_board(client):
    res = client.get('/api/boards/1?width=2000&height=2000&mines=0')
    assert res.status_code == 400
    assert 'error' in res.get_json()
    assert client.get('/api/boards/1?width=100&height=100&mines=0').status_code == 200
