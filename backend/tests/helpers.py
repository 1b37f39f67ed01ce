import random

from dontclick.models import Game, Player
from dontclick.services.games.scheduler import TimerHandle
from dontclick.services.games.grid import Cell, Grid, count_adjacent_mines


def grid_with_mines(width, height, mines):
    """Hand-placed board for tests that need to know where the mines are."""
    cells = [[Cell() for _ in range(width)] for _ in range(height)]
    for x, y in mines:
        cells[y][x].is_mine = True
    for y in range(height):
        for x in range(width):
            if not cells[y][x].is_mine:
                cells[y][x].adjacent_mines = count_adjacent_mines(cells, x, y, width, height)
    return Grid(width=width, height=height, mine_count=len(mines), cells=cells)


def make_game(grid, identities=('alice', 'bob'), game_id=1, seed=0):
    players = [Player(connection_id=f"sid-{i}", identity=i) for i in identities]
    return Game(id=game_id, players=players, current_turn=players[0].identity, grid=grid, seed=seed)


class ManualScheduler:
    """Virtual clock: timers only fire when a test calls ``advance``."""

    def __init__(self):
        self.now = 0.0
        self.handles = []

    def call_later(self, delay, callback, *args):
        handle = TimerHandle(delay, callback, args)
        handle.deadline = self.now + delay
        self.handles.append(handle)
        return handle

    def pending(self):
        return [h for h in self.handles if h.pending]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = sorted((h for h in self.pending() if h.deadline <= target), key=lambda h: h.deadline)
            if not due:
                break
            handle = due[0]
            self.now = max(self.now, handle.deadline)
            handle.run()
        self.now = target


class FixedRandom(random.Random):
    """``random()`` returns queued values (then ``default``); ``choice`` takes the first item."""

    def __init__(self, values=(), default=0.0):
        super().__init__(0)
        self.values = list(values)
        self.default = default

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.default

    def choice(self, seq):
        return seq[0]
