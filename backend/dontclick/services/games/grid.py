"""Deterministic minefield generation.

Boards are produced from a numeric seed with a small linear-congruential
sequence so the same seed always yields the same layout on every platform.
Clients can regenerate a board from ``seed`` to check a finished game.
"""
import random
import time
from dataclasses import dataclass, field
from typing import Iterator, List, Tuple

from .errors import InvalidConfiguration

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280


@dataclass
class Cell:
    is_mine: bool = False
    revealed: bool = False
    adjacent_mines: int = 0

    def to_dict(self):
        return {
            'isMine': self.is_mine,
            'revealed': self.revealed,
            'adjacentMines': self.adjacent_mines,
        }


@dataclass
class Grid:
    """A W x H minefield, indexed ``cells[y][x]``."""
    width: int
    height: int
    mine_count: int
    cells: List[List[Cell]] = field(default_factory=list)

    @property
    def safe_cell_count(self) -> int:
        return self.width * self.height - self.mine_count

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def cell(self, x: int, y: int) -> Cell:
        return self.cells[y][x]

    def unrevealed(self) -> Iterator[Tuple[int, int]]:
        for y, row in enumerate(self.cells):
            for x, c in enumerate(row):
                if not c.revealed:
                    yield x, y

    def mine_positions(self) -> List[Tuple[int, int]]:
        return [(x, y) for y, row in enumerate(self.cells) for x, c in enumerate(row) if c.is_mine]

    def to_dict(self):
        return [[c.to_dict() for c in row] for row in self.cells]


class SeededRandom:
    """The board LCG: ``state = (state * 9301 + 49297) % 233280``."""

    def __init__(self, seed: int):
        self.state = int(seed)

    def next(self) -> float:
        self.state = (self.state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self.state / LCG_MODULUS


def validate_dimensions(width: int, height: int, mine_count: int) -> None:
    if width < 1 or height < 1:
        raise InvalidConfiguration(f"grid must be at least 1x1, got {width}x{height}")
    if mine_count < 0 or mine_count >= width * height:
        raise InvalidConfiguration(
            f"mine_count must be in [0, {width * height}) for a {width}x{height} grid, got {mine_count}"
        )


def count_adjacent_mines(cells: List[List[Cell]], x: int, y: int, width: int, height: int) -> int:
    count = 0
    for dy in (-1, 0, 1):
        for dx in (-1, 0, 1):
            if dx == 0 and dy == 0:
                continue
            nx, ny = x + dx, y + dy
            if 0 <= nx < width and 0 <= ny < height and cells[ny][nx].is_mine:
                count += 1
    return count


def generate(width: int, height: int, mine_count: int, seed: int) -> Grid:
    """Build a grid with exactly ``mine_count`` mines placed from ``seed``.

    Mines are placed by rejection sampling: draw x, then y, skip cells that
    already hold a mine. Raises InvalidConfiguration when the board could
    never be filled (``mine_count >= width * height``) or is empty.
    """
    validate_dimensions(width, height, mine_count)
    rng = SeededRandom(seed)
    cells = [[Cell() for _ in range(width)] for _ in range(height)]

    placed = 0
    attempts = 0
    while placed < mine_count:
        # Draw pairs repeat once the LCG state cycles, so nothing new can turn up after that.
        if attempts >= LCG_MODULUS:
            raise InvalidConfiguration(f"seed {seed} cannot place {mine_count} mines on a {width}x{height} grid")
        attempts += 1
        x = int(rng.next() * width)
        y = int(rng.next() * height)
        if not cells[y][x].is_mine:
            cells[y][x].is_mine = True
            placed += 1

    for y in range(height):
        for x in range(width):
            if not cells[y][x].is_mine:
                cells[y][x].adjacent_mines = count_adjacent_mines(cells, x, y, width, height)

    return Grid(width=width, height=height, mine_count=mine_count, cells=cells)


def new_seed() -> int:
    return int(time.time() * 1000) + random.randrange(1000000)
