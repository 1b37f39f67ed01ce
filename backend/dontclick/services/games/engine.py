"""Turn resolution: the only code path that applies a reveal to a game."""
from dataclasses import dataclass

from dontclick.models import Game, PLAYING
from .errors import InvalidMove

MINE = 'mine'
COMPLETION = 'completion'
FORFEIT = 'forfeit'


@dataclass(frozen=True)
class RevealOutcome:
    valid: bool
    hit_mine: bool = False
    ended: bool = False

    @property
    def reason(self):
        if not self.ended:
            return None
        return MINE if self.hit_mine else COMPLETION


INVALID = RevealOutcome(valid=False)


def check_move(game: Game, x: int, y: int, identity: str) -> None:
    """Raise InvalidMove unless ``identity`` may reveal (x, y) right now."""
    if game.status != PLAYING:
        raise InvalidMove(f"game {game.id} is {game.status}")
    if game.current_turn != identity:
        raise InvalidMove(f"not {identity}'s turn in game {game.id}")
    if not game.grid.in_bounds(x, y):
        raise InvalidMove(f"({x}, {y}) outside {game.grid.width}x{game.grid.height} grid")


def reveal(game: Game, x: int, y: int, identity: str) -> RevealOutcome:
    """Reveal (x, y) for ``identity`` and settle the turn.

    - already revealed: INVALID, nothing changes
    - mine: the other player wins
    - last safe cell: higher safe count wins, a tie goes to the mover
    - otherwise the turn passes to the other player
    """
    cell = game.grid.cell(x, y)
    if cell.revealed:
        return INVALID

    opponent = game.opponent_of(identity)
    cell.revealed = True

    if cell.is_mine:
        game.finish(opponent.identity, MINE)
        return RevealOutcome(valid=True, hit_mine=True, ended=True)

    game.player_stats[identity].safe_revealed += 1

    if game.total_safe_revealed() >= game.grid.safe_cell_count:
        mine = game.player_stats[identity].safe_revealed
        theirs = game.player_stats[opponent.identity].safe_revealed
        game.finish(opponent.identity if theirs > mine else identity, COMPLETION)
        return RevealOutcome(valid=True, hit_mine=False, ended=True)

    game.current_turn = opponent.identity
    return RevealOutcome(valid=True)


def forfeit(game: Game, leaving_identity: str) -> bool:
    """Award a playing game to whoever did not leave. False if already over."""
    if game.status != PLAYING:
        return False
    game.finish(game.opponent_of(leaving_identity).identity, FORFEIT)
    return True
