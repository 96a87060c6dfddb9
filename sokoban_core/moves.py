from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .level import Level, set_bit, has_bit, clear_bit


class Direction(Enum):
    """Player move. Value is the single-letter code used in move strings."""

    UP = "U"
    DOWN = "D"
    LEFT = "L"
    RIGHT = "R"

    @property
    def letter(self) -> str:
        return self.value

    @property
    def delta(self) -> Tuple[int, int]:
        return _DELTAS[self]


_DELTAS = {
    Direction.UP: (0, -1),
    Direction.DOWN: (0, 1),
    Direction.LEFT: (-1, 0),
    Direction.RIGHT: (1, 0),
}

# expansion order of the search; fixes tie-breaks between equal-length solutions
DIRECTIONS: Tuple[Direction, ...] = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)

_SEPARATORS = " \t\r\n,"


def encode_moves(moves: Iterable[Direction]) -> str:
    return "".join(m.letter for m in moves)


def decode_moves(text: str) -> List[Direction]:
    """Parses a U/D/L/R string. Case-insensitive; whitespace and commas are ignored."""
    out: List[Direction] = []
    for i, ch in enumerate(text):
        if ch in _SEPARATORS:
            continue
        try:
            out.append(Direction(ch.upper()))
        except ValueError:
            raise ValueError(f"invalid move {ch!r} at offset {i}") from None
    return out


def apply_move(level: Level, player: int, boxes: int,
               direction: Direction) -> Optional[Tuple[int, int, bool]]:
    """One move under the grid rules.

    Returns (player, boxes, pushed) after the move, or None when the move is
    illegal (into a wall, or pushing a box into a wall or another box).
    """
    dx, dy = direction.delta
    dest = level.step(player, dx, dy)
    if dest is None or level.is_wall_like(dest):
        return None
    if not has_bit(boxes, dest):
        return dest, boxes, False
    beyond = level.step(dest, dx, dy)
    if beyond is None or level.is_wall_like(beyond) or has_bit(boxes, beyond):
        return None
    new_boxes = set_bit(clear_bit(boxes, dest), beyond)
    return dest, new_boxes, True


@dataclass
class ReplayResult:
    player: int
    boxes: int
    solved: bool
    moves_applied: int
    pushes: int
    illegal_at: Optional[int] = None  # index of the first illegal move


def replay(level: Level, moves: Sequence[Direction]) -> ReplayResult:
    """Applies moves from the level's start; stops at the first illegal move."""
    player = level.player_start
    boxes = level.boxes_mask
    pushes = 0
    for i, d in enumerate(moves):
        res = apply_move(level, player, boxes, d)
        if res is None:
            return ReplayResult(player, boxes, level.all_on_goals(boxes), i, pushes, illegal_at=i)
        player, boxes, pushed = res
        pushes += int(pushed)
    return ReplayResult(player, boxes, level.all_on_goals(boxes), len(moves), pushes)

