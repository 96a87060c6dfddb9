from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

__all__ = [
    "CellKind",
    "Position",
    "Level",
    "bit",
    "has_bit",
    "set_bit",
    "clear_bit",
    "iter_bits",
    "OFF_GRID",
]

Position = Tuple[int, int]  # (x, y), y grows downward

# index stored for a player or box start that lies outside the grid
OFF_GRID = -1


class CellKind(str, Enum):
    WALL = "wall"
    FLOOR = "floor"
    GOAL = "goal"


# Bit helpers

def bit(idx: int) -> int:
    return 1 << idx

def has_bit(mask: int, idx: int) -> bool:
    return (mask >> idx) & 1 == 1

def set_bit(mask: int, idx: int) -> int:
    return mask | bit(idx)

def clear_bit(mask: int, idx: int) -> int:
    return mask & ~bit(idx)


def iter_bits(mask: int) -> Iterable[int]:
    """Iterates over the indices of set bits, lowest first."""
    idx = 0
    m = mask
    while m:
        if m & 1:
            yield idx
        m >>= 1
        idx += 1


@dataclass(frozen=True, slots=True)
class Level:
    """
    Immutable description of a Sokoban level.

    Terrain is stored as bitmaps over the cell index idx = y*width + x.
    board_mask: cells whose terrain was specified. Anything outside the
    width x height rectangle or outside board_mask is a wall.
    """

    width: int
    height: int
    walls: int  # bitset
    goals: int  # bitset
    board_mask: int  # bitset
    player_start: int  # index (y*W + x), OFF_GRID when outside the grid
    box_starts: Tuple[int, ...]  # indices, in declaration order


    @classmethod
    def from_terrain(
        cls,
        width: int,
        height: int,
        terrain: Mapping[Position, CellKind],
        player_start: Position,
        box_starts: Sequence[Position],
    ) -> "Level":
        """Builds a level from a Position -> CellKind mapping.

        Positions missing from the mapping are walls. Terrain outside the
        grid is ignored; a player or box start outside it is stored as
        OFF_GRID, which is never on a goal.
        """
        walls = goals = board_mask = 0
        for (x, y), kind in terrain.items():
            if not (0 <= x < width and 0 <= y < height):
                continue
            idx = y * width + x
            board_mask = set_bit(board_mask, idx)
            kind = CellKind(kind)
            if kind is CellKind.WALL:
                walls = set_bit(walls, idx)
            elif kind is CellKind.GOAL:
                goals = set_bit(goals, idx)

        def to_idx(pos: Position) -> int:
            x, y = pos
            if 0 <= x < width and 0 <= y < height:
                return y * width + x
            return OFF_GRID

        return cls(
            width=width,
            height=height,
            walls=walls,
            goals=goals,
            board_mask=board_mask,
            player_start=to_idx(player_start),
            box_starts=tuple(to_idx(p) for p in box_starts),
        )


    # ---- convenient checks/conversions
    def idx_to_pos(self, idx: int) -> Position:
        return (idx % self.width, idx // self.width)


    def pos_to_idx(self, pos: Position) -> int:
        x, y = pos
        return y * self.width + x


    def in_bounds(self, pos: Position) -> bool:
        x, y = pos
        return 0 <= x < self.width and 0 <= y < self.height


    def in_grid(self, idx: int) -> bool:
        return 0 <= idx < self.width * self.height


    def cell_kind(self, pos: Position) -> CellKind:
        if not self.in_bounds(pos):
            return CellKind.WALL
        idx = self.pos_to_idx(pos)
        if not has_bit(self.board_mask, idx) or has_bit(self.walls, idx):
            return CellKind.WALL
        if has_bit(self.goals, idx):
            return CellKind.GOAL
        return CellKind.FLOOR


    def is_wall_like(self, idx: int) -> bool:
        """Wall, unspecified terrain or outside the grid."""
        if not self.in_grid(idx):
            return True
        return not has_bit(self.board_mask, idx) or has_bit(self.walls, idx)


    def is_passable(self, idx: int) -> bool:
        return not self.is_wall_like(idx)


    def is_goal_cell(self, idx: int) -> bool:
        return not self.is_wall_like(idx) and has_bit(self.goals, idx)


    def step(self, idx: int, dx: int, dy: int) -> Optional[int]:
        """Index of the neighbour in direction (dx, dy), None when off-grid."""
        if not self.in_grid(idx):
            return None
        x = idx % self.width + dx
        y = idx // self.width + dy
        if 0 <= x < self.width and 0 <= y < self.height:
            return y * self.width + x
        return None


    # ---- start configuration
    @property
    def boxes_mask(self) -> int:
        """Bitset of the box starts that lie inside the grid."""
        m = 0
        for b in self.box_starts:
            if self.in_grid(b):
                m = set_bit(m, b)
        return m



    @property
    def player_pos(self) -> Position:
        return self.idx_to_pos(self.player_start)


    def box_positions(self) -> List[Position]:
        return [self.idx_to_pos(b) for b in self.box_starts]


    def goal_positions(self) -> List[Position]:
        return [self.idx_to_pos(g) for g in iter_bits(self.goals) if self.is_goal_cell(g)]


    def all_on_goals(self, boxes: int) -> bool:
        """All boxes are on goals: boxes ⊆ goals."""
        return (boxes & ~self.goals) == 0


    def validate(self) -> None:
        """Consistency check for callers that want strict levels.

        The solver never calls this. It reports a start outside the grid or
        with stacked boxes as unsolvable and searches any other inconsistent
        level as a degenerate space.
        """
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"level must have positive size, got {self.width}x{self.height}")
        if self.is_wall_like(self.player_start):
            raise ValueError("player start is not on a passable cell")
        if len(set(self.box_starts)) != len(self.box_starts):
            raise ValueError("box start positions must be distinct")
        for b in self.box_starts:
            if not self.in_grid(b):
                raise ValueError("box starts outside the grid")
            if self.is_wall_like(b):
                raise ValueError(f"box at {self.idx_to_pos(b)} is not on a passable cell")
        if self.player_start in self.box_starts:
            raise ValueError("player starts on a box")
        n_goals = len(self.goal_positions())
        if n_goals < len(self.box_starts):
            raise ValueError(f"{len(self.box_starts)} boxes but only {n_goals} goals")
