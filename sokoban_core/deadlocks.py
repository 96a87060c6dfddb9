from __future__ import annotations
from typing import Iterable, Tuple

import numpy as np

from .level import Level, CellKind, has_bit, iter_bits

# top-left offsets of the four 2x2 windows containing a cell
_WINDOW_OFFSETS: Tuple[Tuple[int, int], ...] = ((0, 0), (-1, 0), (0, -1), (-1, -1))

# --- low-level helpers -------------------------------------------------------

def _wall_at(level: Level, x: int, y: int) -> bool:
    """Treat outside the level and unspecified terrain as a wall."""
    return level.cell_kind((x, y)) is CellKind.WALL


def is_corner_cell(level: Level, idx: int) -> bool:
    """Cell with walls/outside the level on two perpendicular sides."""
    x, y = level.idx_to_pos(idx)
    up = _wall_at(level, x, y - 1)
    down = _wall_at(level, x, y + 1)
    left = _wall_at(level, x - 1, y)
    right = _wall_at(level, x + 1, y)
    return (up and left) or (up and right) or (down and left) or (down and right)

# --- static dead squares ----------------------------------------------------

def compute_dead_squares(level: Level) -> np.ndarray:
    """Boolean (height, width) grid of cells a box may never be pushed onto.

    Corner rule first, then lane expansion along walls. Goal cells are never
    dead. Sound but incomplete: multi-box blocking is not considered.
    """
    dead = np.zeros((level.height, level.width), dtype=bool)
    for y in range(level.height):
        for x in range(level.width):
            if level.cell_kind((x, y)) is not CellKind.FLOOR:
                continue
            if is_corner_cell(level, y * level.width + x):
                dead[y, x] = True

    _expand_dead_lanes(level, dead)
    return dead


def _expand_dead_lanes(level: Level, dead: np.ndarray) -> None:
    """Mark goal-free lanes running along a wall whose both ends are dead.

    A row qualifies when every playable cell from the first to the last one
    has a wall on the same side (all above, or all below). Columns likewise
    with left/right walls.
    """
    for y in range(1, level.height - 1):
        cells = [x for x in range(level.width) if level.cell_kind((x, y)) is not CellKind.WALL]
        if cells and _lane_is_dead(
            level, dead,
            [(x, y) for x in cells],
            [(x, y - 1) for x in cells],
            [(x, y + 1) for x in cells],
        ):
            for x in range(cells[0], cells[-1] + 1):
                if level.cell_kind((x, y)) is CellKind.FLOOR:
                    dead[y, x] = True

    for x in range(1, level.width - 1):
        cells = [y for y in range(level.height) if level.cell_kind((x, y)) is not CellKind.WALL]
        if cells and _lane_is_dead(
            level, dead,
            [(x, y) for y in cells],
            [(x - 1, y) for y in cells],
            [(x + 1, y) for y in cells],
        ):
            for y in range(cells[0], cells[-1] + 1):
                if level.cell_kind((x, y)) is CellKind.FLOOR:
                    dead[y, x] = True


def _lane_is_dead(level: Level, dead: np.ndarray, lane, side_a, side_b) -> bool:
    if any(level.cell_kind(p) is CellKind.GOAL for p in lane):
        return False
    walled_a = all(_wall_at(level, *p) for p in side_a)
    walled_b = all(_wall_at(level, *p) for p in side_b)
    if not (walled_a or walled_b):
        return False
    (x0, y0), (x1, y1) = lane[0], lane[-1]
    return bool(dead[y0, x0] and dead[y1, x1])


def dead_square_mask(dead: np.ndarray) -> int:
    """Bitset view of a dead-square grid, indexed like Level cells."""
    mask = 0
    for idx in np.flatnonzero(dead):
        mask |= 1 << int(idx)
    return mask

# --- dynamic deadlocks -------------------------------------------------------

def is_freeze_deadlock(level: Level, boxes: int, moved_box: int) -> bool:
    """A 2x2 window around the moved box is solid with walls/boxes, holds at
    least two boxes, and not all of those boxes are on goals.

    Only windows containing `moved_box` are examined; larger frozen clusters
    can slip through.
    """
    bx, by = level.idx_to_pos(moved_box)
    for ox, oy in _WINDOW_OFFSETS:
        left, top = bx + ox, by + oy
        solid = 0
        n_boxes = 0
        all_on_goals = True
        for x, y in ((left, top), (left + 1, top), (left, top + 1), (left + 1, top + 1)):
            if _wall_at(level, x, y):
                solid += 1
                continue
            idx = y * level.width + x
            if has_bit(boxes, idx):
                solid += 1
                n_boxes += 1
                if not level.is_goal_cell(idx):
                    all_on_goals = False
        # one box + three walls is a corner, already covered by dead squares
        if solid == 4 and n_boxes >= 2 and not all_on_goals:
            return True
    return False


def has_simple_deadlock(level: Level, boxes: int) -> bool:
    """True if any box (not on goal) is in a corner of two walls."""
    for b in iter_bits(boxes):
        if not level.is_goal_cell(b) and is_corner_cell(level, b):
            return True
    return False


def boxes_on_dead_squares(level: Level, dead: np.ndarray, boxes: Iterable[int]) -> list:
    out = []
    for b in boxes:
        x, y = level.idx_to_pos(b)
        if level.in_bounds((x, y)) and dead[y, x]:
            out.append((x, y))
    return out
