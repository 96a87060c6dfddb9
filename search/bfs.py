from __future__ import annotations
from collections import deque
from typing import Callable, Deque, Optional
import time

from sokoban_core.level import Level, has_bit, set_bit, clear_bit
from sokoban_core.moves import DIRECTIONS
from sokoban_core.deadlocks import (
    compute_dead_squares,
    dead_square_mask,
    is_freeze_deadlock,
)
from .result import SolverResult
from .transposition import StateKey, Transposition, state_key

DEFAULT_MAX_NODES = 50_000


def solve_puzzle(
    level: Level,
    max_nodes: int = DEFAULT_MAX_NODES,
    *,
    time_limit_s: Optional[float] = None,
    should_stop: Optional[Callable[[], bool]] = None,
) -> SolverResult:
    """Breadth-first search for a shortest move sequence.

    Every player step costs 1 (plain moves and pushes alike). Successors are
    generated in U, D, L, R order, so among equally short solutions the first
    one discovered wins. Pushes onto dead squares and pushes that freeze a
    2x2 block are pruned.

    The search stops when a goal state is generated, when the frontier is
    empty, or when `max_nodes` states have been expanded. `time_limit_s` and
    `should_stop` are checked once per expansion; stopping on them is
    reported like a budget stop (hit_limit=True).
    """
    t0 = time.time()
    dead = dead_square_mask(compute_dead_squares(level))
    boxes0 = level.boxes_mask

    # boxes outside the grid or stacked on one cell can never all reach goals
    if not all(level.in_grid(b) for b in level.box_starts) \
            or len(set(level.box_starts)) != len(level.box_starts):
        return SolverResult(False, None, 0, 1, False, time.time() - t0)

    if level.all_on_goals(boxes0):
        return SolverResult(True, [], 0, 1, False, time.time() - t0)

    # a box that starts on a dead square can never reach a goal
    if boxes0 & dead:
        return SolverResult(False, None, 0, 1, False, time.time() - t0)

    if not level.in_grid(level.player_start):
        return SolverResult(False, None, 0, 1, False, time.time() - t0)

    root = state_key(level.player_start, boxes0)
    trans = Transposition(root)
    queue: Deque[StateKey] = deque([root])
    expanded = 0

    while queue and expanded < max_nodes:
        if time_limit_s is not None and (time.time() - t0) > time_limit_s:
            break
        if should_stop is not None and should_stop():
            break
        cur = queue.popleft()
        expanded += 1
        player, boxes = cur

        for d in DIRECTIONS:
            dx, dy = d.delta
            dest = level.step(player, dx, dy)
            if dest is None or level.is_wall_like(dest):
                continue

            new_boxes = boxes
            if has_bit(boxes, dest):
                beyond = level.step(dest, dx, dy)
                if beyond is None or level.is_wall_like(beyond):
                    continue
                if has_bit(boxes, beyond) or has_bit(dead, beyond):
                    continue
                new_boxes = set_bit(clear_bit(boxes, dest), beyond)
                if is_freeze_deadlock(level, new_boxes, beyond):
                    continue

            key = state_key(dest, new_boxes)
            if not trans.add(key, cur, d):
                continue

            if new_boxes != boxes and level.all_on_goals(new_boxes):
                solution = trans.path_to(key)
                return SolverResult(True, solution, len(solution), expanded, False, time.time() - t0)

            queue.append(key)

    # frontier left over means we stopped early, not that the space is exhausted
    return SolverResult(False, None, 0, expanded, bool(queue), time.time() - t0)
