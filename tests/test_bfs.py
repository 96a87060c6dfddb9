from collections import deque

from sokoban_core.parser import parse_level_str
from sokoban_core.level import Level, CellKind
from sokoban_core.moves import Direction, DIRECTIONS, apply_move, replay
from sokoban_core.deadlocks import compute_dead_squares
from search.bfs import solve_puzzle, DEFAULT_MAX_NODES

U, D, L, R = Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT

LVL = """
#####
#.@ #
# $ #
# . #
#####
"""

CORRIDOR = """
#####
#@$ .
#####
"""

TWO_BOXES = """
#######
#  .  #
# $#$ #
#@ .  #
#######
"""

STUCK = """
#####
#$  #
# @.#
#####
"""

SOLVED = """
#####
#@* #
#####
"""

# goal sits in a room the box can never reach
SEALED = """
######
#    #
#@$  #
#    #
######
#.   #
######
"""


def reference_bfs(level: Level, limit: int = 200000):
    """Plain BFS without any pruning; returns the shortest move count or None."""
    start = (level.player_start, level.boxes_mask)
    seen = {start}
    q = deque([(start, 0)])
    while q and len(seen) < limit:
        (player, boxes), dist = q.popleft()
        if level.all_on_goals(boxes):
            return dist
        for d in DIRECTIONS:
            nxt = apply_move(level, player, boxes, d)
            if nxt is None:
                continue
            key = (nxt[0], nxt[1])
            if key not in seen:
                seen.add(key)
                q.append((key, dist + 1))
    return None


def test_bfs_solve_simple():
    res = solve_puzzle(parse_level_str(LVL))
    assert res.solvable is True
    assert res.solution == [D]
    assert res.move_count == 1
    assert res.nodes_explored == 1
    assert res.hit_limit is False
    assert res.moves_str == "D"


def test_corridor_two_pushes():
    res = solve_puzzle(parse_level_str(CORRIDOR))
    assert res.solvable is True
    assert res.solution == [R, R]
    assert res.move_count == 2
    assert res.nodes_explored <= 6


def test_corridor_without_right_wall_single_push():
    # 4x3, the goal column is the last one; past it is outside the grid
    res = solve_puzzle(parse_level_str("####\n#@$.\n####"))
    assert res.solution == [R]
    assert res.move_count == 1


def test_missing_terrain_counts_as_wall():
    terrain = {(0, 0): CellKind.FLOOR, (1, 0): CellKind.FLOOR, (2, 0): CellKind.GOAL}
    level = Level.from_terrain(3, 1, terrain, player_start=(0, 0), box_starts=[(1, 0)])
    res = solve_puzzle(level)
    assert res.solution == [R]


def test_box_off_grid_is_never_on_a_goal():
    # (3, 0) is past the right edge; it must not wrap onto the goal at (0, 1)
    terrain = {(0, 0): CellKind.FLOOR, (1, 0): CellKind.FLOOR, (2, 0): CellKind.FLOOR,
               (0, 1): CellKind.GOAL, (1, 1): CellKind.FLOOR, (2, 1): CellKind.FLOOR}
    level = Level.from_terrain(3, 2, terrain, player_start=(1, 0), box_starts=[(3, 0)])
    res = solve_puzzle(level)
    assert res.solvable is False
    assert res.solution is None
    assert res.nodes_explored == 1
    assert res.hit_limit is False


def test_box_above_grid_is_unsolvable():
    terrain = {(0, 0): CellKind.FLOOR, (1, 0): CellKind.FLOOR, (2, 0): CellKind.GOAL}
    level = Level.from_terrain(3, 1, terrain, player_start=(0, 0), box_starts=[(1, -1)])
    res = solve_puzzle(level)
    assert res.status == "unsolvable"
    assert res.nodes_explored == 1


def test_player_off_grid_is_unsolvable():
    terrain = {(0, 0): CellKind.FLOOR, (1, 0): CellKind.FLOOR, (2, 0): CellKind.GOAL}
    level = Level.from_terrain(3, 1, terrain, player_start=(-1, 0), box_starts=[(1, 0)])
    res = solve_puzzle(level)
    assert res.solvable is False
    assert res.hit_limit is False
    assert res.nodes_explored == 1


def test_stacked_boxes_are_unsolvable():
    terrain = {(x, 0): CellKind.FLOOR for x in range(5)}
    terrain[(3, 0)] = CellKind.GOAL
    level = Level.from_terrain(5, 1, terrain, player_start=(1, 0), box_starts=[(2, 0), (2, 0)])
    res = solve_puzzle(level)
    assert res.solvable is False
    assert res.solution is None
    assert res.nodes_explored == 1
    assert res.hit_limit is False


def test_already_solved():
    res = solve_puzzle(parse_level_str(SOLVED))
    assert res.solvable is True
    assert res.solution == []
    assert res.move_count == 0
    assert res.hit_limit is False


def test_box_on_dead_square_exits_early():
    res = solve_puzzle(parse_level_str(STUCK))
    assert res.solvable is False
    assert res.solution is None
    assert res.move_count == 0
    assert res.nodes_explored == 1
    assert res.hit_limit is False
    assert res.status == "unsolvable"


def test_exhausted_space_is_proven_unsolvable():
    res = solve_puzzle(parse_level_str(SEALED))
    assert res.solvable is False
    assert res.hit_limit is False
    assert res.nodes_explored > 1
    assert res.solution is None


def test_optimal_against_unpruned_reference():
    for lvl in (LVL, CORRIDOR, TWO_BOXES):
        level = parse_level_str(lvl)
        res = solve_puzzle(level)
        assert res.solvable
        assert res.move_count == reference_bfs(level)


def test_solution_replays_to_goal():
    for lvl in (LVL, CORRIDOR, TWO_BOXES):
        level = parse_level_str(lvl)
        res = solve_puzzle(level)
        rep = replay(level, res.solution)
        assert rep.illegal_at is None
        assert rep.solved


def test_solution_never_uses_dead_squares():
    level = parse_level_str(TWO_BOXES)
    dead = compute_dead_squares(level)
    res = solve_puzzle(level)
    player, boxes = level.player_start, level.boxes_mask
    for d in res.solution:
        player, boxes, _ = apply_move(level, player, boxes, d)
        for x, y in ((b % level.width, b // level.width) for b in range(level.width * level.height) if boxes >> b & 1):
            assert not dead[y, x]


def test_deterministic():
    level = parse_level_str(TWO_BOXES)
    a = solve_puzzle(level)
    b = solve_puzzle(level)
    assert a.solution == b.solution
    assert a.nodes_explored == b.nodes_explored


def test_box_order_does_not_matter():
    level = parse_level_str(TWO_BOXES)
    swapped = Level(level.width, level.height, level.walls, level.goals, level.board_mask,
                    level.player_start, tuple(reversed(level.box_starts)))
    assert solve_puzzle(level).solution == solve_puzzle(swapped).solution


def test_budget_exhaustion_is_undetermined():
    level = parse_level_str(TWO_BOXES)
    full = solve_puzzle(level)
    n = full.nodes_explored
    assert n > 1

    short = solve_puzzle(level, max_nodes=n - 1)
    assert short.solvable is False
    assert short.hit_limit is True
    assert short.nodes_explored == n - 1
    assert short.status == "undetermined"

    again = solve_puzzle(level, max_nodes=n)
    assert again.solution == full.solution


def test_default_budget():
    assert DEFAULT_MAX_NODES == 50000


def test_should_stop_cancels():
    res = solve_puzzle(parse_level_str(TWO_BOXES), should_stop=lambda: True)
    assert res.solvable is False
    assert res.hit_limit is True
    assert res.nodes_explored == 0


def test_zero_time_limit_stops():
    res = solve_puzzle(parse_level_str(TWO_BOXES), time_limit_s=-1.0)
    assert res.hit_limit is True
    assert res.solvable is False


def test_result_to_dict():
    d = solve_puzzle(parse_level_str(CORRIDOR)).to_dict()
    assert d["solution"] == "RR"
    assert d["move_count"] == 2
    assert d["solvable"] is True
