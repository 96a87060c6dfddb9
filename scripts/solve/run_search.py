from __future__ import annotations
import argparse

from sokoban_core.levels.resolve import load_level_by_id
from sokoban_core.parser import parse_level_str
from sokoban_core.render import render_ascii
from sokoban_core.moves import apply_move
from sokoban_core.deadlocks import compute_dead_squares
from search.bfs import solve_puzzle
from search.config import DEFAULT_CONFIG_PATH, load_config

LVL = """
#####
#.@ #
# $ #
# . #
#####
"""

def main():
    p = argparse.ArgumentParser(description="Solve one level with BFS")
    p.add_argument(
        "level_id",
        nargs="?",
        default=None,
        help="Level id like 'path/to/pack.txt#idx' (default: a built-in level).",
    )
    p.add_argument("--config", type=str, default=DEFAULT_CONFIG_PATH)
    p.add_argument("--max_nodes", type=int, default=None, help="node budget (overrides config)")
    p.add_argument("--time_limit", type=float, default=None, help="seconds (overrides config)")
    p.add_argument("--show_dead", action="store_true", help="draw dead squares as 'x'")
    p.add_argument("--replay", action="store_true", help="render every step of the solution")
    args = p.parse_args()

    cfg = load_config(args.config).solver
    max_nodes = args.max_nodes if args.max_nodes is not None else cfg.max_nodes
    time_limit = args.time_limit if args.time_limit is not None else cfg.time_limit_s

    level = load_level_by_id(args.level_id) if args.level_id else parse_level_str(LVL)
    dead = compute_dead_squares(level) if args.show_dead else None
    print(render_ascii(level, dead=dead))

    res = solve_puzzle(level, max_nodes=max_nodes, time_limit_s=time_limit)
    print("Result:", {**res.to_dict(), "status": res.status})
    if not res.solvable:
        return
    print("Moves:", res.moves_str or "(none)")

    if args.replay:
        player, boxes = level.player_start, level.boxes_mask
        for i, d in enumerate(res.solution or [], start=1):
            player, boxes, _ = apply_move(level, player, boxes, d)
            print(f"\n-- step {i}: {d.name} --\n{render_ascii(level, player, boxes, dead=dead)}")

if __name__ == "__main__":
    main()
