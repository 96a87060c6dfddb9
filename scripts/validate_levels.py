from __future__ import annotations
import argparse, yaml
from sokoban_core.levels.io import iterate_level_strings, filter_level
from sokoban_core.parser import parse_level_str
from sokoban_core.deadlocks import compute_dead_squares, boxes_on_dead_squares


def check_level(level_str: str) -> str:
    """Empty string if the level looks playable, otherwise the reason it is not."""
    try:
        level = parse_level_str(level_str)
        level.validate()
    except ValueError as e:
        return str(e)
    stuck = boxes_on_dead_squares(level, compute_dead_squares(level), level.box_starts)
    if stuck:
        return f"box on dead square at {stuck[0]}"
    return ""


def main():
    p = argparse.ArgumentParser()
    p.add_argument("--config", type=str, default="configs/data.yaml")
    args = p.parse_args()

    with open(args.config, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f)

    root = cfg["levels"]["root_dir"]
    rels = cfg["levels"]["sources"]
    flt  = cfg.get("filters", {})

    ok = 0
    bad = 0
    for ref, s in iterate_level_strings(root, rels):
        if not filter_level(s,
                            max_w=flt.get("max_width"),
                            max_h=flt.get("max_height"),
                            min_b=flt.get("min_boxes"),
                            max_b=flt.get("max_boxes")):
            bad += 1
            print(f"[skip] {ref.level_id}: outside filters")
            continue
        reason = check_level(s)
        if reason:
            bad += 1
            print(f"[bad] {ref.level_id}: {reason}")
        else:
            ok += 1
    print(f"valid: {ok}, skipped: {bad}")

if __name__ == "__main__":
    main()
