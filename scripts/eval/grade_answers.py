"""
Grade language-model answers against the BFS solver.

Input: JSONL, one record per answer:
  {"level_id": "pack.txt#3", "model": "some-model", "response": "... ANSWER: `RRUL`",
   "output_tokens": 812, "cost": 0.004}
(output_tokens and cost are optional)

Usage:
  python -m scripts.eval.grade_answers --answers results/answers.jsonl --out results/grades.csv
"""
from __future__ import annotations
import argparse, csv, json, os, time
from typing import Dict, List, Optional
from tqdm import tqdm

from sokoban_core.levels.resolve import load_level_by_id
from search.bfs import solve_puzzle
from search.config import DEFAULT_CONFIG_PATH, load_config
from search.result import SolverResult
from evaluation.answers import grade_answer
from evaluation.notify import EvalRun, ModelSummary, notify_eval_complete, notify_eval_failed

FIELDS = ["level_id", "model", "answer", "parse_error", "solved", "move_count", "illegal_at",
          "optimal_move_count", "is_optimal", "deadlocked"]


def read_answers(path: str) -> List[Dict[str, object]]:
    rows = []
    with open(path, "r", encoding="utf-8") as f:
        for ln, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                rec = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValueError(f"{path}:{ln}: bad JSON ({e})") from None
            if "level_id" not in rec or "response" not in rec:
                raise ValueError(f"{path}:{ln}: record needs 'level_id' and 'response'")
            rows.append(rec)
    return rows


def grade_all(records: List[Dict[str, object]], max_nodes: int,
              time_limit: Optional[float] = None) -> tuple:
    """Grades every record; returns (grade rows, per-model summaries)."""
    solved_cache: Dict[str, SolverResult] = {}
    by_model: Dict[str, ModelSummary] = {}
    out = []
    for rec in tqdm(records, desc="Grading", unit="answer"):
        level_id = str(rec["level_id"])
        model = str(rec.get("model", "unknown"))
        level = load_level_by_id(level_id)
        if level_id not in solved_cache:
            solved_cache[level_id] = solve_puzzle(level, max_nodes=max_nodes, time_limit_s=time_limit)
            if solved_cache[level_id].hit_limit:
                tqdm.write(f"[warn] {level_id}: solver hit its budget, optimum unknown")
        g = grade_answer(level, str(rec["response"]), solved_cache[level_id])

        m = by_model.setdefault(model, ModelSummary(model_name=model))
        m.puzzles_total += 1
        m.puzzles_solved += int(g.solved)
        m.puzzles_optimal += int(g.is_optimal)
        m.total_output_tokens += int(rec.get("output_tokens", 0) or 0)
        m.total_cost += float(rec.get("cost", 0.0) or 0.0)

        out.append({"level_id": level_id, "model": model, **g.to_dict()})
    return out, by_model


def main(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Grade model move strings against BFS ground truth")
    p.add_argument("--answers", required=True)
    p.add_argument("--out", default="results/grades.csv")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    p.add_argument("--max_nodes", type=int, default=None)
    p.add_argument("--notify", action="store_true")
    args = p.parse_args(argv)

    cfg = load_config(args.config)
    max_nodes = args.max_nodes if args.max_nodes is not None else cfg.solver.max_nodes
    notify = args.notify or cfg.notify.enabled
    dataset = os.path.basename(args.answers)

    started = time.time()
    try:
        records = read_answers(args.answers)
        rows, by_model = grade_all(records, max_nodes, cfg.solver.time_limit_s)
    except (OSError, ValueError, IndexError) as e:
        if notify:
            notify_eval_failed(str(e), dataset, env_var=cfg.notify.webhook_env)
        raise

    if os.path.dirname(args.out):
        os.makedirs(os.path.dirname(args.out), exist_ok=True)
    with open(args.out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=FIELDS)
        w.writeheader()
        for r in rows:
            w.writerow(r)

    for m in by_model.values():
        print(f"{m.model_name}: solved {m.puzzles_solved}/{m.puzzles_total}, optimal {m.puzzles_optimal}")
    print(f"done: {len(rows)} answers → {args.out}")

    run = EvalRun(dataset=dataset, started_at=started, completed_at=time.time(),
                  puzzle_count=len({r["level_id"] for r in rows}), by_model=by_model)
    if notify:
        notify_eval_complete(run, env_var=cfg.notify.webhook_env)
    return run


if __name__ == "__main__":
    main()
