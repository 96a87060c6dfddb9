from __future__ import annotations
import argparse, csv, os, time
from typing import List, Dict, Optional
from multiprocessing import Pool, cpu_count
from tqdm import tqdm

from sokoban_core.levels.resolve import load_level_by_id
from search.bfs import solve_puzzle
from search.config import DEFAULT_CONFIG_PATH, load_config
from evaluation.notify import BatchSummary, notify_batch_complete

FIELDS = ["level_id", "status", "solvable", "move_count", "nodes_explored", "hit_limit", "runtime", "solution", "error"]


def _run_one(args_tuple) -> Dict[str, object]:
    level_id, max_nodes, time_limit = args_tuple
    try:
        level = load_level_by_id(level_id)
        res = solve_puzzle(level, max_nodes=max_nodes, time_limit_s=time_limit)
        return {"level_id": level_id, "status": res.status, **res.to_dict(), "error": ""}
    except (OSError, ValueError, IndexError) as e:
        return {
            "level_id": level_id, "status": "error", "solvable": False, "move_count": 0,
            "nodes_explored": 0, "hit_limit": False, "runtime": 0.0, "solution": None, "error": str(e),
        }


def summarize(name: str, rows: List[Dict[str, object]], duration_s: float) -> BatchSummary:
    s = BatchSummary(name=name, levels=len(rows), duration_s=duration_s)
    for r in rows:
        status = r["status"]
        if status == "solved":
            s.solved += 1
        elif status == "unsolvable":
            s.unsolvable += 1
        elif status == "undetermined":
            s.undetermined += 1
        else:
            s.errors += 1
        s.total_nodes += int(r["nodes_explored"])
    return s


def read_level_list(path: str) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return [ln.strip() for ln in f if ln.strip() and not ln.strip().startswith("#")]


def main(argv: Optional[List[str]] = None):
    p = argparse.ArgumentParser(description="Batch BFS solves → CSV (parallel)")
    p.add_argument("--list", required=True, help="file with one level id per line")
    p.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    p.add_argument("--out", default=None)
    p.add_argument("--max_nodes", type=int, default=None)
    p.add_argument("--time_limit", type=float, default=None)
    p.add_argument("--jobs", type=int, default=None, help="processes (0→cpu_count)")
    p.add_argument("--notify", action="store_true", help="post the summary to the webhook")
    args = p.parse_args(argv)

    cfg = load_config(args.config)
    out = args.out or cfg.batch.out
    max_nodes = args.max_nodes if args.max_nodes is not None else cfg.solver.max_nodes
    time_limit = args.time_limit if args.time_limit is not None else cfg.solver.time_limit_s
    jobs = args.jobs if args.jobs is not None else cfg.batch.jobs
    jobs = jobs or cpu_count()

    if os.path.dirname(out):
        os.makedirs(os.path.dirname(out), exist_ok=True)

    level_ids = read_level_list(args.list)
    payload = [(lid, max_nodes, time_limit) for lid in level_ids]

    started = time.time()
    if jobs == 1:
        rows = [_run_one(t) for t in tqdm(payload, desc="Running BFS", unit="level")]
    else:
        with Pool(processes=jobs) as pool:
            rows = list(tqdm(pool.imap_unordered(_run_one, payload), total=len(payload), desc="Running BFS", unit="level"))
    for r in rows:
        if r["status"] == "error":
            tqdm.write(f"[error] {r['level_id']}: {r['error']}")

    with open(out, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=FIELDS)
        w.writeheader()
        order = {lid: i for i, lid in enumerate(level_ids)}
        for r in sorted(rows, key=lambda r: order[r["level_id"]]):
            w.writerow(r)

    summary = summarize(os.path.basename(args.list), rows, time.time() - started)
    print(f"done: {summary.levels} levels → {out}; solved={summary.solved} unsolvable={summary.unsolvable} "
          f"undetermined={summary.undetermined} errors={summary.errors}; "
          f"total_time={summary.duration_s:.2f}s; jobs={jobs}")

    if args.notify or cfg.notify.enabled:
        notify_batch_complete(summary, env_var=cfg.notify.webhook_env)
    return summary


if __name__ == "__main__":
    main()
