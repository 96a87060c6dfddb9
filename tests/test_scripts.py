import csv
import json
from pathlib import Path

from scripts.solve.run_batch import main as batch_main
from scripts.eval.grade_answers import main as grade_main
from scripts.validate_levels import check_level

EXAMPLES = Path(__file__).resolve().parent.parent / "sokoban_core" / "levels" / "examples"


def test_run_batch_writes_csv(tmp_path, monkeypatch):
    monkeypatch.delenv("SLACK_WEBHOOK_URL", raising=False)
    lst = tmp_path / "levels.txt"
    ids = [f"{EXAMPLES / 'tiny.txt'}#{i}" for i in range(3)] + [f"{EXAMPLES / 'stuck.txt'}#0", "missing.txt#0"]
    lst.write_text("# comment\n" + "\n".join(ids) + "\n", encoding="utf-8")
    out = tmp_path / "out" / "batch.csv"

    summary = batch_main(["--list", str(lst), "--out", str(out), "--jobs", "1",
                          "--config", str(tmp_path / "none.yaml")])
    assert summary.levels == 5
    assert summary.solved == 3
    assert summary.unsolvable == 1
    assert summary.errors == 1

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert [r["level_id"] for r in rows] == ids
    assert rows[0]["solution"] == "D"
    assert rows[1]["solution"] == "RR"
    assert rows[3]["status"] == "unsolvable"


def test_grade_answers(tmp_path, monkeypatch):
    monkeypatch.delenv("SLACK_WEBHOOK_URL", raising=False)
    lvl = f"{EXAMPLES / 'tiny.txt'}#1"
    answers = tmp_path / "answers.jsonl"
    recs = [
        {"level_id": lvl, "model": "a", "response": "ANSWER: `RR`", "output_tokens": 10},
        {"level_id": lvl, "model": "b", "response": "ANSWER: `RLRR`"},
        {"level_id": lvl, "model": "b", "response": "no idea"},
    ]
    answers.write_text("\n".join(json.dumps(r) for r in recs) + "\n", encoding="utf-8")
    out = tmp_path / "grades.csv"

    run = grade_main(["--answers", str(answers), "--out", str(out), "--config", str(tmp_path / "none.yaml")])
    assert run.puzzle_count == 1
    assert run.by_model["a"].puzzles_solved == 1
    assert run.by_model["a"].puzzles_optimal == 1
    assert run.by_model["b"].puzzles_total == 2
    assert run.by_model["b"].puzzles_solved == 1
    assert run.by_model["b"].puzzles_optimal == 0

    with open(out, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows[2]["parse_error"] == "no ANSWER marker"


def test_check_level():
    assert check_level("#####\n#@$.#\n#####") == ""
    assert "dead square" in check_level("#####\n#$  #\n# @.#\n#####")
    assert "goals" in check_level("######\n#@$$.#\n######")
