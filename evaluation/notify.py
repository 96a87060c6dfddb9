"""Slack-compatible webhook notifications for batch solves and answer grading.

Posting is a no-op when the webhook URL environment variable is unset, and a
failed POST only prints a warning: notifications never break a run.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
import os
import sys
import time
from typing import Any, Dict, List, Optional

import requests

DEFAULT_WEBHOOK_ENV = "SLACK_WEBHOOK_URL"

SEVERITY_EMOJI = {
    "error": ":x:",
    "warning": ":warning:",
    "success": ":white_check_mark:",
    "info": ":information_source:",
}

Block = Dict[str, Any]


def webhook_url(env_var: str = DEFAULT_WEBHOOK_ENV) -> Optional[str]:
    return os.environ.get(env_var) or None


def is_webhook_enabled(env_var: str = DEFAULT_WEBHOOK_ENV) -> bool:
    return webhook_url(env_var) is not None


# ---- block builders

def slack_header(text: str) -> Block:
    return {"type": "header", "text": {"type": "plain_text", "text": text, "emoji": True}}


def slack_section(markdown: str) -> Block:
    return {"type": "section", "text": {"type": "mrkdwn", "text": markdown}}


def slack_divider() -> Block:
    return {"type": "divider"}


def slack_context(text: str) -> Block:
    return {"type": "context", "elements": [{"type": "mrkdwn", "text": text}]}


def slack_fields(fields: Dict[str, str]) -> Block:
    """Section with label/value pairs shown in columns."""
    return {
        "type": "section",
        "fields": [{"type": "mrkdwn", "text": f"*{label}*\n{value}"} for label, value in fields.items()],
    }


# ---- transport

def _post(payload: Dict[str, Any], env_var: str, timeout_s: float) -> bool:
    url = webhook_url(env_var)
    if url is None:
        return False
    try:
        r = requests.post(url, json=payload, timeout=timeout_s)
        r.raise_for_status()
    except requests.RequestException as e:
        print(f"[warn] webhook failed: {e}", file=sys.stderr)
        return False
    return True


def send_message(text: str, env_var: str = DEFAULT_WEBHOOK_ENV, timeout_s: float = 10.0) -> bool:
    return _post({"text": text}, env_var, timeout_s)


def send_blocks(blocks: List[Block], env_var: str = DEFAULT_WEBHOOK_ENV, timeout_s: float = 10.0) -> bool:
    """POST Block Kit blocks. True if the webhook accepted them."""
    return _post({"blocks": blocks}, env_var, timeout_s)


def send_alert(message: str, severity: str = "info", env_var: str = DEFAULT_WEBHOOK_ENV) -> bool:
    emoji = SEVERITY_EMOJI[severity]
    return send_blocks([
        slack_section(f"{emoji} *{severity.upper()}*: {message}"),
        slack_context(f"_{_now_iso()}_"),
    ], env_var=env_var)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _rate_emoji(rate: float) -> str:
    if rate >= 0.7:
        return ":tada:"
    if rate >= 0.3:
        return ":thinking_face:"
    return ":skull:"


def _pct(num: int, den: int) -> int:
    return round(num / den * 100) if den > 0 else 0


# ---- run summaries

@dataclass
class BatchSummary:
    name: str
    levels: int = 0
    solved: int = 0
    unsolvable: int = 0
    undetermined: int = 0
    errors: int = 0
    total_nodes: int = 0
    duration_s: float = 0.0


def batch_blocks(summary: BatchSummary) -> List[Block]:
    rate = summary.solved / summary.levels if summary.levels else 0.0
    return [
        slack_header(f"{_rate_emoji(rate)} Solver batch complete: {summary.name}"),
        slack_fields({
            "Levels": str(summary.levels),
            "Duration": f"{summary.duration_s / 60:.1f} min",
            "Solved": f"{summary.solved}/{summary.levels} ({_pct(summary.solved, summary.levels)}%)",
            "Unsolvable": str(summary.unsolvable),
            "Undetermined": str(summary.undetermined),
            "Errors": str(summary.errors),
        }),
        slack_divider(),
        slack_context(f"Nodes explored: {summary.total_nodes:,}"),
    ]


def notify_batch_complete(summary: BatchSummary, env_var: str = DEFAULT_WEBHOOK_ENV) -> bool:
    if not is_webhook_enabled(env_var):
        return False
    return send_blocks(batch_blocks(summary), env_var=env_var)


@dataclass
class ModelSummary:
    model_name: str
    puzzles_total: int = 0
    puzzles_solved: int = 0
    puzzles_optimal: int = 0
    total_output_tokens: int = 0
    total_cost: float = 0.0


@dataclass
class EvalRun:
    dataset: str
    started_at: float
    completed_at: Optional[float] = None
    puzzle_count: int = 0
    by_model: Dict[str, ModelSummary] = field(default_factory=dict)


def eval_blocks(run: EvalRun) -> List[Block]:
    models = list(run.by_model.values())
    total_solved = sum(m.puzzles_solved for m in models)
    total = sum(m.puzzles_total for m in models)
    total_cost = sum(m.total_cost for m in models)
    total_tokens = sum(m.total_output_tokens for m in models)
    duration_min = round(((run.completed_at or time.time()) - run.started_at) / 60, 1)
    rate = total_solved / total if total > 0 else 0.0

    lines = []
    for m in models:
        words = round(m.total_output_tokens * 0.75)
        lines.append(
            f"*{m.model_name}*: {m.puzzles_solved}/{m.puzzles_total} ({_pct(m.puzzles_solved, m.puzzles_total)}%)"
            f" · optimal {m.puzzles_optimal} · {words:,} words · ${m.total_cost:.2f}"
        )

    return [
        slack_header(f"{_rate_emoji(rate)} Eval Complete: {run.dataset}"),
        slack_fields({
            "Puzzles": str(run.puzzle_count),
            "Duration": f"{duration_min} min",
            "Solved": f"{total_solved}/{total} ({_pct(total_solved, total)}%)",
            "Total Cost": f"${total_cost:.2f}",
        }),
        slack_divider(),
        slack_section("\n".join(lines) or "_no models_"),
        slack_divider(),
        slack_context(f"Output: {round(total_tokens * 0.75):,} words · {total_tokens:,} tokens"),
    ]


def notify_eval_complete(run: EvalRun, env_var: str = DEFAULT_WEBHOOK_ENV) -> bool:
    if not is_webhook_enabled(env_var):
        return False
    return send_blocks(eval_blocks(run), env_var=env_var)


def notify_eval_failed(error: str, dataset: str, env_var: str = DEFAULT_WEBHOOK_ENV) -> bool:
    if not is_webhook_enabled(env_var):
        return False
    return send_blocks([
        slack_header(":x: Eval Failed"),
        slack_section(f"*Dataset:* {dataset}\n*Error:* {error}"),
        slack_context(_now_iso()),
    ], env_var=env_var)
