from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
import os

import yaml

from .bfs import DEFAULT_MAX_NODES

DEFAULT_CONFIG_PATH = "configs/solver.yaml"


@dataclass
class SolverConfig:
    max_nodes: int = DEFAULT_MAX_NODES
    time_limit_s: Optional[float] = None


@dataclass
class BatchConfig:
    jobs: int = 0  # 0 -> cpu_count
    out: str = "results/batch.csv"


@dataclass
class NotifyConfig:
    enabled: bool = False
    webhook_env: str = "SLACK_WEBHOOK_URL"


@dataclass
class Config:
    solver: SolverConfig = field(default_factory=SolverConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)
    notify: NotifyConfig = field(default_factory=NotifyConfig)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) or {}
    if not isinstance(sec, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    return sec


def _int(sec: Dict[str, Any], key: str, default: int) -> int:
    v = sec.get(key, default)
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError(f"'{key}' must be an integer, got {v!r}")
    return v


def load_config(path: Optional[str] = DEFAULT_CONFIG_PATH) -> Config:
    """Reads a YAML config. Missing file → defaults, unknown keys are ignored."""
    if path is None or not os.path.exists(path):
        return Config()
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: top level must be a mapping")

    s = _section(raw, "solver")
    tl = s.get("time_limit_s")
    if tl is not None and (isinstance(tl, bool) or not isinstance(tl, (int, float))):
        raise ValueError(f"'time_limit_s' must be a number, got {tl!r}")
    solver = SolverConfig(
        max_nodes=_int(s, "max_nodes", DEFAULT_MAX_NODES),
        time_limit_s=float(tl) if tl is not None else None,
    )

    b = _section(raw, "batch")
    batch = BatchConfig(jobs=_int(b, "jobs", 0), out=str(b.get("out", BatchConfig.out)))

    n = _section(raw, "notify")
    notify = NotifyConfig(
        enabled=bool(n.get("enabled", False)),
        webhook_env=str(n.get("webhook_env", NotifyConfig.webhook_env)),
    )
    return Config(solver=solver, batch=batch, notify=notify)
