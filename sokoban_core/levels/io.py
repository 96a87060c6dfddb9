from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from sokoban_core.parser import parse_level_str
from sokoban_core.level import Level

COMMENT_PREFIX = ";"


@dataclass(frozen=True)
class LevelRef:
    path: str
    index: int  # index of the level inside the pack file

    @property
    def level_id(self) -> str:
        return f"{self.path}#{self.index}"


def split_levels(text: str) -> List[str]:
    """Splits a pack into level blocks on blank lines; ';' lines are comments."""
    blocks: List[str] = []
    cur: List[str] = []
    for line in text.splitlines():
        if line.lstrip().startswith(COMMENT_PREFIX):
            continue
        if line.strip() == "":
            if cur:
                blocks.append("\n".join(cur))
                cur = []
        else:
            cur.append(line.rstrip("\r\n"))
    if cur:
        blocks.append("\n".join(cur))
    return blocks


def iterate_level_strings(root_dir: str, rel_dirs: List[str]) -> Iterator[Tuple[LevelRef, str]]:
    """All levels of every .txt pack in the given subfolders, sorted by file name."""
    for rel in rel_dirs:
        abs_dir = Path(root_dir) / rel
        if not abs_dir.is_dir():
            continue
        for fpath in sorted(abs_dir.glob("*.txt")):
            blocks = split_levels(fpath.read_text(encoding="utf-8"))
            for i, block in enumerate(blocks):
                yield LevelRef(path=str(fpath), index=i), block


def count_boxes(level: Level) -> int:
    return len(level.box_starts)


def filter_level(level_str: str, *, max_w: Optional[int] = None, max_h: Optional[int] = None,
                 min_b: Optional[int] = None, max_b: Optional[int] = None) -> bool:
    """True if the level parses and fits the size/box-count limits."""
    try:
        level = parse_level_str(level_str)
    except ValueError:
        return False
    b = count_boxes(level)
    if max_w is not None and level.width > max_w: return False
    if max_h is not None and level.height > max_h: return False
    if min_b is not None and b < min_b: return False
    if max_b is not None and b > max_b: return False
    return True
