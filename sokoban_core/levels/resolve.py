from __future__ import annotations
from typing import Tuple

from ..level import Level
from ..parser import parse_level_str
from .io import split_levels


def parse_level_id(level_id: str) -> Tuple[str, int]:
    """Parses a string of the form "path/to/file.txt#3" into (path, index).

    No '#' means the first level of the file.
    """
    if "#" not in level_id:
        return level_id, 0
    path, idx = level_id.rsplit("#", 1)
    try:
        return path, int(idx)
    except ValueError:
        raise ValueError(f"bad level index in {level_id!r}") from None


def load_level_by_id(level_id: str) -> Level:
    """Loads level number k of a pack file given "pack.txt#k"."""
    path, wanted = parse_level_id(level_id)
    with open(path, "r", encoding="utf-8") as f:
        blocks = split_levels(f.read())
    if not blocks:
        raise ValueError(f"No levels found in {path}")
    if wanted < 0 or wanted >= len(blocks):
        raise IndexError(f"Index {wanted} out of range for {path} (total {len(blocks)})")
    return parse_level_str(blocks[wanted])
