from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from sokoban_core.moves import Direction, encode_moves


@dataclass
class SolverResult:
    """Outcome of one solve.

    solvable=False with hit_limit=True means the search stopped early and the
    level may still be solvable; with hit_limit=False the space was exhausted.
    """

    solvable: bool
    solution: Optional[List[Direction]]
    move_count: int
    nodes_explored: int
    hit_limit: bool
    runtime_s: float = 0.0

    @property
    def moves_str(self) -> Optional[str]:
        if self.solution is None:
            return None
        return encode_moves(self.solution)

    @property
    def status(self) -> str:
        if self.solvable:
            return "solved"
        return "undetermined" if self.hit_limit else "unsolvable"

    def to_dict(self) -> Dict[str, object]:
        return {
            "solvable": self.solvable,
            "solution": self.moves_str,
            "move_count": self.move_count,
            "nodes_explored": self.nodes_explored,
            "hit_limit": self.hit_limit,
            "runtime": self.runtime_s,
        }
