from __future__ import annotations
from dataclasses import dataclass, asdict
import re
from typing import Dict, Optional

from sokoban_core.level import Level
from sokoban_core.moves import decode_moves, replay
from sokoban_core.deadlocks import has_simple_deadlock
from search.bfs import solve_puzzle
from search.result import SolverResult

_ANSWER_RE = re.compile(r"ANSWER:\s*`([^`]*)`", re.IGNORECASE)


def extract_answer(text: str) -> Optional[str]:
    """Moves inside the last ANSWER: `...` marker, None if there is none."""
    matches = _ANSWER_RE.findall(text or "")
    if not matches:
        return None
    return matches[-1].strip()


@dataclass
class Grade:
    answer: Optional[str]
    parse_error: Optional[str]
    solved: bool
    move_count: int
    illegal_at: Optional[int]
    optimal_move_count: Optional[int]  # None when the solver did not finish
    deadlocked: bool = False  # final position has a box stuck in a corner

    @property
    def is_optimal(self) -> bool:
        return self.solved and self.optimal_move_count is not None \
            and self.move_count == self.optimal_move_count

    def to_dict(self) -> Dict[str, object]:
        d = asdict(self)
        d["is_optimal"] = self.is_optimal
        return d


def grade_answer(level: Level, response: str, reference: Optional[SolverResult] = None) -> Grade:
    """Replays a model's answer on the level and compares it with the optimum.

    `reference` is a solver result for the same level; it is computed when
    omitted. A response without an ANSWER marker or with invalid move letters
    is graded as unsolved with `parse_error` set.
    """
    if reference is None:
        reference = solve_puzzle(level)
    optimal = reference.move_count if reference.solvable else None

    answer = extract_answer(response)
    if answer is None:
        return Grade(None, "no ANSWER marker", False, 0, None, optimal)
    try:
        moves = decode_moves(answer)
    except ValueError as e:
        return Grade(answer, str(e), False, 0, None, optimal)

    res = replay(level, moves)
    solved = res.solved and res.illegal_at is None
    return Grade(answer, None, solved, len(moves), res.illegal_at, optimal,
                 deadlocked=not solved and has_simple_deadlock(level, res.boxes))
