from __future__ import annotations
from typing import Dict, List, Optional, Tuple

from sokoban_core.moves import Direction

# (player index, box bitset). Bits follow idx = y*W + x, so the bitset is the
# box positions sorted by (y, x) packed into one integer; box order is gone.
StateKey = Tuple[int, int]


def state_key(player: int, boxes: int) -> StateKey:
    return (player, boxes)


class Transposition:
    """Visited states of one search, each with the move that first reached it."""
    def __init__(self, root: StateKey) -> None:
        self.root = root
        self.parent: Dict[StateKey, Tuple[Optional[StateKey], Optional[Direction]]] = {root: (None, None)}

    def __len__(self) -> int:
        return len(self.parent)

    def __contains__(self, key: StateKey) -> bool:
        return key in self.parent

    def add(self, key: StateKey, parent: StateKey, move: Direction) -> bool:
        """Record key as reached from parent by move. False if already seen."""
        if key in self.parent:
            return False
        self.parent[key] = (parent, move)
        return True

    def path_to(self, key: StateKey) -> List[Direction]:
        moves: List[Direction] = []
        cur: Optional[StateKey] = key
        while cur is not None:
            prev, move = self.parent[cur]
            if move is not None:
                moves.append(move)
            cur = prev
        moves.reverse()
        return moves
