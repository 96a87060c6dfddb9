from typing import Optional

import numpy as np

from .level import Level, has_bit

TOK_DEAD = "x"


def render_ascii(level: Level, player: Optional[int] = None, boxes: Optional[int] = None,
                 dead: Optional[np.ndarray] = None) -> str:
    """ASCII visualization of a level, by default in its start configuration.

    player/boxes override the start configuration; `dead` is an optional
    (height, width) boolean grid drawn as 'x' on empty floor.
    """
    if player is None:
        player = level.player_start
    if boxes is None:
        boxes = level.boxes_mask
    out_lines = []
    for y in range(level.height):
        row_chars = []
        for x in range(level.width):
            idx = y * level.width + x
            if not has_bit(level.board_mask, idx):
                row_chars.append(' ')
                continue
            if has_bit(level.walls, idx):
                row_chars.append('#')
                continue
            has_goal = level.is_goal_cell(idx)
            has_box = has_bit(boxes, idx)
            if idx == player:
                row_chars.append('+' if has_goal else '@')
            elif has_box:
                row_chars.append('*' if has_goal else '$')
            elif has_goal:
                row_chars.append('.')
            elif dead is not None and dead[y, x]:
                row_chars.append(TOK_DEAD)
            else:
                row_chars.append(' ')
        out_lines.append(''.join(row_chars).rstrip())
    return "\n".join(out_lines)
