from typing import List, Optional, Set
from .level import Level, set_bit, clear_bit

TOK_WALL = "#"
TOK_GOAL = "."
TOK_BOX = "$"
TOK_BOX_ON_GOAL = "*"
TOK_PLAYER = "@"
TOK_PLAYER_ON_GOAL = "+"
TOK_FLOOR = " "
FLOOR_ALIASES = (" ", "-", "_")


def parse_level_str(level_str: str) -> Level:
    """Parses ASCII level into Level.

    Supported characters:
      '#': wall
      '.': goal
      '$': box
      '*': box on goal
      '@': player
      '+': player on goal
      ' ', '-', '_': floor
    Cells past the end of a shorter line are left unspecified, i.e. walls.
    So are spaces outside the outer wall: those the player cannot walk to
    that connect to the edge of the grid through other spaces.
    """
    lines = [line.rstrip("\r\n") for line in level_str.splitlines() if line.strip() != ""]
    if not lines:
        raise ValueError("Empty level")
    height = len(lines)
    width = max(len(line) for line in lines)

    walls = goals = board_mask = 0
    boxes: List[int] = []
    player_idx = -1

    for y, line in enumerate(lines):
        for x, ch in enumerate(line):
            idx = y * width + x
            board_mask = set_bit(board_mask, idx)

            if ch == TOK_WALL:
                walls = set_bit(walls, idx)
            elif ch == TOK_GOAL:
                goals = set_bit(goals, idx)
            elif ch == TOK_BOX:
                boxes.append(idx)
            elif ch == TOK_BOX_ON_GOAL:
                boxes.append(idx)
                goals = set_bit(goals, idx)
            elif ch == TOK_PLAYER:
                player_idx = idx
            elif ch == TOK_PLAYER_ON_GOAL:
                player_idx = idx
                goals = set_bit(goals, idx)
            elif ch not in FLOOR_ALIASES:
                raise ValueError(f"Unknown level character {ch!r} at ({x}, {y})")

    if player_idx == -1:
        raise ValueError("No player '@' or '+' found in level")

    for idx in _outer_spaces(lines, width, player_idx):
        board_mask = clear_bit(board_mask, idx)

    return Level(width=width, height=height, walls=walls, goals=goals,
                 board_mask=board_mask, player_start=player_idx,
                 box_starts=tuple(boxes))


def parse_level_file(path: str) -> Level:
    with open(path, "r", encoding="utf-8") as f:
        return parse_level_str(f.read())


def _outer_spaces(lines: List[str], width: int, player_idx: int) -> Set[int]:
    height = len(lines)

    def char_at(idx: int) -> Optional[str]:
        y, x = divmod(idx, width)
        return lines[y][x] if x < len(lines[y]) else None

    def neighbours(idx: int):
        y, x = divmod(idx, width)
        if y > 0:
            yield idx - width
        if y < height - 1:
            yield idx + width
        if x > 0:
            yield idx - 1
        if x < width - 1:
            yield idx + 1

    # everything the player can walk to, boxes ignored
    inside = {player_idx}
    stack = [player_idx]
    while stack:
        for n in neighbours(stack.pop()):
            if n not in inside and char_at(n) not in (None, TOK_WALL):
                inside.add(n)
                stack.append(n)

    def is_outer(idx: int) -> bool:
        return idx not in inside and char_at(idx) == TOK_FLOOR

    edge = [idx for idx in range(width * height)
            if (idx < width or idx >= width * (height - 1) or idx % width in (0, width - 1))
            and is_outer(idx)]
    outer = set(edge)
    stack = list(edge)
    while stack:
        for n in neighbours(stack.pop()):
            if n not in outer and is_outer(n):
                outer.add(n)
                stack.append(n)
    return outer
