from sokoban_core.parser import parse_level_str
from sokoban_core.moves import Direction
from search.transposition import Transposition, state_key

LVL = """
######
#@$ $.
# .  #
######
"""

def test_key_ignores_box_order():
    s = parse_level_str(LVL)
    a, b = s.box_starts
    assert state_key(s.player_start, (1 << a) | (1 << b)) == state_key(s.player_start, (1 << b) | (1 << a))
    assert state_key(s.player_start, 1 << a) != state_key(s.player_start + 1, 1 << a)


def test_add_rejects_seen_states():
    root = state_key(0, 0b100)
    t = Transposition(root)
    child = state_key(1, 0b100)
    assert t.add(child, root, Direction.RIGHT) is True
    assert t.add(child, root, Direction.LEFT) is False
    assert t.add(root, child, Direction.LEFT) is False
    assert len(t) == 2
    assert child in t


def test_path_follows_parents():
    root = state_key(0, 0)
    t = Transposition(root)
    k1 = state_key(1, 0)
    k2 = state_key(2, 0)
    t.add(k1, root, Direction.RIGHT)
    t.add(k2, k1, Direction.DOWN)
    assert t.path_to(k2) == [Direction.RIGHT, Direction.DOWN]
    assert t.path_to(root) == []


def test_instances_are_independent():
    root = state_key(0, 0)
    t1 = Transposition(root)
    t2 = Transposition(root)
    t1.add(state_key(1, 0), root, Direction.UP)
    assert state_key(1, 0) not in t2
