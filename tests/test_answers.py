from sokoban_core.parser import parse_level_str
from search.bfs import solve_puzzle
from evaluation.answers import extract_answer, grade_answer
from evaluation.prompts import SOKOBAN_OUTPUT_FORMAT_INSTRUCTIONS, build_sokoban_prompt

CORRIDOR = """
######
#@$ .#
######
"""


def test_extract_last_answer():
    text = "Try ANSWER: `LL` first.\nActually:\nANSWER: ` RR `"
    assert extract_answer(text) == "RR"
    assert extract_answer("no marker here") is None
    assert extract_answer("answer: `u`") == "u"


def test_grade_optimal_answer():
    level = parse_level_str(CORRIDOR)
    g = grade_answer(level, "push twice\nANSWER: `RR`")
    assert g.solved and g.is_optimal
    assert g.move_count == 2
    assert g.optimal_move_count == 2
    assert g.parse_error is None


def test_grade_longer_answer_is_not_optimal():
    level = parse_level_str(CORRIDOR)
    ref = solve_puzzle(level)
    g = grade_answer(level, "ANSWER: `RLRR`", ref)
    assert g.solved is True
    assert g.is_optimal is False
    assert g.move_count == 4


def test_grade_illegal_move():
    level = parse_level_str(CORRIDOR)
    g = grade_answer(level, "ANSWER: `URR`")
    assert g.solved is False
    assert g.illegal_at == 0


def test_grade_parse_errors():
    level = parse_level_str(CORRIDOR)
    assert grade_answer(level, "I give up").parse_error == "no ANSWER marker"
    g = grade_answer(level, "ANSWER: `R2`")
    assert g.solved is False
    assert g.parse_error is not None
    assert g.to_dict()["is_optimal"] is False


def test_grade_flags_stuck_box():
    level = parse_level_str("#######\n#@$ . #\n#######")
    g = grade_answer(level, "ANSWER: `RRRR`")
    assert g.solved is False
    assert g.illegal_at == 3
    assert g.deadlocked is True


def test_prompt_contains_board_and_format():
    level = parse_level_str(CORRIDOR)
    prompt = build_sokoban_prompt(level)
    assert "#@$ .#" in prompt
    assert prompt.endswith(SOKOBAN_OUTPUT_FORMAT_INSTRUCTIONS)
    assert "ANSWER: `RRULLDR`" in SOKOBAN_OUTPUT_FORMAT_INSTRUCTIONS
