"""Prompt text shared by puzzle generators and answer graders.

The output-format blocks are appended to eval prompts and stripped again by
scripts that generate worked solutions, so keep them byte-stable.
"""

from sokoban_core.level import Level
from sokoban_core.render import render_ascii

SOKOBAN_OUTPUT_FORMAT_INSTRUCTIONS = """Provide moves as: U (up), D (down), L (left), R (right).

Example solution: UUDLRRRDLR

Output your final answer as a list of moves in backticks EXACTLY as follows at the end of your response:

ANSWER: `<moves>`

e.g.

ANSWER: `RRULLDR`"""

SIMPLE_NAV_OUTPUT_FORMAT_INSTRUCTIONS = """## Output Format
Provide any solution path as a single string of moves.
Example format: LDRR

## Important
Adhere to concise reasoning and minimal output to avoid context window limits.

## Your Task
What sequence of moves gets the player from @ to G?

Output your final answer as a list of moves in backticks EXACTLY as follows at the end of your response:

ANSWER: `<moves>`

e.g.

ANSWER: `RRULLDR`"""

SOKOBAN_RULES = """Solve this Sokoban puzzle. Push every box ($) onto a goal (.).
Legend: # wall, @ player, + player on goal, $ box, * box on goal, . goal.
The player moves one cell at a time and can push (never pull) a single box."""


def build_sokoban_prompt(level: Level) -> str:
    return "\n\n".join([
        SOKOBAN_RULES,
        render_ascii(level),
        SOKOBAN_OUTPUT_FORMAT_INSTRUCTIONS,
    ])
