"""Translate Japanese numeric idioms into arithmetic hint strings.

The translation is a chain of textual substitutions, not an expression parser.
The output may keep residual Japanese text and is not guaranteed to be a valid
arithmetic expression; it exists so a human reviewer can see the intended
calculation at a glance.

    >>> translate_formula("家賃の3割")
    '家賃の3 * 0.1'
    >>> translate_formula("基本額の１０倍")
    '基本額の* 10'

Known limitation: ``分`` is always read as hundredths, so time expressions such
as "30分" (30 minutes) are mistranslated.
"""

import re
from typing import Callable

from requirements_parser.text import strip_thousands_separators, to_half_width

DIGITS = "[0-9０-９]+"

# Applied in order; each step rewrites the output of the previous one.
SUBSTITUTIONS: list[tuple[re.Pattern[str], Callable[[re.Match[str]], str]]] = [
    (re.compile(f"({DIGITS})割"), lambda m: f"{to_half_width(m.group(1))} * 0.1"),
    (re.compile(f"({DIGITS})分"), lambda m: f"{to_half_width(m.group(1))} * 0.01"),
    (re.compile(f"({DIGITS})[%％]"), lambda m: f"{to_half_width(m.group(1))} * 0.01"),
    (re.compile(f"({DIGITS})倍"), lambda m: f"* {to_half_width(m.group(1))}"),
    (
        re.compile("([0-9０-９,，]+)円"),
        lambda m: to_half_width(strip_thousands_separators(m.group(1))),
    ),
]

VARIABLE_PATTERN = re.compile("([^、。\n]+(?:料|額|費|金|率))")


def translate_formula(description: str) -> str:
    """Return a best-effort arithmetic hint for ``description``."""
    formula = description
    for pattern, replacement in SUBSTITUTIONS:
        formula = pattern.sub(replacement, formula)
    return formula


def extract_variables(description: str) -> list[str]:
    """Collect candidate variable names ending in 料/額/費/金/率.

    Duplicates are dropped by exact match; first-seen order is kept.
    """
    variables: list[str] = []
    for match in VARIABLE_PATTERN.finditer(description):
        name = match.group(1)
        if name not in variables:
            variables.append(name)
    return variables
