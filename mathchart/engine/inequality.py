"""Inequality text to interval unions.

Three shapes are recognized, tried in order: absolute value, compound
(``and``/``or``) and simple. Each shape has its own matcher that returns
``None`` when the text does not have that shape, so unparseable input falls
through to an empty result instead of raising.
"""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from mathchart.utils.logger import get_logger

from .intervals import EMPTY_SET, format_intervals, intersect, normalize, union
from .models import CLOSED, OPEN, InequalityResult, Interval

logger = get_logger(__name__)

_OP = r"(<=|>=|<|>)"
_NUM = r"(-?\s*\d+(?:\.\d+)?)"

_DOUBLE_REGEX = re.compile(r"^{num}\s*{op}\s*x\s*{op}\s*{num}$".format(num=_NUM, op=_OP))
_VARIABLE_FIRST_REGEX = re.compile(r"^x\s*{op}\s*{num}$".format(num=_NUM, op=_OP))
_VALUE_FIRST_REGEX = re.compile(r"^{num}\s*{op}\s*x$".format(num=_NUM, op=_OP))
_ABSOLUTE_REGEX = re.compile(
    r"^\|\s*x\s*(?:([+-])\s*(\d+(?:\.\d+)?))?\s*\|\s*{op}\s*{num}$".format(num=_NUM, op=_OP)
)

_OR_SPLIT = re.compile(r"\s+or\s+|\s*∪\s*", re.IGNORECASE)
_AND_SPLIT = re.compile(r"\s+and\s+|\s*∩\s*", re.IGNORECASE)

_FLIPPED = {"<": ">", ">": "<", "<=": ">=", ">=": "<="}

_TEXT_REPLACEMENTS = {
    "≤": "<=",
    "≥": ">=",
    "−": "-",
    "–": "-",
}


def _normalize_text(expression: str) -> str:
    text = (expression or "").strip()
    for source, target in _TEXT_REPLACEMENTS.items():
        text = text.replace(source, target)
    return text


def _number(text: str) -> float:
    return float(text.replace(" ", ""))


def _bound_type(op: str) -> str:
    return CLOSED if op.endswith("=") else OPEN


def _half_line(op: str, value: float) -> Interval:
    """Solution set of ``x OP value``."""
    if op.startswith(">"):
        return Interval(start=value, end=None, start_type=_bound_type(op), end_type=OPEN)
    return Interval(start=None, end=value, start_type=OPEN, end_type=_bound_type(op))


def match_single_sided(text: str) -> Optional[Interval]:
    match = _VARIABLE_FIRST_REGEX.match(text)
    if match:
        return _half_line(match.group(1), _number(match.group(2)))
    match = _VALUE_FIRST_REGEX.match(text)
    if match:
        return _half_line(_FLIPPED[match.group(2)], _number(match.group(1)))
    return None


def match_double_sided(text: str) -> Optional[Tuple[Interval, Interval]]:
    """Matches ``lo OP x OP hi`` and returns its two half-line constraints."""
    match = _DOUBLE_REGEX.match(text)
    if match is None:
        return None
    left_value, left_op, right_op, right_value = match.groups()
    return (
        _half_line(_FLIPPED[left_op], _number(left_value)),
        _half_line(right_op, _number(right_value)),
    )


def match_absolute(text: str) -> Optional[Tuple[float, str, float]]:
    """Matches ``|x ± offset| OP value`` and returns ``(center, op, value)``."""
    match = _ABSOLUTE_REGEX.match(text)
    if match is None:
        return None
    sign, magnitude, op, value = match.groups()
    offset = 0.0
    if magnitude is not None:
        offset = float(magnitude) if sign == "+" else -float(magnitude)
    return -offset, op, _number(value)


def solve_absolute(center: float, op: str, value: float) -> List[Interval]:
    if value < 0:
        return [] if op.startswith("<") else [Interval()]

    bound_type = _bound_type(op)
    if op.startswith("<"):
        piece = normalize(
            Interval(start=center - value, end=center + value, start_type=bound_type, end_type=bound_type)
        )
        return [piece] if piece is not None else []

    return [
        Interval(start=None, end=center - value, start_type=OPEN, end_type=bound_type),
        Interval(start=center + value, end=None, start_type=bound_type, end_type=OPEN),
    ]


def _solve_simple(text: str) -> Optional[List[Interval]]:
    """Returns the solution set, ``[]`` for an empty one, ``None`` if unparseable."""
    double = match_double_sided(text)
    if double is not None:
        return intersect(list(double))
    single = match_single_sided(text)
    if single is not None:
        return [single]
    return None


def _solve_conjunction(parts: List[str]) -> Optional[List[Interval]]:
    pieces: List[Interval] = []
    parsed_any = False
    for part in parts:
        solved = _solve_simple(part.strip())
        if solved is None:
            logger.debug("Skipping unparseable inequality branch '%s'", part)
            continue
        parsed_any = True
        if not solved:
            return []
        pieces.extend(solved)
    if not parsed_any:
        return None
    return intersect(pieces)


def _set_notation(expression: str) -> str:
    return "{{x | {}}}".format(expression)


def _parse_absolute(expression: str, text: str) -> InequalityResult:
    matched = match_absolute(text)
    if matched is None:
        logger.debug("Unparseable absolute-value inequality '%s'", expression)
        return InequalityResult(
            kind="absolute",
            operator="and",
            intervals=[],
            set_notation=_set_notation(expression),
            interval_notation=EMPTY_SET,
        )

    center, op, value = matched
    intervals = solve_absolute(center, op, value)
    return InequalityResult(
        kind="absolute",
        operator="and" if op.startswith("<") else "or",
        intervals=intervals,
        set_notation=_set_notation(expression),
        interval_notation=format_intervals(intervals),
    )


def _parse_compound(expression: str, text: str, operator: str) -> InequalityResult:
    if operator == "or":
        pieces: List[Interval] = []
        for branch in _OR_SPLIT.split(text):
            branch = branch.strip()
            if _AND_SPLIT.search(branch):
                solved = _solve_conjunction(_AND_SPLIT.split(branch))
            else:
                solved = _solve_simple(branch)
            if solved is None:
                logger.debug("Skipping unparseable inequality branch '%s'", branch)
                continue
            pieces.extend(solved)
        intervals = union(pieces)
    else:
        intervals = _solve_conjunction(_AND_SPLIT.split(text)) or []

    return InequalityResult(
        kind="compound",
        operator=operator,
        intervals=intervals,
        set_notation=_set_notation(expression),
        interval_notation=format_intervals(intervals),
    )


def _parse_simple(expression: str, text: str) -> InequalityResult:
    intervals = _solve_simple(text)
    if intervals is None:
        logger.debug("Unparseable inequality '%s'", expression)
        intervals = []
    return InequalityResult(
        kind="simple",
        operator="and",
        intervals=intervals,
        set_notation=_set_notation(expression),
        interval_notation=format_intervals(intervals),
    )


def parse_inequality(expression: str) -> InequalityResult:
    """Parses inequality text into its interval solution set. Never raises."""
    expression = expression or ""
    text = _normalize_text(expression)

    if "|" in text:
        return _parse_absolute(expression, text)
    if _OR_SPLIT.search(text):
        return _parse_compound(expression, text, "or")
    if _AND_SPLIT.search(text):
        return _parse_compound(expression, text, "and")
    return _parse_simple(expression, text)
