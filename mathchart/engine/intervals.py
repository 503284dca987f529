"""Interval formatting and set operations over unions of intervals."""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import CLOSED, OPEN, Interval

REALS = "ℝ"
EMPTY_SET = "∅"
UNION_JOINER = " ∪ "

_NUMBER = r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?"
_INTERVAL_REGEX = re.compile(
    r"^(?P<left>[\[(])\s*(?P<start>-∞|{num})\s*,\s*(?P<end>\+?∞|{num})\s*(?P<right>[\])])$".format(num=_NUMBER)
)


def format_number(value: float) -> str:
    """Prints integral floats without a trailing ``.0``."""
    if math.isfinite(value) and float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_interval(interval: Interval) -> str:
    start, end = interval.start, interval.end

    if start is None and end is None:
        return REALS

    if start is None:
        bracket = "]" if interval.end_type == CLOSED else ")"
        return "(-∞, {}{}".format(format_number(end), bracket)  # type: ignore[arg-type]

    if end is None:
        bracket = "[" if interval.start_type == CLOSED else "("
        return "{}{}, +∞)".format(bracket, format_number(start))

    left = "[" if interval.start_type == CLOSED else "("
    right = "]" if interval.end_type == CLOSED else ")"
    return "{}{}, {}{}".format(left, format_number(start), format_number(end), right)


def format_intervals(intervals: Sequence[Interval], joiner: str = UNION_JOINER) -> str:
    if not intervals:
        return EMPTY_SET
    return joiner.join(format_interval(interval) for interval in intervals)


def normalize(interval: Interval) -> Optional[Interval]:
    """Returns ``None`` for a conceptually empty interval."""
    return None if interval.is_empty else interval


def _lower(interval: Interval) -> Tuple[float, str]:
    if interval.start is None:
        return -math.inf, OPEN
    return interval.start, interval.start_type


def _upper(interval: Interval) -> Tuple[float, str]:
    if interval.end is None:
        return math.inf, OPEN
    return interval.end, interval.end_type


def _intersect_pair(first: Interval, second: Interval) -> Optional[Interval]:
    (lo_a, lo_type_a), (lo_b, lo_type_b) = _lower(first), _lower(second)
    (hi_a, hi_type_a), (hi_b, hi_type_b) = _upper(first), _upper(second)

    if lo_a > lo_b:
        start, start_type = lo_a, lo_type_a
    elif lo_b > lo_a:
        start, start_type = lo_b, lo_type_b
    else:
        start, start_type = lo_a, OPEN if OPEN in (lo_type_a, lo_type_b) else CLOSED

    if hi_a < hi_b:
        end, end_type = hi_a, hi_type_a
    elif hi_b < hi_a:
        end, end_type = hi_b, hi_type_b
    else:
        end, end_type = hi_a, OPEN if OPEN in (hi_type_a, hi_type_b) else CLOSED

    if start > end:
        return None

    result = Interval(
        start=None if start == -math.inf else start,
        end=None if end == math.inf else end,
        start_type=start_type,
        end_type=end_type,
    )
    return normalize(result)


def intersect(intervals: Sequence[Interval]) -> List[Interval]:
    """Folds the list pairwise into a single intersection.

    Absent bounds count as infinite. The bound type of the result is taken
    from whichever operand supplied the tighter bound; on equal bounds open
    wins. An empty intermediate result makes the whole intersection empty.
    """
    if not intervals:
        return []

    result: Optional[Interval] = normalize(intervals[0])
    if result is None:
        return []
    for current in intervals[1:]:
        result = _intersect_pair(result, current)
        if result is None:
            return []
    return [result]


def union(intervals: Iterable[Interval]) -> List[Interval]:
    """Reports the pieces as given; overlapping branches are not coalesced."""
    return list(intervals)


def _parse_bound(text: str) -> Optional[float]:
    if "∞" in text:
        return None
    return float(text)


def parse_interval_notation(text: str) -> List[Interval]:
    """Parses the output of ``format_intervals`` back into intervals.

    Raises:
        ValueError: If a piece is not valid interval notation.
    """
    stripped = (text or "").strip()
    if not stripped or stripped == EMPTY_SET:
        return []

    intervals: List[Interval] = []
    for piece in stripped.split("∪"):
        piece = piece.strip()
        if piece == REALS:
            intervals.append(Interval())
            continue
        match = _INTERVAL_REGEX.match(piece)
        if match is None:
            raise ValueError("Not interval notation: '{}'".format(piece))
        start = _parse_bound(match.group("start"))
        end = _parse_bound(match.group("end"))
        intervals.append(
            Interval(
                start=start,
                end=end,
                start_type=CLOSED if match.group("left") == "[" and start is not None else OPEN,
                end_type=CLOSED if match.group("right") == "]" and end is not None else OPEN,
            )
        )
    return intervals
