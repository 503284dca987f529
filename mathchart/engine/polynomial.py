"""Elementary analysis of real polynomials given by their coefficients.

Coefficients are ordered from the highest degree down. Real zeros are found
by stripping factors: ``x = 0`` first, then rational roots from the rational
root test via synthetic division, then the closed form once the remaining
degree is at most two. Whatever is left above degree two is scanned
numerically inside its Cauchy bound.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence, Tuple

from mathchart.utils.logger import get_logger, log_event

from .intervals import format_number
from .models import EndBehavior, Point2D, PolynomialAnalysis, PolynomialZero
from .numeric import find_roots

logger = get_logger(__name__)

REMAINDER_TOLERANCE = 1e-9
ROOT_MERGE_TOLERANCE = 1e-7
MAX_RATIONAL_TERM = 10 ** 6
SCAN_SAMPLES = 4000

RootList = List[Tuple[float, int]]


def _prepare(coefficients: Sequence[float]) -> List[float]:
    prepared: List[float] = []
    for value in coefficients:
        try:
            number = float(value)
        except (TypeError, ValueError):
            number = math.nan
        if not math.isfinite(number):
            log_event(logger, logging.WARNING, "Non-finite polynomial coefficient treated as zero", value=str(value))
            number = 0.0
        prepared.append(number)

    while len(prepared) > 1 and prepared[0] == 0.0:
        prepared.pop(0)
    return prepared or [0.0]


def _scale(coefficients: Sequence[float]) -> float:
    return max([1.0] + [abs(c) for c in coefficients])


def evaluate_polynomial(coefficients: Sequence[float], x: float) -> float:
    result = 0.0
    for coefficient in coefficients:
        result = result * x + coefficient
    return result


def derivative_coefficients(coefficients: Sequence[float]) -> List[float]:
    degree = len(coefficients) - 1
    if degree < 1:
        return [0.0]
    return [coefficient * (degree - i) for i, coefficient in enumerate(coefficients[:-1])]


def synthetic_division(coefficients: Sequence[float], root: float) -> Tuple[List[float], float]:
    """Divides by ``(x - root)`` and returns ``(quotient, remainder)``."""
    if len(coefficients) < 2:
        return [0.0], float(coefficients[0]) if coefficients else 0.0
    carried = [float(coefficients[0])]
    for coefficient in coefficients[1:]:
        carried.append(coefficient + carried[-1] * root)
    return carried[:-1], carried[-1]


def solve_quadratic(a: float, b: float, c: float) -> List[float]:
    """Real roots of ``ax^2 + bx + c`` in ascending order.

    A repeated root is listed twice; a negative discriminant gives ``[]``.
    """
    if a == 0.0:
        return [] if b == 0.0 else [-c / b]

    discriminant = b * b - 4.0 * a * c
    if abs(discriminant) <= 1e-12 * max(b * b, abs(4.0 * a * c)):
        discriminant = 0.0
    if discriminant < 0:
        return []

    q = -0.5 * (b + math.copysign(math.sqrt(discriminant), b))
    if q == 0.0:
        return [0.0, 0.0]
    return sorted([q / a, c / q])


def _divisors(n: int) -> List[int]:
    found = set()
    for i in range(1, math.isqrt(n) + 1):
        if n % i == 0:
            found.add(i)
            found.add(n // i)
    return sorted(found)


def rational_root_candidates(coefficients: Sequence[float]) -> List[float]:
    """Candidates ``±p/q`` with ``p | constant`` and ``q | leading``.

    Only integer coefficients qualify; otherwise no candidates are returned.
    """
    if len(coefficients) < 2:
        return []
    if any(abs(c - round(c)) > REMAINDER_TOLERANCE for c in coefficients):
        return []

    leading, constant = abs(int(round(coefficients[0]))), abs(int(round(coefficients[-1])))
    if leading == 0 or constant == 0 or leading > MAX_RATIONAL_TERM or constant > MAX_RATIONAL_TERM:
        return []

    candidates = {sign * p / q for p in _divisors(constant) for q in _divisors(leading) for sign in (1, -1)}
    return sorted(candidates, key=lambda value: (abs(value), value))


def _strip_known_roots(coefficients: List[float]) -> Tuple[RootList, List[float]]:
    roots: RootList = []
    work = list(coefficients)
    tolerance = REMAINDER_TOLERANCE * _scale(coefficients)

    zero_multiplicity = 0
    while len(work) > 1 and abs(work[-1]) <= tolerance:
        work.pop()
        zero_multiplicity += 1
    if zero_multiplicity:
        roots.append((0.0, zero_multiplicity))

    for candidate in rational_root_candidates(work):
        multiplicity = 0
        while len(work) > 1:
            quotient, remainder = synthetic_division(work, candidate)
            if abs(remainder) > tolerance:
                break
            work = quotient
            multiplicity += 1
        if multiplicity:
            roots.append((candidate, multiplicity))

    return roots, work


def _multiplicity(coefficients: List[float], root: float) -> int:
    degree = len(coefficients) - 1
    tolerance = 1e-6 * _scale(coefficients)
    multiplicity = 1
    current = derivative_coefficients(coefficients)
    while multiplicity < degree and abs(evaluate_polynomial(current, root)) < tolerance:
        multiplicity += 1
        current = derivative_coefficients(current)
    return multiplicity


def _numeric_roots(coefficients: List[float]) -> RootList:
    leading = coefficients[0]
    bound = 1.0 + max(abs(c / leading) for c in coefficients[1:])
    step = 2.0 * bound / SCAN_SAMPLES

    def poly(x: float) -> float:
        return evaluate_polynomial(coefficients, x)

    found = find_roots(poly, -bound, bound, step, tol=1e-12, max_iter=200)
    return [(root, _multiplicity(coefficients, root)) for root in found]


def _merge(roots: RootList) -> RootList:
    merged: List[List[float]] = []
    for value, multiplicity in sorted(roots):
        if merged and abs(merged[-1][0] - value) < ROOT_MERGE_TOLERANCE:
            merged[-1][1] += multiplicity
        else:
            merged.append([value, multiplicity])
    return [(value, int(multiplicity)) for value, multiplicity in merged]


def real_roots(coefficients: Sequence[float]) -> RootList:
    """Real roots with multiplicities, ascending. The zero polynomial has none."""
    prepared = _prepare(coefficients)
    if len(prepared) < 2:
        return []

    roots, rest = _strip_known_roots(prepared)
    degree = len(rest) - 1
    if degree == 1:
        roots.append((-rest[1] / rest[0], 1))
    elif degree == 2:
        solutions = solve_quadratic(*rest)
        if len(solutions) == 2 and abs(solutions[0] - solutions[1]) < ROOT_MERGE_TOLERANCE:
            roots.append((solutions[0], 2))
        else:
            roots.extend((value, 1) for value in solutions)
    elif degree > 2:
        roots.extend(_numeric_roots(rest))

    return _merge(roots)


def end_behavior(degree: int, leading_coefficient: float) -> EndBehavior:
    right = "up" if leading_coefficient > 0 else "down"
    if degree % 2 == 0:
        return EndBehavior(left=right, right=right)
    return EndBehavior(left="down" if right == "up" else "up", right=right)


def _term(coefficient: float, power: int) -> str:
    if power == 0:
        return format_number(coefficient)
    variable = "x" if power == 1 else "x^{}".format(power)
    if coefficient == 1:
        return variable
    if coefficient == -1:
        return "-" + variable
    return format_number(coefficient) + variable


def format_polynomial(coefficients: Sequence[float]) -> str:
    degree = len(coefficients) - 1
    terms = [_term(c, degree - i) for i, c in enumerate(coefficients) if c != 0]
    if not terms:
        return "0"
    return " + ".join(terms).replace("+ -", "- ")


def _factor(root: float, multiplicity: int) -> str:
    shown = round(root, 4) + 0.0
    if shown == 0:
        base = "x"
    elif shown > 0:
        base = "(x - {})".format(format_number(shown))
    else:
        base = "(x + {})".format(format_number(-shown))
    return base if multiplicity == 1 else "{}^{}".format(base, multiplicity)


def factored_form(leading_coefficient: float, roots: RootList, degree: int) -> Optional[str]:
    """``a(x - r1)(x - r2)...`` when the real roots account for the full degree."""
    if degree < 1 or not roots or sum(m for _, m in roots) != degree:
        return None
    if leading_coefficient == 1:
        prefix = ""
    elif leading_coefficient == -1:
        prefix = "-"
    else:
        prefix = format_number(leading_coefficient)
    return prefix + "".join(_factor(root, multiplicity) for root, multiplicity in roots)


def analyze_polynomial(coefficients: Sequence[float]) -> PolynomialAnalysis:
    """Analyzes a polynomial given highest-degree-first coefficients. Does not raise."""
    prepared = _prepare(coefficients)
    degree = len(prepared) - 1
    leading = prepared[0]

    roots = real_roots(prepared)
    zeros = [
        PolynomialZero(
            x=round(value, 9) + 0.0,
            multiplicity=multiplicity,
            behavior="crosses" if multiplicity % 2 == 1 else "touches",
        )
        for value, multiplicity in roots
    ]

    critical: List[Point2D] = []
    turning: List[Point2D] = []
    if degree >= 2:
        for value, multiplicity in real_roots(derivative_coefficients(prepared)):
            point = Point2D(x=round(value, 9) + 0.0, y=round(evaluate_polynomial(prepared, value), 9) + 0.0)
            critical.append(point)
            if multiplicity % 2 == 1:
                turning.append(point)

    analysis = PolynomialAnalysis(
        degree=degree,
        leading_coefficient=leading,
        coefficients=prepared,
        zeros=zeros,
        y_intercept=prepared[-1],
        critical_points=critical,
        turning_points=turning,
        end_behavior=end_behavior(degree, leading),
        expanded_form=format_polynomial(prepared),
        factored_form=factored_form(leading, roots, degree),
    )
    logger.debug("Analyzed polynomial %s", analysis.expanded_form)
    return analysis

