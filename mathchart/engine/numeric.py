"""Finite-difference and root-search primitives shared by the analyzers.

Every primitive tolerates non-finite samples: a ``nan``/``inf`` value carries
no information and the scan moves on instead of aborting.
"""

from __future__ import annotations

import math
from typing import Callable, List, Optional, Tuple

RealFunction = Callable[[float], float]

ZERO_EPSILON = 1e-8
DEDUP_TOLERANCE = 1e-6


def is_finite(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value)


def safe_eval(func: RealFunction, x: float) -> float:
    """Evaluates ``func`` at ``x`` mapping arithmetic failures to ``nan``."""
    try:
        return float(func(x))
    except (ArithmeticError, ValueError, TypeError):
        return math.nan


def derivative(func: RealFunction, x: float, h: float = 1e-5) -> float:
    return (safe_eval(func, x + h) - safe_eval(func, x - h)) / (2.0 * h)


def second_derivative(func: RealFunction, x: float, h: float = 1e-4) -> float:
    return (safe_eval(func, x + h) - 2.0 * safe_eval(func, x) + safe_eval(func, x - h)) / (h * h)


def sample_grid(lo: float, hi: float, step: float, include_end: bool = True) -> List[float]:
    """Returns ``lo, lo + step, ...`` up to ``hi`` computed by index."""
    if step <= 0 or not (math.isfinite(lo) and math.isfinite(hi)) or hi < lo:
        return []
    count = int(math.floor((hi - lo) / step + 1e-9))
    points = [lo + i * step for i in range(count + 1)]
    if not include_end and points and abs(points[-1] - hi) < step * 1e-6:
        points.pop()
    return points


def bisection(
    func: RealFunction,
    a: float,
    b: float,
    tol: float = 1e-6,
    max_iter: int = 100,
) -> Optional[float]:
    """Bracketed root search.

    Returns ``None`` when ``f(a)`` or a midpoint is not finite, or when the
    bracket does not shrink below ``tol`` within ``max_iter`` iterations.
    """
    left, right = (a, b) if a <= b else (b, a)
    f_left = safe_eval(func, left)
    if not math.isfinite(f_left):
        return None

    iterations = 0
    while abs(right - left) > tol:
        if iterations >= max_iter:
            return None
        mid = (left + right) / 2.0
        f_mid = safe_eval(func, mid)
        if not math.isfinite(f_mid):
            return None
        if abs(f_mid) < tol:
            return mid
        if f_left * f_mid < 0:
            right = mid
        else:
            left = mid
            f_left = f_mid
        iterations += 1

    return (left + right) / 2.0


def scan_sign_changes(func: RealFunction, lo: float, hi: float, step: float) -> List[Tuple[float, float]]:
    """Produces brackets for later bisection.

    A sample with ``|f(x)| < 1e-8`` is reported as the degenerate bracket
    ``(x, x)`` so even-multiplicity roots, which never change sign, are kept.
    """
    brackets: List[Tuple[float, float]] = []
    prev_x: Optional[float] = None
    prev_y: Optional[float] = None

    for x in sample_grid(lo, hi, step):
        y = safe_eval(func, x)
        if not math.isfinite(y):
            prev_x, prev_y = None, None
            continue
        if abs(y) < ZERO_EPSILON:
            brackets.append((x, x))
        elif prev_y is not None and prev_x is not None and abs(prev_y) >= ZERO_EPSILON and prev_y * y < 0:
            brackets.append((prev_x, x))
        prev_x, prev_y = x, y

    return brackets


def _contains_close(values: List[float], candidate: float, tolerance: float) -> bool:
    return any(abs(existing - candidate) < tolerance for existing in values)


def find_roots(
    func: RealFunction,
    lo: float,
    hi: float,
    step: float,
    tol: float = 1e-6,
    max_iter: int = 100,
) -> List[float]:
    """Scans ``[lo, hi]`` and refines each bracket by bisection.

    Brackets that converge onto a pole (the value at the refined point is
    larger than at both bracket ends) are discarded.
    """
    roots: List[float] = []
    for a, b in scan_sign_changes(func, lo, hi, step):
        root = bisection(func, a, b, tol=tol, max_iter=max_iter)
        if root is None:
            continue
        value = safe_eval(func, root)
        if not math.isfinite(value):
            continue
        if a != b and abs(value) > max(abs(safe_eval(func, a)), abs(safe_eval(func, b))):
            continue
        if not _contains_close(roots, root, DEDUP_TOLERANCE):
            roots.append(root)
    return sorted(roots)
