"""Numeric property analysis of single-variable functions over a window.

Every property is estimated by sampling a compiled expression on a fixed
grid, so results are heuristic: thresholds and step sizes come from
``AnalysisSettings`` and the same inputs always produce the same record.
The domain, periodicity and part of the symmetry analysis only inspect the
expression text and make no claim of correctness.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar

from mathchart.utils.config_loader import AnalysisSettings, EngineConfig
from mathchart.utils.logger import get_logger, log_event

from .expression import CompileError, CompiledExpression, compile_expression, zero_function
from .intervals import format_number
from .models import (
    Asymptote,
    ConcavitySegment,
    ContinuitySegment,
    Extremum,
    FunctionProperties,
    Intercepts,
    MonotonicitySegment,
    Periodicity,
    Point2D,
    Symmetry,
)
from .numeric import (
    RealFunction,
    bisection,
    derivative,
    find_roots,
    safe_eval,
    sample_grid,
    scan_sign_changes,
    second_derivative,
)

logger = get_logger(__name__)

T = TypeVar("T")

ALL_REALS_DOMAIN = "ℝ (all real numbers)"
UNDETERMINED_RANGE = "undetermined"

_PURE_TRIG_REGEX = re.compile(r"^(?:Math\.)?(sin|cos)\(\s*(?:\d+(?:\.\d+)?\s*\*\s*)?x\s*\)$")


@dataclass(frozen=True)
class FunctionAnalysisOptions:
    domain: Optional[Tuple[float, float]] = None
    analyze_range: bool = True
    find_extrema: bool = True
    find_asymptotes: bool = True
    find_inflection: bool = True


def _fixed(value: float) -> str:
    text = "{:.2f}".format(value)
    return "0.00" if text == "-0.00" else text


def _clean(value: float, digits: int = 6) -> float:
    return round(value, digits) + 0.0


def _segment(start: float, end: float) -> str:
    return "[{}, {}]".format(_fixed(start), _fixed(end))


def _interior(points: Sequence[float], lo: float, hi: float, step: float) -> List[float]:
    """Grid points strictly inside ``(lo, hi)``."""
    margin = step * 1e-6
    return [x for x in points if lo + margin < x < hi - margin]


def _safely(field_name: str, default: T, compute: Callable[..., T], *args: Any) -> T:
    try:
        return compute(*args)
    except Exception as exc:
        log_event(logger, logging.WARNING, "Property analysis degraded to default", field=field_name, error=str(exc))
        return default


def _compile_or_zero(expression: str, max_length: int) -> CompiledExpression:
    try:
        return compile_expression(expression, max_length=max_length)
    except CompileError as exc:
        log_event(
            logger,
            logging.WARNING,
            "Expression could not be compiled; analyzing the zero function instead",
            expression=expression,
            error=str(exc),
        )
        return zero_function(expression)


def _resolve_domain(
    domain: Optional[Tuple[float, float]],
    options: FunctionAnalysisOptions,
    settings: AnalysisSettings,
) -> Tuple[float, float]:
    candidate = domain if domain is not None else options.domain
    if candidate is None:
        candidate = settings.default_domain
    try:
        lo, hi = float(candidate[0]), float(candidate[1])
    except (TypeError, ValueError, IndexError):
        log_event(logger, logging.WARNING, "Invalid analysis domain; using default", domain=str(candidate))
        lo, hi = settings.default_domain
    if not (math.isfinite(lo) and math.isfinite(hi)):
        log_event(logger, logging.WARNING, "Non-finite analysis domain; using default", domain=str(candidate))
        lo, hi = settings.default_domain
    return (lo, hi) if lo <= hi else (hi, lo)


# ---------------------------------------------------------------------------
# Individual properties
# ---------------------------------------------------------------------------


def describe_domain(expression: str) -> str:
    """Substring heuristic; not a domain solver."""
    if "sqrt" in expression or "√" in expression:
        return "Requires the radicand to be ≥ 0"
    if "/" in expression or "÷" in expression:
        return "Denominator must be nonzero"
    if "log" in expression or "ln" in expression:
        return "Logarithm argument must be > 0"
    return ALL_REALS_DOMAIN


def estimate_range(func: RealFunction, lo: float, hi: float, samples: int = 1000) -> str:
    samples = max(samples, 1)
    step = (hi - lo) / samples
    finite = [y for y in (safe_eval(func, lo + i * step) for i in range(samples + 1)) if math.isfinite(y)]
    if not finite:
        return UNDETERMINED_RANGE
    return "[{}, {}]".format(_fixed(min(finite)), _fixed(max(finite)))


def find_intercepts(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> Intercepts:
    candidates: List[float] = []

    at_zero = safe_eval(func, 0.0)
    if lo <= 0.0 <= hi and math.isfinite(at_zero) and abs(at_zero) < settings.zero_at_origin_tolerance:
        candidates.append(0.0)

    candidates.extend(
        find_roots(
            func,
            lo,
            hi,
            settings.intercept_step,
            tol=settings.root_tolerance,
            max_iter=settings.max_iterations,
        )
    )

    x_intercepts = sorted({_clean(x) for x in candidates})
    return Intercepts(x=x_intercepts, y=at_zero if math.isfinite(at_zero) else 0.0)


def find_extrema(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[Extremum]:
    """Derivative-near-zero scan classified by the sign of the second derivative.

    Only interior samples of the window are candidates, so a minimum or
    maximum attained at ``lo`` or ``hi`` is not reported. Adjacent grid
    samples of the same kind describe one extremum; the sample with the
    flattest slope is kept.
    """
    step = settings.extrema_step
    threshold = settings.extremum_curvature_threshold
    extrema: List[Extremum] = []
    last_index: Optional[int] = None
    last_kind: Optional[str] = None
    last_slope = math.inf

    for index, x in enumerate(_interior(sample_grid(lo, hi, step), lo, hi, step)):
        slope = derivative(func, x)
        if not math.isfinite(slope) or abs(slope) >= settings.critical_derivative_threshold:
            continue
        y = safe_eval(func, x)
        curvature = second_derivative(func, x)
        if not (math.isfinite(y) and math.isfinite(curvature)):
            continue

        if curvature > threshold:
            kind = "minimum"
        elif curvature < -threshold:
            kind = "maximum"
        else:
            continue

        point = Extremum(x=_clean(x), y=_clean(y), kind=kind, is_local=True)
        if extrema and last_index == index - 1 and last_kind == kind:
            if abs(slope) < last_slope:
                extrema[-1] = point
                last_slope = abs(slope)
            last_index = index
            continue

        extrema.append(point)
        last_index, last_kind, last_slope = index, kind, abs(slope)

    return extrema


def _vertical_asymptotes(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[Asymptote]:
    step = settings.asymptote_step
    limit = settings.vertical_asymptote_threshold
    candidates: List[float] = []

    for x in sample_grid(lo, hi, step):
        y = safe_eval(func, x)
        if math.isinf(y) or (math.isfinite(y) and abs(y) > limit):
            candidates.append(x)

    for a, b in scan_sign_changes(func, lo, hi, step):
        if a == b:
            continue
        point = bisection(func, a, b, tol=1e-9, max_iter=settings.max_iterations)
        if point is None:
            continue
        y = safe_eval(func, point)
        if math.isinf(y) or abs(y) > limit:
            candidates.append(point)

    asymptotes: List[Asymptote] = []
    accepted: List[float] = []
    for x in sorted(candidates):
        if any(abs(x - existing) < step / 2.0 for existing in accepted):
            continue
        accepted.append(x)
        asymptotes.append(Asymptote(kind="vertical", equation="x = {}".format(_fixed(x)), value=_clean(x)))
    return asymptotes


def _far_field_line(func: RealFunction, probe: float) -> Optional[Tuple[float, float]]:
    far, near = safe_eval(func, probe), safe_eval(func, probe / 2.0)
    if not (math.isfinite(far) and math.isfinite(near)):
        return None
    slope = (far - near) / (probe / 2.0)
    return slope, far - slope * probe


def _oblique_asymptote(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> Optional[Asymptote]:
    probe = settings.horizontal_asymptote_probe
    right = _far_field_line(func, probe)
    left = _far_field_line(func, -probe)
    if right is None or left is None:
        return None

    (slope, intercept), (left_slope, left_intercept) = right, left
    if abs(slope) < 1e-3:
        return None
    if abs(slope - left_slope) > 1e-3 * max(1.0, abs(slope)) or abs(intercept - left_intercept) > 0.1:
        return None

    for x in (probe / 4.0, -probe / 4.0):
        residual = safe_eval(func, x) - (slope * x + intercept)
        if not math.isfinite(residual) or abs(residual) > 0.1:
            return None

    gaps = [abs(safe_eval(func, x) - (slope * x + intercept)) for x in sample_grid(lo, hi, settings.monotonicity_step)]
    if all(math.isfinite(gap) and gap < 1e-6 for gap in gaps):
        return None  # the curve is the line itself

    sign = "-" if intercept < 0 else "+"
    equation = "y = {}x {} {}".format(_fixed(slope), sign, _fixed(abs(intercept)))
    return Asymptote(kind="oblique", equation=equation, value=_clean(slope))


def find_asymptotes(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[Asymptote]:
    """Vertical asymptotes inside the window plus one far-field asymptote.

    ``nan`` samples mark gaps in the domain (``sqrt``/``log``) and are not
    reported as asymptotes.
    """
    asymptotes = _vertical_asymptotes(func, lo, hi, settings)

    probe = settings.horizontal_asymptote_probe
    left, right = safe_eval(func, -probe), safe_eval(func, probe)
    if math.isfinite(left) and math.isfinite(right) and abs(left - right) < settings.horizontal_asymptote_tolerance:
        asymptotes.append(Asymptote(kind="horizontal", equation="y = {}".format(_fixed(right)), value=right))
        return asymptotes

    oblique = _oblique_asymptote(func, lo, hi, settings)
    if oblique is not None:
        asymptotes.append(oblique)
    return asymptotes


def analyze_monotonicity(
    func: RealFunction, lo: float, hi: float, settings: AnalysisSettings
) -> List[MonotonicitySegment]:
    threshold = settings.monotonicity_threshold
    segments: List[MonotonicitySegment] = []
    current: Optional[str] = None
    segment_start = lo

    for x in sample_grid(lo, hi, settings.monotonicity_step):
        slope = derivative(func, x)
        if not math.isfinite(slope):
            continue
        if slope > threshold:
            direction = "increasing"
        elif slope < -threshold:
            direction = "decreasing"
        else:
            direction = "constant"

        if current is None:
            current = direction
        elif direction != current:
            segments.append(MonotonicitySegment(interval=_segment(segment_start, x), direction=current))
            current, segment_start = direction, x

    if current is not None:
        segments.append(MonotonicitySegment(interval=_segment(segment_start, hi), direction=current))
    return segments


def _curvature(func: RealFunction, x: float, settings: AnalysisSettings) -> Optional[float]:
    """Second derivative, or ``None`` when it is non-finite or inside rounding noise."""
    value = second_derivative(func, x)
    y = safe_eval(func, x)
    if not (math.isfinite(value) and math.isfinite(y)):
        return None
    if abs(value) <= settings.curvature_noise_floor * max(1.0, abs(y)):
        return None
    return value


def analyze_concavity(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[ConcavitySegment]:
    segments: List[ConcavitySegment] = []
    current: Optional[str] = None
    segment_start = lo

    for x in sample_grid(lo, hi, settings.concavity_step):
        curvature = _curvature(func, x, settings)
        if curvature is None:
            continue
        kind = "concave_up" if curvature > 0 else "concave_down"

        if current is None:
            current = kind
        elif kind != current:
            segments.append(ConcavitySegment(interval=_segment(segment_start, x), kind=current))
            current, segment_start = kind, x

    if current is not None:
        segments.append(ConcavitySegment(interval=_segment(segment_start, hi), kind=current))
    return segments


def _spans_pole(func: RealFunction, a: float, b: float, at: float) -> bool:
    """True when ``|f|`` inside ``[a, b]`` exceeds its value at both ends."""
    bound = max(abs(safe_eval(func, a)), abs(safe_eval(func, b)))
    for t in ((a + b) / 2.0, at):
        y = safe_eval(func, t)
        if not math.isfinite(y) or abs(y) > bound:
            return True
    return False


def find_inflection_points(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[Point2D]:
    """Curvature sign changes between grid samples, refined by bisection.

    A sample where ``f`` is undefined or beyond the asymptote threshold breaks
    the bracket, and a sign change across a pole is not an inflection.
    """
    points: List[Point2D] = []
    prev_x: Optional[float] = None
    prev_curvature: Optional[float] = None

    def curvature_at(t: float) -> float:
        return second_derivative(func, t)

    for x in sample_grid(lo, hi, settings.inflection_step):
        fx = safe_eval(func, x)
        if not math.isfinite(fx) or abs(fx) > settings.vertical_asymptote_threshold:
            prev_x, prev_curvature = None, None
            continue
        curvature = _curvature(func, x, settings)
        if curvature is None:
            continue
        if prev_curvature is not None and prev_x is not None and prev_curvature * curvature < 0:
            refined = bisection(curvature_at, prev_x, x, tol=settings.root_tolerance, max_iter=settings.max_iterations)
            at = refined if refined is not None else x
            y = safe_eval(func, at)
            if (
                math.isfinite(y)
                and abs(y) <= settings.vertical_asymptote_threshold
                and not _spans_pole(func, prev_x, x, at)
            ):
                points.append(Point2D(x=_clean(at), y=_clean(y)))
        prev_x, prev_curvature = x, curvature

    return points


def analyze_symmetry(func: RealFunction, expression: str, settings: AnalysisSettings) -> Symmetry:
    pure = _PURE_TRIG_REGEX.match(expression.strip())
    if pure:
        return Symmetry(kind="odd", axis="origin") if pure.group(1) == "sin" else Symmetry(kind="even", axis="y-axis")

    tolerance = settings.symmetry_tolerance
    is_even = is_odd = True
    compared = 0
    for magnitude in settings.symmetry_points:
        for x in (-magnitude, magnitude):
            fx, f_neg = safe_eval(func, x), safe_eval(func, -x)
            if not (math.isfinite(fx) and math.isfinite(f_neg)):
                continue
            compared += 1
            if abs(fx - f_neg) > tolerance:
                is_even = False
            if abs(fx + f_neg) > tolerance:
                is_odd = False

    if compared and is_even:
        return Symmetry(kind="even", axis="y-axis")
    if compared and is_odd:
        return Symmetry(kind="odd", axis="origin")
    return Symmetry(kind="none", axis="none")


def analyze_periodicity(expression: str) -> Periodicity:
    """Substring heuristic: trigonometric calls imply their base period."""
    if "sin" in expression or "cos" in expression:
        return Periodicity(is_periodic=True, period=2 * math.pi)
    if "tan" in expression:
        return Periodicity(is_periodic=True, period=math.pi)
    return Periodicity(is_periodic=False, period=None)


def _jump(func: RealFunction, x: float, value: float, width: float) -> Optional[float]:
    sides = [safe_eval(func, x - width), safe_eval(func, x + width)]
    if any(math.isinf(side) for side in sides):
        return math.inf
    finite = [abs(side - value) for side in sides if math.isfinite(side)]
    return max(finite) if finite else None


def analyze_continuity(func: RealFunction, lo: float, hi: float, settings: AnalysisSettings) -> List[ContinuitySegment]:
    """One-sided limit probes on a grid.

    A jump counts only when it exceeds the tolerance and does not shrink
    when the probe narrows, which separates steep slopes from true breaks.
    """
    discontinuities: List[Point2D] = []
    for x in sample_grid(lo, hi, settings.continuity_step):
        value = safe_eval(func, x)
        if math.isnan(value):
            continue
        if math.isinf(value) or abs(value) > settings.vertical_asymptote_threshold:
            discontinuities.append(Point2D(x=_clean(x), y=0.0))
            continue

        wide = _jump(func, x, value, 1e-6)
        if wide is None or wide <= settings.continuity_jump_tolerance * max(1.0, abs(value)):
            continue
        narrow = _jump(func, x, value, 1e-7)
        if narrow is not None and narrow > 0.5 * wide:
            discontinuities.append(Point2D(x=_clean(x), y=_clean(value)))

    interval = "[{}, {}]".format(format_number(lo), format_number(hi))
    return [
        ContinuitySegment(
            interval=interval,
            is_continuous=not discontinuities,
            discontinuities=discontinuities,
        )
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def analyze_function(
    expression: str,
    domain: Optional[Tuple[float, float]] = None,
    options: Optional[FunctionAnalysisOptions] = None,
    config: Optional[EngineConfig] = None,
) -> FunctionProperties:
    """Analyzes ``expression`` over a bounded window.

    Args:
        expression: Single-variable expression in ``x``.
        domain: Analysis window; falls back to ``options.domain`` and then
            the configured default.
        options: Toggles for the optional analyses.
        config: Engine configuration; defaults apply when omitted.

    Returns:
        A fresh ``FunctionProperties`` record. Failures degrade individual
        fields to empty defaults; this function does not raise.
    """
    options = options or FunctionAnalysisOptions()
    config = config or EngineConfig()
    settings = config.analysis
    expression = expression or ""

    lo, hi = _resolve_domain(domain, options, settings)
    func = _compile_or_zero(expression, config.security.max_expression_length)

    properties = FunctionProperties(
        domain=_safely("domain", ALL_REALS_DOMAIN, describe_domain, expression),
        range=(
            _safely("range", UNDETERMINED_RANGE, estimate_range, func, lo, hi, settings.range_samples)
            if options.analyze_range
            else None
        ),
        intercepts=_safely("intercepts", Intercepts(), find_intercepts, func, lo, hi, settings),
        extrema=_safely("extrema", [], find_extrema, func, lo, hi, settings) if options.find_extrema else [],
        asymptotes=(
            _safely("asymptotes", [], find_asymptotes, func, lo, hi, settings) if options.find_asymptotes else []
        ),
        monotonicity=_safely("monotonicity", [], analyze_monotonicity, func, lo, hi, settings),
        concavity=_safely("concavity", [], analyze_concavity, func, lo, hi, settings),
        inflection_points=(
            _safely("inflection_points", [], find_inflection_points, func, lo, hi, settings)
            if options.find_inflection
            else []
        ),
        symmetry=_safely("symmetry", None, analyze_symmetry, func, expression, settings),
        periodicity=_safely("periodicity", None, analyze_periodicity, expression),
        continuity=_safely("continuity", [], analyze_continuity, func, lo, hi, settings),
    )
    logger.debug("Analyzed '%s' over [%s, %s]", expression, lo, hi)
    return properties
