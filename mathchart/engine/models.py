"""Immutable result records returned by the analysis engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

BoundType = str  # "open" | "closed"

OPEN = "open"
CLOSED = "closed"


class _Record:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class Point2D(_Record):
    x: float
    y: float


@dataclass(frozen=True)
class Interval(_Record):
    """Contiguous subset of the real line; a ``None`` bound is unbounded."""

    start: Optional[float] = None
    end: Optional[float] = None
    start_type: BoundType = OPEN
    end_type: BoundType = OPEN

    def __post_init__(self) -> None:
        for bound_type in (self.start_type, self.end_type):
            if bound_type not in (OPEN, CLOSED):
                raise ValueError("Unknown bound type '{}'".format(bound_type))
        if self.start is not None and self.end is not None and self.start > self.end:
            raise ValueError("Interval start {} exceeds end {}".format(self.start, self.end))

    @property
    def is_empty(self) -> bool:
        if self.start is None or self.end is None:
            return False
        return self.start == self.end and (self.start_type == OPEN or self.end_type == OPEN)

    @property
    def is_unbounded(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, value: float) -> bool:
        if self.start is not None:
            if value < self.start or (value == self.start and self.start_type == OPEN):
                return False
        if self.end is not None:
            if value > self.end or (value == self.end and self.end_type == OPEN):
                return False
        return True


@dataclass(frozen=True)
class Intercepts(_Record):
    x: List[float] = field(default_factory=list)
    y: float = 0.0


@dataclass(frozen=True)
class Extremum(_Record):
    x: float
    y: float
    kind: str  # "maximum" | "minimum"
    is_local: bool = True


@dataclass(frozen=True)
class Asymptote(_Record):
    kind: str  # "vertical" | "horizontal" | "oblique"
    equation: str
    value: Optional[float] = None


@dataclass(frozen=True)
class MonotonicitySegment(_Record):
    interval: str
    direction: str  # "increasing" | "decreasing" | "constant"


@dataclass(frozen=True)
class ConcavitySegment(_Record):
    interval: str
    kind: str  # "concave_up" | "concave_down"


@dataclass(frozen=True)
class Symmetry(_Record):
    kind: str  # "even" | "odd" | "none"
    axis: str


@dataclass(frozen=True)
class Periodicity(_Record):
    is_periodic: bool
    period: Optional[float] = None


@dataclass(frozen=True)
class ContinuitySegment(_Record):
    interval: str
    is_continuous: bool
    discontinuities: List[Point2D] = field(default_factory=list)


@dataclass(frozen=True)
class FunctionProperties(_Record):
    domain: str
    range: Optional[str]
    intercepts: Intercepts
    extrema: List[Extremum] = field(default_factory=list)
    asymptotes: List[Asymptote] = field(default_factory=list)
    monotonicity: List[MonotonicitySegment] = field(default_factory=list)
    concavity: List[ConcavitySegment] = field(default_factory=list)
    inflection_points: List[Point2D] = field(default_factory=list)
    symmetry: Optional[Symmetry] = None
    periodicity: Optional[Periodicity] = None
    continuity: List[ContinuitySegment] = field(default_factory=list)


@dataclass(frozen=True)
class InequalityResult(_Record):
    kind: str  # "simple" | "compound" | "absolute"
    operator: str  # "and" | "or"
    intervals: List[Interval]
    set_notation: str
    interval_notation: str


@dataclass(frozen=True)
class PolynomialZero(_Record):
    x: float
    multiplicity: int
    behavior: str  # "crosses" | "touches"


@dataclass(frozen=True)
class EndBehavior(_Record):
    left: str  # "up" | "down"
    right: str


@dataclass(frozen=True)
class PolynomialAnalysis(_Record):
    degree: int
    leading_coefficient: float
    coefficients: List[float]
    zeros: List[PolynomialZero]
    y_intercept: float
    critical_points: List[Point2D]
    turning_points: List[Point2D]
    end_behavior: EndBehavior
    expanded_form: str
    factored_form: Optional[str] = None
