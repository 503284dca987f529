"""Numerical math-analysis engine: functions, inequalities and polynomials."""

from .expression import (
    CompileError,
    EmptyExpressionError,
    ExpressionSyntaxError,
    InvalidTokenError,
    compile_expression,
    parse_expression,
)
from .function_analyzer import FunctionAnalysisOptions, analyze_function
from .inequality import parse_inequality
from .intervals import format_interval, format_intervals, intersect, parse_interval_notation, union
from .models import (
    FunctionProperties,
    InequalityResult,
    Interval,
    Point2D,
    PolynomialAnalysis,
)
from .polynomial import analyze_polynomial, solve_quadratic, synthetic_division

__all__ = [
    "CompileError",
    "EmptyExpressionError",
    "ExpressionSyntaxError",
    "InvalidTokenError",
    "compile_expression",
    "parse_expression",
    "FunctionAnalysisOptions",
    "analyze_function",
    "parse_inequality",
    "format_interval",
    "format_intervals",
    "intersect",
    "union",
    "parse_interval_notation",
    "FunctionProperties",
    "InequalityResult",
    "Interval",
    "Point2D",
    "PolynomialAnalysis",
    "analyze_polynomial",
    "solve_quadratic",
    "synthetic_division",
]
