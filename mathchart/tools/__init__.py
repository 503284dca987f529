"""Tool interfaces returning JSON-friendly envelopes."""

from .analysis import (
    ToolUnavailableError,
    analyze_function_expression,
    analyze_functions_batch,
    analyze_polynomial_coefficients,
    analyze_polynomial_expression,
    polynomial_coefficients,
    sample_function,
    solve_inequality,
)
from .plotter import plot_function_analysis, plot_inequality

__all__ = [
    "ToolUnavailableError",
    "analyze_function_expression",
    "analyze_functions_batch",
    "analyze_polynomial_coefficients",
    "analyze_polynomial_expression",
    "polynomial_coefficients",
    "sample_function",
    "solve_inequality",
    "plot_function_analysis",
    "plot_inequality",
]
