"""Tool-call wrappers around the analysis engine.

Every tool returns the envelope ``{"ok", "result" | "error", "method", "metadata"}``
and never raises, so a transport layer can serialize the outcome as is.
"""

from __future__ import annotations

import math
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional, Sequence, Tuple

from mathchart.engine import (
    CompileError,
    FunctionAnalysisOptions,
    analyze_function,
    analyze_polynomial,
    compile_expression,
    parse_inequality,
)
from mathchart.engine.expression import normalize_math_unicode
from mathchart.utils.config_loader import EngineConfig
from mathchart.utils.logger import get_logger

try:  # pragma: no cover - behavior validated via unit tests with skips
    import sympy as sp
    from sympy.parsing.sympy_parser import (
        convert_xor,
        implicit_multiplication_application,
        parse_expr,
        standard_transformations,
    )
except ImportError:  # pragma: no cover
    sp = None  # type: ignore[assignment]

logger = get_logger(__name__)

_POLYNOMIAL_TEXT_REGEX = re.compile(r"^[0-9a-zA-Z+\-*/^().\s]+$")
_IDENTIFIER_REGEX = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
_BLOCKED_PATTERNS = ["__", "import", "exec", "eval"]


def _parser_globals() -> Dict[str, Any]:
    """Names the SymPy parser's generated code may reference; no builtins."""
    return {
        "Integer": sp.Integer,
        "Float": sp.Float,
        "Rational": sp.Rational,
        "Symbol": sp.Symbol,
        "__builtins__": {},
    }


class ToolUnavailableError(RuntimeError):
    """Raised when an optional dependency required for a tool is missing."""


def _ok(result: Any, method: str, **metadata: Any) -> Dict[str, Any]:
    return {"ok": True, "result": result, "method": method, "metadata": metadata}


def _error(message: str, method: str, **metadata: Any) -> Dict[str, Any]:
    return {"ok": False, "error": message, "method": method, "metadata": metadata}


def analyze_function_expression(
    expression: str,
    x_min: float = -10.0,
    x_max: float = 10.0,
    analyze_range: bool = True,
    find_extrema: bool = True,
    find_asymptotes: bool = True,
    find_inflection: bool = True,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    options = FunctionAnalysisOptions(
        domain=(x_min, x_max),
        analyze_range=analyze_range,
        find_extrema=find_extrema,
        find_asymptotes=find_asymptotes,
        find_inflection=find_inflection,
    )
    try:
        properties = analyze_function(expression, options=options, config=config)
        return _ok(properties.to_dict(), "numeric_sampling", expression=expression, domain=[x_min, x_max])
    except Exception as exc:
        logger.exception("Function analysis failed for '%s'", expression)
        return _error(str(exc), "analyze_function_expression", expression=expression)


def solve_inequality(expression: str) -> Dict[str, Any]:
    try:
        result = parse_inequality(expression)
        return _ok(result.to_dict(), "pattern_match", expression=expression, parsed=bool(result.intervals))
    except Exception as exc:
        logger.exception("Inequality parsing failed for '%s'", expression)
        return _error(str(exc), "solve_inequality", expression=expression)


def analyze_polynomial_coefficients(coefficients: Sequence[float]) -> Dict[str, Any]:
    try:
        if not coefficients:
            raise ValueError("At least one coefficient is required.")
        analysis = analyze_polynomial(coefficients)
        return _ok(analysis.to_dict(), "root_stripping", degree=analysis.degree)
    except Exception as exc:
        return _error(str(exc), "analyze_polynomial_coefficients", coefficients=list(coefficients or []))


def polynomial_coefficients(expression: str, variable: str = "x") -> List[float]:
    """Parses polynomial text such as ``x^3 - 3x`` into highest-first coefficients.

    Raises:
        ToolUnavailableError: If SymPy is not installed.
        ValueError: If the text is not a polynomial in ``variable`` with numeric coefficients.
    """
    if sp is None:
        raise ToolUnavailableError("SymPy is required to parse polynomial text.")

    text = normalize_math_unicode((expression or "").strip())
    if not text or not _POLYNOMIAL_TEXT_REGEX.match(text):
        raise ValueError("Polynomial text contains unsupported characters.")
    lowered = text.lower()
    for pattern in _BLOCKED_PATTERNS:
        if pattern in lowered:
            raise ValueError("Polynomial text contains blocked pattern '{}'.".format(pattern))
    for name in _IDENTIFIER_REGEX.findall(text):
        if name != variable:
            raise ValueError("Polynomial text may only use the variable '{}', found '{}'.".format(variable, name))

    symbol = sp.Symbol(variable)
    transformations = standard_transformations + (implicit_multiplication_application, convert_xor)
    parsed = parse_expr(
        text,
        local_dict={variable: symbol},
        global_dict=_parser_globals(),
        transformations=transformations,
        evaluate=True,
    )
    if parsed.free_symbols - {symbol}:
        raise ValueError("Polynomial text may only use the variable '{}'.".format(variable))
    try:
        poly = sp.Poly(parsed, symbol)
    except sp.PolynomialError as exc:
        raise ValueError("Expression is not a polynomial in '{}': {}".format(variable, exc)) from exc
    return [float(c) for c in poly.all_coeffs()]


def analyze_polynomial_expression(expression: str, variable: str = "x") -> Dict[str, Any]:
    try:
        coefficients = polynomial_coefficients(expression, variable=variable)
    except ToolUnavailableError as exc:
        return _error(str(exc), "analyze_polynomial_expression")
    except Exception as exc:
        return _error(str(exc), "analyze_polynomial_expression", expression=expression)

    analysis = analyze_polynomial(coefficients)
    return _ok(analysis.to_dict(), "sympy_poly", expression=expression, coefficients=coefficients)


def sample_function(expression: str, x_min: float = -10.0, x_max: float = 10.0, points: int = 400) -> Dict[str, Any]:
    """Samples ``expression`` for plotting; undefined samples are ``None``."""
    try:
        if points < 2:
            raise ValueError("points must be at least 2")
        func = compile_expression(expression)
        xs = [x_min + (x_max - x_min) * i / float(points - 1) for i in range(points)]
        ys: List[Optional[float]] = []
        for x in xs:
            y = func(x)
            ys.append(y if math.isfinite(y) else None)
        return _ok({"x": xs, "y": ys}, "ast_interpreter", points=points)
    except CompileError as exc:
        return _error(str(exc), "sample_function", expression=expression)
    except ValueError as exc:
        return _error(str(exc), "sample_function", expression=expression)


def analyze_functions_batch(
    expressions: Sequence[str],
    domain: Tuple[float, float] = (-10.0, 10.0),
    max_workers: int = 4,
    config: Optional[EngineConfig] = None,
) -> List[Dict[str, Any]]:
    """Analyzes several expressions concurrently; results keep the input order."""
    if not expressions:
        return []
    x_min, x_max = domain
    workers = max(1, min(max_workers, len(expressions)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="function-analysis") as executor:
        futures = [
            executor.submit(analyze_function_expression, expression, x_min, x_max, config=config)
            for expression in expressions
        ]
        return [future.result() for future in futures]
