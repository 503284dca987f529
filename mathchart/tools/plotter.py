"""Annotated chart rendering for analyzed functions and inequality solutions."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from mathchart.engine import analyze_function, compile_expression, parse_inequality
from mathchart.engine.models import FunctionProperties, Interval
from mathchart.utils.config_loader import EngineConfig

try:  # pragma: no cover
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
except ImportError:  # pragma: no cover
    plt = None  # type: ignore[assignment]


def _unavailable(method: str) -> Dict[str, Any]:
    return {
        "ok": False,
        "error": "matplotlib is required for plotting.",
        "method": method,
        "metadata": {},
    }


def _curve(expression: str, x_min: float, x_max: float, points: int) -> Tuple[List[float], List[float]]:
    func = compile_expression(expression)
    xs = [x_min + (x_max - x_min) * i / float(points - 1) for i in range(points)]
    ys = []
    for x in xs:
        y = func(x)
        ys.append(y if math.isfinite(y) and abs(y) < 1e6 else math.nan)
    return xs, ys


def _annotate(ax: Any, properties: FunctionProperties) -> None:
    for extremum in properties.extrema:
        marker = "v" if extremum.kind == "maximum" else "^"
        ax.plot([extremum.x], [extremum.y], marker=marker, color="tab:red", linestyle="none")
        ax.annotate("({:.2f}, {:.2f})".format(extremum.x, extremum.y), (extremum.x, extremum.y), fontsize=8)

    for x in properties.intercepts.x:
        ax.plot([x], [0.0], marker="o", color="tab:green", linestyle="none")

    for point in properties.inflection_points:
        ax.plot([point.x], [point.y], marker="s", color="tab:purple", linestyle="none")

    for asymptote in properties.asymptotes:
        if asymptote.kind == "vertical" and asymptote.value is not None:
            ax.axvline(asymptote.value, color="tab:gray", linestyle="--", linewidth=1.0)
        elif asymptote.kind == "horizontal" and asymptote.value is not None:
            ax.axhline(asymptote.value, color="tab:gray", linestyle="--", linewidth=1.0)


def plot_function_analysis(
    expression: str,
    output_path: str,
    x_min: float = -10.0,
    x_max: float = 10.0,
    points: int = 400,
    config: Optional[EngineConfig] = None,
) -> Dict[str, Any]:
    """Plots ``expression`` with its extrema, intercepts, inflection points and asymptotes."""
    if plt is None:
        return _unavailable("plot_function_analysis")

    try:
        if points < 2:
            raise ValueError("points must be at least 2")
        properties = analyze_function(expression, domain=(x_min, x_max), config=config)
        xs, ys = _curve(expression, x_min, x_max, points)

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        fig, ax = plt.subplots(figsize=(8, 4.5))
        ax.plot(xs, ys, linewidth=2.0)
        _annotate(ax, properties)
        ax.axhline(0.0, color="black", linewidth=0.6)
        ax.axvline(0.0, color="black", linewidth=0.6)
        ax.set_title("f(x) = {}".format(expression))
        ax.set_xlabel("x")
        ax.set_ylabel("f(x)")
        ax.grid(True, alpha=0.3)
        fig.tight_layout()
        fig.savefig(output, dpi=150)
        plt.close(fig)

        return {
            "ok": True,
            "result": str(output),
            "method": "matplotlib",
            "metadata": {
                "points": points,
                "extrema": len(properties.extrema),
                "asymptotes": len(properties.asymptotes),
            },
        }
    except Exception as exc:
        return {"ok": False, "error": str(exc), "method": "plot_function_analysis", "metadata": {}}


def _visible_span(intervals: List[Interval]) -> Tuple[float, float]:
    bounds = [value for interval in intervals for value in (interval.start, interval.end) if value is not None]
    if not bounds:
        return -10.0, 10.0
    lo, hi = min(bounds), max(bounds)
    margin = max(2.0, (hi - lo) * 0.25)
    return lo - margin, hi + margin


def plot_inequality(expression: str, output_path: str) -> Dict[str, Any]:
    """Draws the solution set of ``expression`` on a number line."""
    if plt is None:
        return _unavailable("plot_inequality")

    try:
        result = parse_inequality(expression)
        lo, hi = _visible_span(result.intervals)

        output = Path(output_path)
        output.parent.mkdir(parents=True, exist_ok=True)

        fig, ax = plt.subplots(figsize=(8, 1.8))
        ax.axhline(0.0, color="black", linewidth=1.0)
        for interval in result.intervals:
            start = lo if interval.start is None else interval.start
            end = hi if interval.end is None else interval.end
            ax.plot([start, end], [0.0, 0.0], color="tab:blue", linewidth=6.0, solid_capstyle="butt")
            for value, bound_type in ((interval.start, interval.start_type), (interval.end, interval.end_type)):
                if value is None:
                    continue
                face = "tab:blue" if bound_type == "closed" else "white"
                ax.plot([value], [0.0], marker="o", markersize=9, markerfacecolor=face, color="tab:blue")

        ax.set_xlim(lo, hi)
        ax.set_yticks([])
        ax.set_title("{}  ⇒  {}".format(expression, result.interval_notation))
        fig.tight_layout()
        fig.savefig(output, dpi=150)
        plt.close(fig)

        return {
            "ok": True,
            "result": str(output),
            "method": "matplotlib",
            "metadata": {"intervals": len(result.intervals), "interval_notation": result.interval_notation},
        }
    except Exception as exc:
        return {"ok": False, "error": str(exc), "method": "plot_inequality", "metadata": {}}
