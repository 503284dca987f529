"""CLI entrypoint for the mathchart analysis engine."""

from __future__ import annotations

import argparse
import json
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from mathchart.tools import (
    analyze_function_expression,
    analyze_functions_batch,
    analyze_polynomial_coefficients,
    analyze_polynomial_expression,
    plot_function_analysis,
    plot_inequality,
    solve_inequality,
)
from mathchart.utils.config_loader import ConfigError, EngineConfig, load_engine_config
from mathchart.utils.logger import configure_logging


def build_parser() -> argparse.ArgumentParser:
    """Builds CLI argument parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(description="mathchart analysis engine")
    parser.add_argument("--mode", choices=["function", "inequality", "polynomial", "plot"], default="function")
    parser.add_argument(
        "--expression",
        type=str,
        action="append",
        default=None,
        help="Expression, inequality or polynomial text; repeat to analyze several functions",
    )
    parser.add_argument(
        "--coefficients",
        type=str,
        default=None,
        help="Comma-separated polynomial coefficients, highest degree first",
    )
    parser.add_argument("--domain", type=float, nargs=2, default=None, metavar=("X_MIN", "X_MAX"))
    parser.add_argument("--config", type=str, default=None, help="Path to engine_config.yml")
    parser.add_argument("--log-level", type=str, default=None)
    parser.add_argument("--output", type=str, default="outputs/chart.png", help="Image path in plot mode")
    return parser


def parse_coefficients(text: str) -> List[float]:
    """Parses ``"1, -5, 6"`` into floats.

    Raises:
        ValueError: If an entry is not a number.
    """
    parts = [part.strip() for part in text.split(",") if part.strip()]
    if not parts:
        raise ValueError("--coefficients must list at least one number")
    return [float(part) for part in parts]


def _domain(args: argparse.Namespace, config: EngineConfig) -> Tuple[float, float]:
    if args.domain is not None:
        return float(args.domain[0]), float(args.domain[1])
    return config.analysis.default_domain


def run(args: argparse.Namespace, config: EngineConfig) -> Union[Dict[str, Any], List[Dict[str, Any]]]:
    """Dispatches one CLI request to the matching tool.

    Raises:
        ValueError: If the arguments required by the mode are missing.
    """
    expressions: Sequence[str] = args.expression or []

    if args.mode == "polynomial":
        if args.coefficients:
            return analyze_polynomial_coefficients(parse_coefficients(args.coefficients))
        if expressions:
            return analyze_polynomial_expression(expressions[0])
        raise ValueError("--coefficients or --expression is required in polynomial mode")

    if not expressions:
        raise ValueError("--expression is required in {} mode".format(args.mode))

    if args.mode == "inequality":
        results = [solve_inequality(expression) for expression in expressions]
        return results[0] if len(results) == 1 else results

    x_min, x_max = _domain(args, config)
    if args.mode == "plot":
        if "<" in expressions[0] or ">" in expressions[0] or "≤" in expressions[0] or "≥" in expressions[0]:
            return plot_inequality(expressions[0], args.output)
        return plot_function_analysis(expressions[0], args.output, x_min=x_min, x_max=x_max, config=config)

    if len(expressions) == 1:
        return analyze_function_expression(expressions[0], x_min, x_max, config=config)
    max_workers = int(config.batch.get("max_workers", 4))
    return analyze_functions_batch(expressions, domain=(x_min, x_max), max_workers=max_workers, config=config)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Application entrypoint.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_engine_config(args.config) if args.config else EngineConfig()
    except ConfigError as exc:
        parser.error(str(exc))

    configure_logging(args.log_level or str(config.logging.get("level", "INFO")))

    try:
        payload = run(args, config)
    except ValueError as exc:
        parser.error(str(exc))

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    if isinstance(payload, dict):
        return 0 if payload.get("ok") else 1
    return 0 if all(item.get("ok") for item in payload) else 1


if __name__ == "__main__":
    raise SystemExit(main())
