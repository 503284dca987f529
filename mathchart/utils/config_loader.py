"""Configuration loader for the YAML engine settings."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Tuple


try:
    import yaml
except ImportError:  # pragma: no cover - dependency is declared in pyproject
    yaml = None  # type: ignore[assignment]


@dataclass(frozen=True)
class AnalysisSettings:
    default_domain: Tuple[float, float] = (-10.0, 10.0)
    range_samples: int = 1000
    intercept_step: float = 0.01
    zero_at_origin_tolerance: float = 1e-10
    extrema_step: float = 0.1
    critical_derivative_threshold: float = 0.01
    extremum_curvature_threshold: float = 0.1
    asymptote_step: float = 0.1
    vertical_asymptote_threshold: float = 1e6
    horizontal_asymptote_probe: float = 1000.0
    horizontal_asymptote_tolerance: float = 1e-3
    monotonicity_step: float = 0.5
    monotonicity_threshold: float = 0.01
    concavity_step: float = 0.5
    curvature_noise_floor: float = 1e-5
    inflection_step: float = 0.1
    symmetry_points: Tuple[float, ...] = (0.5, 1.0, 2.0)
    symmetry_tolerance: float = 1e-6
    continuity_step: float = 0.1
    continuity_jump_tolerance: float = 1e-3
    root_tolerance: float = 1e-6
    max_iterations: int = 100


@dataclass(frozen=True)
class SecuritySettings:
    max_expression_length: int = 400


@dataclass(frozen=True)
class EngineConfig:
    version: str = "1.0.0"
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    security: SecuritySettings = field(default_factory=SecuritySettings)
    logging: Dict[str, Any] = field(default_factory=dict)
    batch: Dict[str, Any] = field(default_factory=dict)


class ConfigError(RuntimeError):
    """Raised when configuration files cannot be loaded or validated."""


def _load_yaml(path: Path) -> Dict[str, Any]:
    if yaml is None:
        raise ConfigError("PyYAML is required. Install dependencies from pyproject.toml.")
    if not path.exists():
        raise ConfigError("Configuration file not found: {}".format(path))
    with path.open("r", encoding="utf-8") as handle:
        loaded = yaml.safe_load(handle) or {}
    if not isinstance(loaded, dict):
        raise ConfigError("Configuration root must be a mapping in {}".format(path))
    return loaded


def _coerce(name: str, default: Any, value: Any) -> Any:
    if isinstance(default, tuple):
        if not isinstance(value, (list, tuple)):
            raise ConfigError("'{}' must be a list".format(name))
        return tuple(float(item) for item in value)
    if isinstance(default, bool):
        return bool(value)
    if isinstance(default, int):
        return int(value)
    if isinstance(default, float):
        return float(value)
    return value


def _build_analysis(data: Dict[str, Any]) -> AnalysisSettings:
    defaults = AnalysisSettings()
    known = {item.name for item in fields(AnalysisSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError("Unknown analysis settings: {}".format(", ".join(unknown)))

    values: Dict[str, Any] = {}
    for name, value in data.items():
        try:
            values[name] = _coerce(name, getattr(defaults, name), value)
        except (TypeError, ValueError) as exc:
            raise ConfigError("Invalid value for '{}': {}".format(name, exc)) from exc

    domain = values.get("default_domain", defaults.default_domain)
    if len(domain) != 2 or domain[0] >= domain[1]:
        raise ConfigError("'default_domain' must be [low, high] with low < high")
    return AnalysisSettings(**values)


def load_engine_config(path: str = "configs/engine_config.yml") -> EngineConfig:
    data = _load_yaml(Path(path))
    security_data = data.get("security", {}) or {}

    return EngineConfig(
        version=str(data.get("version", "1.0.0")),
        analysis=_build_analysis(dict(data.get("analysis", {}) or {})),
        security=SecuritySettings(
            max_expression_length=int(security_data.get("max_expression_length", 400)),
        ),
        logging=dict(data.get("logging", {}) or {}),
        batch=dict(data.get("batch", {}) or {}),
    )
