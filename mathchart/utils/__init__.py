"""Utility helpers for mathchart."""

from .config_loader import AnalysisSettings, ConfigError, EngineConfig, SecuritySettings, load_engine_config
from .logger import configure_logging, get_logger, log_event

__all__ = [
    "AnalysisSettings",
    "ConfigError",
    "EngineConfig",
    "SecuritySettings",
    "load_engine_config",
    "configure_logging",
    "get_logger",
    "log_event",
]
