"""
Configuration Package Initialization.

Flat public API for the configuration schemas, resolved on first attribute
access (PEP 562).

Example:
    >>> from evalkit.core.config import Config
    >>> cfg = Config.from_properties({"metrics.evaluation.frequency": "2"})
    >>> cfg.metrics.evaluation_frequency
    2
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "Config",
    "MetricsConfig",
    "ThresholdSet",
    "DashboardConfig",
    "TelemetryConfig",
    "ValidatedPath",
    "PROPERTY_KEYS",
]

_LAZY_IMPORTS: dict[str, str] = {
    "Config": "evalkit.core.config.manifest",
    "PROPERTY_KEYS": "evalkit.core.config.manifest",
    "MetricsConfig": "evalkit.core.config.metrics_config",
    "ThresholdSet": "evalkit.core.config.thresholds_config",
    "DashboardConfig": "evalkit.core.config.dashboard_config",
    "TelemetryConfig": "evalkit.core.config.telemetry_config",
    "ValidatedPath": "evalkit.core.config.types",
}


def __getattr__(name: str) -> Any:
    """Import a configuration component on first access and cache it."""
    if name not in _LAZY_IMPORTS:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

    module = import_module(_LAZY_IMPORTS[name])
    attr = getattr(module, name)

    globals()[name] = attr
    return attr


def __dir__() -> list[str]:
    """Support for dir() and IDE auto-completion."""
    return sorted(__all__)
