"""
Core Utilities Package

Exposes the ambient stack shared by evaluation and tracking: logger identity
and configuration, the configuration manifest, YAML/properties I/O and the
exception types.
"""

# Configuration
from .config import Config, DashboardConfig, MetricsConfig, TelemetryConfig, ThresholdSet

# Errors
from .exceptions import ExportFailure, InvalidInputError

# Input/Output Utilities
from .io import load_config_from_yaml, load_properties, save_config_as_yaml

# Logging
from .logger import Logger, LogStyle

# Constants & Paths
from .paths import LOGGER_NAME, METRICS_DIR, OUTPUTS_ROOT, PROJECT_ROOT

__all__ = [
    # Configuration
    "Config",
    "MetricsConfig",
    "ThresholdSet",
    "DashboardConfig",
    "TelemetryConfig",
    # Errors
    "InvalidInputError",
    "ExportFailure",
    # I/O
    "save_config_as_yaml",
    "load_config_from_yaml",
    "load_properties",
    # Logging
    "Logger",
    "LogStyle",
    # Paths
    "LOGGER_NAME",
    "METRICS_DIR",
    "OUTPUTS_ROOT",
    "PROJECT_ROOT",
]
