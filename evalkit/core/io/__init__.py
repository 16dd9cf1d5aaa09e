"""
Input/Output & Persistence Utilities.

Configuration serialization (YAML) and legacy properties-file loading.
"""

from .serialization import load_config_from_yaml, load_properties, save_config_as_yaml

__all__ = [
    "save_config_as_yaml",
    "load_config_from_yaml",
    "load_properties",
]
