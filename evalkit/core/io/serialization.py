"""
Configuration Serialization & Persistence Utilities.

Loads and stores configuration manifests. YAML is the primary format; flat
``key=value`` properties files are accepted for configurations written for
the legacy training harness (``metrics.output.dir`` style keys).
"""

# Standard Imports
import logging
import os
from pathlib import Path
from typing import Any, Dict

# Third-Party Imports
import yaml

# Internal Imports
from ..paths import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


def save_config_as_yaml(data: Any, yaml_path: Path) -> Path:
    """
    Saves a configuration object as a YAML file.

    Args:
        data: Pydantic model (anything exposing ``model_dump``) or a dict.
        yaml_path: Target filesystem path.

    Returns:
        The path the configuration was written to.
    """
    try:
        raw_dict = data.model_dump(mode="json") if hasattr(data, "model_dump") else data
        final_data = _sanitize_for_yaml(raw_dict)
        _persist_yaml(final_data, yaml_path)

        logger.info(f"Configuration saved → {yaml_path.name}")
        return yaml_path

    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to save configuration YAML: {e}")
        raise


def load_config_from_yaml(yaml_path: Path) -> Dict[str, Any]:
    """
    Loads a raw configuration dictionary from a YAML file.

    Raises:
        FileNotFoundError: If the specified path does not exist.
    """
    if not yaml_path.exists():
        raise FileNotFoundError(f"YAML configuration file not found at: {yaml_path}")

    with open(yaml_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_properties(path: Path) -> Dict[str, str]:
    """
    Reads a flat ``key=value`` properties file.

    Blank lines and lines starting with ``#`` or ``!`` are ignored; both ``=``
    and ``:`` are accepted as separators. Values are returned as raw strings,
    type coercion is left to the pydantic schema.

    Raises:
        FileNotFoundError: If the specified path does not exist.
    """
    if not path.exists():
        raise FileNotFoundError(f"Properties file not found at: {path}")

    properties: Dict[str, str] = {}
    with open(path, "r", encoding="utf-8") as f:
        for raw_line in f:
            line = raw_line.strip()
            if not line or line[0] in "#!":
                continue

            separators = [i for i in (line.find("="), line.find(":")) if i >= 0]
            if not separators:
                properties[line] = ""
                continue

            split_at = min(separators)
            properties[line[:split_at].strip()] = line[split_at + 1 :].strip()

    return properties


def _sanitize_for_yaml(obj: Any) -> Any:
    """Recursively converts Paths and tuples into YAML-standard types."""
    if isinstance(obj, dict):
        return {k: _sanitize_for_yaml(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_sanitize_for_yaml(i) for i in obj]
    if isinstance(obj, Path):
        return str(obj)
    return obj


def _persist_yaml(data: Any, path: Path) -> None:
    """Writes YAML with directory creation and an fsync before returning."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(
            data,
            f,
            default_flow_style=False,
            sort_keys=False,
            indent=4,
            allow_unicode=True,
        )
        f.flush()
        os.fsync(f.fileno())
