"""
Project-wide Path Constants.

Single source of truth for the logger identity and the default filesystem
layout used when no explicit output directory is configured.
"""

# Standard Imports
import os
from pathlib import Path
from typing import Final

# Global logger identity used by all modules to ensure log synchronization
LOGGER_NAME: Final[str] = "evalkit"


def get_project_root() -> Path:
    """
    Locates the project root by searching upwards for anchor files.

    The ``EVALKIT_ROOT`` environment variable overrides discovery. Falls back
    to the current working directory when no marker is found.
    """
    override = os.getenv("EVALKIT_ROOT")
    if override:
        return Path(override).expanduser().resolve()

    current_path = Path(__file__).resolve().parent
    root_markers = {".git", "pyproject.toml"}

    for parent in [current_path] + list(current_path.parents):
        if any((parent / marker).exists() for marker in root_markers):
            return parent

    return Path.cwd()


# Central Filesystem Authority
PROJECT_ROOT: Final[Path] = get_project_root().resolve()

# Output: Default root directory for metrics, reports and charts
OUTPUTS_ROOT: Final[Path] = (PROJECT_ROOT / "outputs").resolve()

# Default metrics directory (legacy key: metrics.output.dir)
METRICS_DIR: Final[Path] = (OUTPUTS_ROOT / "metrics").resolve()
