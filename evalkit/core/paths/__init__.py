"""
Filesystem Constants Package.

Exposes the logger identity and default output locations shared by every
evalkit module.
"""

from .constants import LOGGER_NAME, METRICS_DIR, OUTPUTS_ROOT, PROJECT_ROOT, get_project_root

__all__ = [
    "LOGGER_NAME",
    "METRICS_DIR",
    "OUTPUTS_ROOT",
    "PROJECT_ROOT",
    "get_project_root",
]
