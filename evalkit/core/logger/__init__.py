"""
Logging Package.

Provides the Logger configuration utility and the LogStyle constants used to
format tracker summaries and text reports.
"""

from .logger import Logger
from .styles import LogStyle

__all__ = [
    "Logger",
    "LogStyle",
]
