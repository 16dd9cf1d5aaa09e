"""Unified logging style constants for report banners and summaries."""


class LogStyle:
    """Visual hierarchy shared by log output and text reports."""

    # Level 1: Report headers
    HEAVY = "=" * 60

    # Level 2: Section underlines
    DOUBLE = "=" * 30

    # Level 3: Separators
    LIGHT = "-" * 60

    # Symbols
    ARROW = "»"
    BULLET = "•"
    WARNING = "⚠"
    SUCCESS = "✓"

    INDENT = "  "
