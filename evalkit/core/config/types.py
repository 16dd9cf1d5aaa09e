"""
Semantic Type Definitions & Validation Primitives.

Annotated pydantic types shared by the configuration schemas. Constraints are
enforced when a schema is instantiated, so invalid gates or frequencies never
reach the tracker.
"""

# Standard Imports
from pathlib import Path
from typing import Annotated, Literal

# Third-Party Imports
from pydantic import AfterValidator, Field, PlainSerializer


def _sanitize_path(v: Path) -> Path:
    """Resolve path to absolute form without disk side-effects."""
    return v.expanduser().resolve()


# Generic primitives
PositiveInt = Annotated[int, Field(gt=0)]
Probability = Annotated[float, Field(ge=0.0, le=1.0)]

# Filesystem
ValidatedPath = Annotated[
    Path,
    AfterValidator(_sanitize_path),
    PlainSerializer(lambda v: str(v), when_used="json", return_type=str),
]

# Identity
ModelName = Annotated[str, Field(pattern=r"^[A-Za-z0-9_.-]+$", min_length=1, max_length=100)]

# Telemetry
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
