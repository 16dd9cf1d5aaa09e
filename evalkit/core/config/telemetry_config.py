"""Logging destination and verbosity."""

# Standard Imports
from typing import Optional

# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field

# Internal Imports
from .types import LogLevel, ValidatedPath


class TelemetryConfig(BaseModel):
    """Where and how verbosely evalkit logs."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    log_dir: Optional[ValidatedPath] = Field(
        default=None, description="Rotating log file directory (None = console only)"
    )
    log_level: LogLevel = Field(default="INFO")
