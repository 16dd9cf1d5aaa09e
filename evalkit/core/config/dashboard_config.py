"""
Dashboard Exporter Configuration Schema.

Opt-in settings for pushing per-epoch scalars to an MLflow tracking server.
The rest of the subsystem runs unchanged when this section is disabled.
"""

# Standard Imports
from typing import Optional

# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field


class DashboardConfig(BaseModel):
    """MLflow experiment coordinates."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=False, description="Push metrics to MLflow")
    experiment_name: str = Field(default="evalkit", min_length=1)
    tracking_uri: Optional[str] = Field(
        default=None, description="MLflow tracking URI (None = MLflow default)"
    )
