"""
Metrics Tracking Configuration Schema.

Controls where metric files are written, how often the tracker evaluates,
and how the tracked model is identified in file names and dashboard series.

Legacy keys:
    * ``metrics.output.dir``          -> output_dir
    * ``metrics.evaluation.frequency`` -> evaluation_frequency
    * ``metrics.model.name``           -> model_name
"""

# Standard Imports
from pathlib import Path
from typing import List, Optional

# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field

# Internal Imports
from ..paths import METRICS_DIR
from .types import ModelName, PositiveInt, ValidatedPath


class MetricsConfig(BaseModel):
    """
    Output location and evaluation schedule for a tracked run.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", protected_namespaces=())

    output_dir: ValidatedPath = Field(
        default=METRICS_DIR, description="Directory for CSV files, reports and charts"
    )
    evaluation_frequency: PositiveInt = Field(
        default=1, description="Evaluate every N epochs"
    )
    model_name: ModelName = Field(
        default="model", description="File and series prefix for this run"
    )
    class_names: Optional[List[str]] = Field(
        default=None, description="Human-readable class labels for reports"
    )

    def metrics_csv_path(self) -> Path:
        """Path of the per-epoch metrics CSV for this run."""
        return self.output_dir / f"{self.model_name}_metrics.csv"
