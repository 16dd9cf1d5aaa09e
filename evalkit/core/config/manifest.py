"""
Evaluation Configuration Manifest.

Aggregates the metrics, quality-gate, dashboard and telemetry sections into a
single immutable object. Two entry points are supported:

    * ``Config.from_yaml``: nested YAML sections (preferred)
    * ``Config.from_properties``: flat legacy keys such as
      ``metrics.evaluation.frequency`` or ``test.min.f1``

Unknown legacy keys are ignored so that a full training-harness properties
file can be passed as-is; unknown keys inside YAML sections are rejected.
"""

# Standard Imports
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Tuple, Union

# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field

# Internal Imports
from ..io import load_config_from_yaml, load_properties
from .dashboard_config import DashboardConfig
from .metrics_config import MetricsConfig
from .telemetry_config import TelemetryConfig
from .thresholds_config import ThresholdSet

# Legacy flat key -> (section, field)
PROPERTY_KEYS: Final[Dict[str, Tuple[str, str]]] = {
    "metrics.output.dir": ("metrics", "output_dir"),
    "metrics.evaluation.frequency": ("metrics", "evaluation_frequency"),
    "metrics.model.name": ("metrics", "model_name"),
    "test.min.accuracy": ("thresholds", "min_accuracy"),
    "test.min.precision": ("thresholds", "min_precision"),
    "test.min.recall": ("thresholds", "min_recall"),
    "test.min.f1": ("thresholds", "min_f1"),
    "dashboard.enabled": ("dashboard", "enabled"),
    "dashboard.experiment.name": ("dashboard", "experiment_name"),
    "dashboard.tracking.uri": ("dashboard", "tracking_uri"),
    "logging.dir": ("telemetry", "log_dir"),
    "logging.level": ("telemetry", "log_level"),
}


class Config(BaseModel):
    """
    Main evaluation manifest.

    Consumed by ``MetricsTracker.from_config``, ``ModelEvaluator.from_config``
    and ``create_exporters``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    thresholds: ThresholdSet = Field(default_factory=ThresholdSet)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    def dump_serialized(self) -> Dict[str, Any]:
        """JSON-compatible dict, suitable for YAML export or run parameters."""
        return self.model_dump(mode="json")

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "Config":
        """
        Factory from a YAML file with nested sections.

        Example:
            metrics:
              output_dir: ./outputs/metrics
              evaluation_frequency: 2
            thresholds:
              min_f1: 0.8
        """
        raw_data = load_config_from_yaml(yaml_path)
        return cls.model_validate(raw_data)

    @classmethod
    def from_properties(cls, source: Union[Path, Mapping[str, Any]]) -> "Config":
        """
        Factory from legacy flat keys.

        Args:
            source: Path to a ``.properties`` file or an already-parsed mapping.

        Returns:
            Validated Config. Missing keys fall back to schema defaults.
        """
        flat = load_properties(source) if isinstance(source, Path) else dict(source)

        sections: Dict[str, Dict[str, Any]] = {}
        for key, value in flat.items():
            target = PROPERTY_KEYS.get(key)
            if target is None:
                continue
            section, field = target
            if isinstance(value, str):
                value = value.strip()
            sections.setdefault(section, {})[field] = value

        return cls.model_validate(sections)
