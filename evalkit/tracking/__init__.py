"""
Metrics Tracking Module.

Epoch-scheduled evaluation during training and the sinks recorded snapshots
are exported to. The CSV exporter is always available; the MLflow dashboard
exporter is opt-in via the ``dashboard`` configuration section.
"""

from .exporters import (
    CLASS_METRICS_CSV_HEADER,
    METRICS_CSV_HEADER,
    CsvExporter,
    ExporterProtocol,
    MLflowDashboardExporter,
    create_exporters,
    dashboard_metrics,
    read_metrics_csv,
    write_metrics_csv,
)
from .tracker import MetricsTracker, TrainingListener

__all__ = [
    "MetricsTracker",
    "TrainingListener",
    "ExporterProtocol",
    "CsvExporter",
    "MLflowDashboardExporter",
    "create_exporters",
    "dashboard_metrics",
    "write_metrics_csv",
    "read_metrics_csv",
    "METRICS_CSV_HEADER",
    "CLASS_METRICS_CSV_HEADER",
]
