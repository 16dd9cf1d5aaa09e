"""
Snapshot Exporters.

Sinks receiving each snapshot recorded by a MetricsTracker:

    * CsvExporter: appends per-epoch and per-class rows to CSV files
    * MLflowDashboardExporter: pushes scalars to an MLflow run, step = epoch
      (optional, needs the ``dashboard`` extra)

Every exporter follows ExporterProtocol (``open``/``export``/``close``) and
reports failures as ``ExportFailure`` so the tracker can log and skip them.
"""

from __future__ import annotations

import csv
import logging
import os
from pathlib import Path
from typing import Any, Iterable, List, Optional, Protocol

import pandas as pd

from evalkit.core import LOGGER_NAME, Config, ExportFailure
from evalkit.evaluation import EvaluationSnapshot

logger = logging.getLogger(LOGGER_NAME)

try:
    import mlflow

    _MLFLOW_AVAILABLE = True
except ImportError:  # pragma: no cover
    _MLFLOW_AVAILABLE = False

METRICS_CSV_HEADER = ("Epoch", "Accuracy", "Precision", "Recall", "F1Score", "TrainingTime")
CLASS_METRICS_CSV_HEADER = ("Epoch", "Class", "Precision", "Recall", "F1Score")


class ExporterProtocol(Protocol):
    """Protocol defining the snapshot sink interface.

    Implementations are injected into the tracker explicitly; there is no
    process-wide registry.
    """

    def open(self) -> None: ...

    def export(self, snapshot: EvaluationSnapshot) -> None: ...

    def close(self) -> None: ...


class CsvExporter:
    """Append-only CSV sink.

    Writes ``<model>_metrics.csv`` (one row per snapshot) and
    ``<model>_class_metrics.csv`` (one row per class per snapshot). Headers
    are written only when a file is new or empty, so an interrupted run can
    be resumed into the same files. Each write is flushed and fsynced.

    Attributes:
        output_dir: Directory holding both CSV files.
        model_name: File name prefix.
    """

    def __init__(self, output_dir: Path, model_name: str) -> None:
        self.output_dir = Path(output_dir)
        self.model_name = model_name

    @property
    def metrics_path(self) -> Path:
        return self.output_dir / f"{self.model_name}_metrics.csv"

    @property
    def class_metrics_path(self) -> Path:
        return self.output_dir / f"{self.model_name}_class_metrics.csv"

    def open(self) -> None:
        """Create the output directory."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportFailure("csv", f"cannot create {self.output_dir}: {e}") from e

    def export(self, snapshot: EvaluationSnapshot) -> None:
        """Append one metrics row and the per-class rows of ``snapshot``."""
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            _append_rows(self.metrics_path, METRICS_CSV_HEADER, [_metrics_row(snapshot)])
            if snapshot.classes:
                _append_rows(
                    self.class_metrics_path, CLASS_METRICS_CSV_HEADER, _class_rows(snapshot)
                )
        except OSError as e:
            raise ExportFailure("csv", f"cannot write epoch {snapshot.epoch}: {e}") from e

        logger.debug(f"Epoch {snapshot.epoch} appended → {self.metrics_path.name}")

    def close(self) -> None:
        """No-op: files are closed after every write."""


class MLflowDashboardExporter:
    """MLflow sink publishing one metric series per score.

    Logged keys: ``accuracy``, ``precision``, ``recall``, ``f1``, ``loss``
    (when present) and ``class_<i>/precision|recall|f1``, all with
    ``step=epoch``.

    Attributes:
        experiment_name: MLflow experiment name.
        tracking_uri: Optional tracking URI; MLflow's default when None.
        run_name: Optional run name.
    """

    def __init__(
        self,
        experiment_name: str = "evalkit",
        tracking_uri: Optional[str] = None,
        run_name: Optional[str] = None,
    ) -> None:
        self.experiment_name = experiment_name
        self.tracking_uri = tracking_uri
        self.run_name = run_name
        self._run_id: Optional[str] = None

    def open(self) -> None:
        """Start the MLflow run."""
        if not _MLFLOW_AVAILABLE:
            raise ExportFailure("mlflow", "mlflow is not installed")

        # Temporarily suppress all INFO logs during MLflow/Alembic DB init
        prev_level = logging.root.manager.disable
        logging.disable(logging.WARNING)
        try:
            if self.tracking_uri:
                mlflow.set_tracking_uri(self.tracking_uri)
            mlflow.set_experiment(self.experiment_name)
            run = mlflow.start_run(run_name=self.run_name)
        except Exception as e:
            raise ExportFailure("mlflow", f"cannot start run: {e}") from e
        finally:
            logging.disable(prev_level)

        self._run_id = run.info.run_id if run is not None else None
        logger.debug(f"MLflow run started (experiment={self.experiment_name!r})")

    def export(self, snapshot: EvaluationSnapshot) -> None:
        """Log the snapshot's scalars at ``step=snapshot.epoch``."""
        try:
            mlflow.log_metrics(dashboard_metrics(snapshot), step=snapshot.epoch)
        except Exception as e:
            raise ExportFailure("mlflow", f"cannot log epoch {snapshot.epoch}: {e}") from e

    def close(self) -> None:
        """End the active MLflow run."""
        if _MLFLOW_AVAILABLE and mlflow.active_run():
            mlflow.end_run()
            logger.info("MLflow run ended.")
        self._run_id = None

    def __enter__(self) -> MLflowDashboardExporter:
        self.open()
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()


def dashboard_metrics(snapshot: EvaluationSnapshot) -> dict:
    """Flat ``name -> value`` mapping published to the dashboard."""
    metrics = {
        "accuracy": snapshot.accuracy,
        "precision": snapshot.precision,
        "recall": snapshot.recall,
        "f1": snapshot.f1,
    }
    if snapshot.loss is not None:
        metrics["loss"] = snapshot.loss
    for m in snapshot.classes:
        metrics[f"class_{m.class_index}/precision"] = m.precision
        metrics[f"class_{m.class_index}/recall"] = m.recall
        metrics[f"class_{m.class_index}/f1"] = m.f1
    return metrics


def create_exporters(cfg: Config, run_name: Optional[str] = None) -> List[ExporterProtocol]:
    """Factory: CSV exporter always, MLflow exporter when the dashboard is enabled.

    A dashboard enabled without mlflow installed is logged and skipped.

    Args:
        cfg: Evaluation manifest.
        run_name: Optional MLflow run name, defaults to the model name.
    """
    exporters: List[ExporterProtocol] = [
        CsvExporter(cfg.metrics.output_dir, cfg.metrics.model_name)
    ]
    if cfg.dashboard.enabled and not _MLFLOW_AVAILABLE:
        logger.warning(
            "Dashboard enabled in config but mlflow is not installed. "
            "Install with: pip install evalkit[dashboard]"
        )
    elif cfg.dashboard.enabled:
        exporters.append(
            MLflowDashboardExporter(
                experiment_name=cfg.dashboard.experiment_name,
                tracking_uri=cfg.dashboard.tracking_uri,
                run_name=run_name or cfg.metrics.model_name,
            )
        )
    return exporters


def write_metrics_csv(snapshots: Iterable[EvaluationSnapshot], path: Path) -> Path:
    """Bulk-write a history in the tracker's CSV format (file is replaced)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists():
        path.unlink()
    _append_rows(path, METRICS_CSV_HEADER, [_metrics_row(s) for s in snapshots])
    logger.info(f"Metrics history saved → {path.name}")
    return path


def read_metrics_csv(path: Path) -> List[EvaluationSnapshot]:
    """Load a metrics CSV back into snapshots, ordered by epoch.

    Per-class details are not stored in this file, so the returned snapshots
    carry global metrics only.
    """
    df = pd.read_csv(path)
    missing = set(METRICS_CSV_HEADER) - set(df.columns)
    if missing:
        raise ValueError(f"{path.name} is missing columns: {sorted(missing)}")

    df = df.sort_values("Epoch", kind="stable")
    return [
        EvaluationSnapshot(
            epoch=int(row.Epoch),
            accuracy=float(row.Accuracy),
            precision=float(row.Precision),
            recall=float(row.Recall),
            f1=float(row.F1Score),
            training_time_ms=int(row.TrainingTime),
        )
        for row in df.itertuples(index=False)
    ]


# PRIVATE HELPERS
def _metrics_row(snapshot: EvaluationSnapshot) -> list:
    return [
        snapshot.epoch,
        f"{snapshot.accuracy:.6f}",
        f"{snapshot.precision:.6f}",
        f"{snapshot.recall:.6f}",
        f"{snapshot.f1:.6f}",
        snapshot.training_time_ms,
    ]


def _class_rows(snapshot: EvaluationSnapshot) -> List[list]:
    return [
        [snapshot.epoch, m.class_index, f"{m.precision:.6f}", f"{m.recall:.6f}", f"{m.f1:.6f}"]
        for m in snapshot.classes
    ]


def _append_rows(path: Path, header: tuple, rows: List[list]) -> None:
    needs_header = not path.exists() or path.stat().st_size == 0
    with open(path, "a", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        if needs_header:
            writer.writerow(header)
        writer.writerows(rows)
        f.flush()
        os.fsync(f.fileno())
