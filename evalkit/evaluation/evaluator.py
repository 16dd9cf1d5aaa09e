"""
Evaluation Engine Module

One-shot evaluation of a trained model: aggregates a full pass of
predictions into a single confusion matrix, scores it, and produces the
run artifacts (text report, optimal-threshold CSV).

The evaluator never runs the model itself; callers hand it an iterable of
``PredictionBatch`` objects (or ``(predicted, labels)`` pairs).
"""

# Standard Imports
import logging
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

# Internal Imports
from evalkit.core import LOGGER_NAME, Config, InvalidInputError, Logger, LogStyle

from .batch import BatchLike, iter_batches
from .metrics import build_confusion_matrix, from_confusion_matrix
from .reporting import EvaluationReport, create_evaluation_report
from .snapshot import ConfusionMatrix, EvaluationSnapshot
from .thresholds import OptimalThreshold, RocCurve, find_optimal_thresholds, write_thresholds_csv

logger = logging.getLogger(LOGGER_NAME)


class ModelEvaluator:
    """
    Scores full evaluation passes and writes their reports.

    Args:
        output_dir: Directory receiving reports and threshold files.
        model_name: Default model identifier used in file names.
        class_names: Optional human-readable class labels.
    """

    def __init__(
        self,
        output_dir: Path,
        model_name: str,
        class_names: Optional[Sequence[str]] = None,
    ):
        self.output_dir = Path(output_dir)
        self.model_name = model_name
        self.class_names: Optional[List[str]] = list(class_names) if class_names else None

    @classmethod
    def from_config(cls, cfg: Config) -> "ModelEvaluator":
        """
        Builds an evaluator from the ``metrics`` section of the manifest.

        The ``telemetry`` section configures the shared logger.
        """
        Logger.setup(log_dir=cfg.telemetry.log_dir, level=cfg.telemetry.log_level)
        return cls(
            output_dir=cfg.metrics.output_dir,
            model_name=cfg.metrics.model_name,
            class_names=cfg.metrics.class_names,
        )

    def evaluate(self, predictions_source: Iterable[BatchLike]) -> EvaluationSnapshot:
        """
        Scores a full pass over ``predictions_source``.

        All batches are reduced into one confusion matrix before scoring, so
        the result does not depend on how the pass was batched. The elapsed
        wall time is stamped as ``training_time_ms``.

        Raises:
            InvalidInputError: If the source yields no samples, or a batch is
                malformed.
        """
        start = time.monotonic()
        matrix: Optional[ConfusionMatrix] = None
        losses: List[float] = []
        n_batches = 0

        for batch in iter_batches(predictions_source):
            if not batch.predicted and not batch.labels:
                continue
            num_classes = self._num_classes_hint()
            if num_classes is not None:
                num_classes = max(num_classes, max(max(batch.predicted), max(batch.labels)) + 1)
            batch_cm = build_confusion_matrix(batch.predicted, batch.labels, num_classes=num_classes)
            matrix = batch_cm if matrix is None else matrix.merge(batch_cm)
            if batch.loss is not None:
                losses.append(batch.loss)
            n_batches += 1

        if matrix is None:
            raise InvalidInputError("Cannot evaluate an empty prediction source")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        loss = sum(losses) / len(losses) if losses else None
        snapshot = from_confusion_matrix(matrix, epoch=0, training_time_ms=elapsed_ms, loss=loss)

        logger.info(
            f"Evaluated {self.model_name}: {matrix.total} samples in {n_batches} batches "
            f"({elapsed_ms} ms)"
        )
        logger.info(f"{LogStyle.INDENT}{LogStyle.ARROW} {snapshot.summary()}")
        return snapshot

    def generate_report(
        self, snapshot: EvaluationSnapshot, model_name: Optional[str] = None
    ) -> EvaluationReport:
        """
        Writes ``<output_dir>/<model>_evaluation_report_<timestamp>.txt``.

        Returns:
            The saved report; ``report.path`` points at the file.
        """
        return create_evaluation_report(
            snapshot,
            model_name=model_name or self.model_name,
            output_dir=self.output_dir,
            class_names=self.class_names,
        )

    def find_optimal_thresholds(
        self, roc_curves: Mapping[int, RocCurve]
    ) -> Dict[int, OptimalThreshold]:
        """Youden-optimal decision threshold per class."""
        return find_optimal_thresholds(roc_curves)

    def export_optimal_thresholds(
        self, thresholds: Mapping[int, OptimalThreshold], model_name: Optional[str] = None
    ) -> Path:
        """
        Writes ``<output_dir>/<model>_optimal_thresholds_<timestamp>.csv``.

        Returns:
            Path of the written CSV.
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        name = model_name or self.model_name
        path = self.output_dir / f"{name}_optimal_thresholds_{timestamp}.csv"
        return write_thresholds_csv(thresholds, path)

    def evaluate_and_report(self, predictions_source: Iterable[BatchLike]) -> EvaluationReport:
        """Evaluates a full pass and writes its report."""
        snapshot = self.evaluate(predictions_source)
        return self.generate_report(snapshot)

    def _num_classes_hint(self) -> Optional[int]:
        return len(self.class_names) if self.class_names else None
