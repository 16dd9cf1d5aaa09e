"""
Metrics Computation Module

Pure functions turning a confusion matrix, or a raw batch of predicted and
true labels, into an ``EvaluationSnapshot``. Isolates the statistical logic
from the tracker and evaluator loops; nothing here performs I/O.

Conventions:
    * accuracy = trace / total (0.0 for a matrix with no samples)
    * per-class precision, recall and F1 are 0.0 when their denominator is 0
    * global precision, recall and F1 are macro-averages over all classes
"""

# Standard Imports
import logging
from typing import Dict, Optional, Sequence, Union

# Third-Party Imports
import numpy as np

# Internal Imports
from evalkit.core import LOGGER_NAME

from .snapshot import ClassMetrics, ConfusionMatrix, EvaluationSnapshot, macro_average

logger = logging.getLogger(LOGGER_NAME)

MatrixLike = Union[ConfusionMatrix, Sequence[Sequence[int]], np.ndarray]


def from_confusion_matrix(
    matrix: MatrixLike,
    epoch: int = 0,
    training_time_ms: int = 0,
    loss: Optional[float] = None,
) -> EvaluationSnapshot:
    """
    Scores a confusion matrix.

    Args:
        matrix: ConfusionMatrix or square array-like of non-negative counts.
        epoch: Epoch stamped on the snapshot.
        training_time_ms: Elapsed time stamped on the snapshot.
        loss: Optional loss forwarded to dashboard exporters.

    Returns:
        EvaluationSnapshot with global and per-class metrics.

    Raises:
        InvalidInputError: If the matrix is malformed.
    """
    cm = matrix if isinstance(matrix, ConfusionMatrix) else ConfusionMatrix.from_array(matrix)
    counts = cm.to_numpy()

    true_positives = np.diag(counts)
    predicted_totals = counts.sum(axis=0)
    actual_totals = counts.sum(axis=1)

    precision = _safe_divide(true_positives, predicted_totals)
    recall = _safe_divide(true_positives, actual_totals)
    f1 = _safe_divide(2.0 * precision * recall, precision + recall)

    total = int(counts.sum())
    accuracy = float(true_positives.sum() / total) if total > 0 else 0.0

    classes = tuple(
        ClassMetrics(
            class_index=i,
            precision=float(precision[i]),
            recall=float(recall[i]),
            f1=float(f1[i]),
            true_positives=int(true_positives[i]),
            false_positives=int(predicted_totals[i] - true_positives[i]),
            false_negatives=int(actual_totals[i] - true_positives[i]),
        )
        for i in range(cm.num_classes)
    )

    snapshot = EvaluationSnapshot(
        epoch=epoch,
        accuracy=accuracy,
        precision=macro_average(precision),
        recall=macro_average(recall),
        f1=macro_average(f1),
        training_time_ms=training_time_ms,
        classes=classes,
        confusion_matrix=cm,
        loss=loss,
    )
    logger.debug(f"Scored {total} samples over {cm.num_classes} classes → {snapshot.summary()}")
    return snapshot


def from_predictions(
    predicted: Sequence[int],
    true: Sequence[int],
    epoch: int = 0,
    training_time_ms: int = 0,
    num_classes: Optional[int] = None,
    loss: Optional[float] = None,
) -> EvaluationSnapshot:
    """
    Scores a batch of predicted class indices against the true indices.

    The batch is first reduced to a confusion matrix of size
    ``1 + max(label)`` (or ``num_classes`` when given).

    Raises:
        InvalidInputError: If the sequences are empty or differ in length.
    """
    cm = build_confusion_matrix(predicted, true, num_classes=num_classes)
    return from_confusion_matrix(cm, epoch=epoch, training_time_ms=training_time_ms, loss=loss)


def build_confusion_matrix(
    predicted: Sequence[int],
    true: Sequence[int],
    num_classes: Optional[int] = None,
) -> ConfusionMatrix:
    """
    Reduces label sequences into a ConfusionMatrix.

    Thin alias of ``ConfusionMatrix.from_labels``, which owns label
    validation and the scikit-learn reduction.

    Raises:
        InvalidInputError: On empty input, length mismatch, fractional,
            negative or out-of-range labels.
    """
    return ConfusionMatrix.from_labels(predicted, true, num_classes=num_classes)


def compute_classification_metrics(labels: Sequence[int], preds: Sequence[int]) -> Dict[str, float]:
    """
    Computes accuracy and macro-averaged precision, recall and F1.

    Args:
        labels: Ground truth class indices.
        preds: Predicted class indices.

    Returns:
        dict: 'accuracy', 'precision', 'recall' and 'f1' as Python floats.
    """
    snapshot = from_predictions(preds, labels)
    return {
        "accuracy": snapshot.accuracy,
        "precision": snapshot.precision,
        "recall": snapshot.recall,
        "f1": snapshot.f1,
    }


def _safe_divide(numerator: np.ndarray, denominator: np.ndarray) -> np.ndarray:
    """Element-wise division yielding 0.0 wherever the denominator is 0."""
    numerator = np.asarray(numerator, dtype=np.float64)
    denominator = np.asarray(denominator, dtype=np.float64)
    out = np.zeros_like(numerator, dtype=np.float64)
    np.divide(numerator, denominator, out=out, where=denominator > 0)
    return np.clip(out, 0.0, 1.0)
