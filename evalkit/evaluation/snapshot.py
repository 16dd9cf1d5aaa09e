"""
Evaluation Data Model.

Immutable value types produced by the metrics calculator and consumed by the
tracker, exporters and reports:

    * ConfusionMatrix: square count matrix, rows = actual, columns = predicted
    * ClassMetrics: precision / recall / F1 of a single class
    * EvaluationSnapshot: one scored evaluation (global + per-class metrics)

All models are frozen pydantic models. "Changing" a snapshot always means
building a new one (see ``EvaluationSnapshot.with_class_metrics``).
"""

from __future__ import annotations

# Standard Imports
from types import MappingProxyType
from typing import List, Mapping, Optional, Sequence, Tuple

# Third-Party Imports
import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, model_validator
from sklearn.metrics import confusion_matrix as sk_confusion_matrix

# Internal Imports
from evalkit.core.exceptions import InvalidInputError

Score = float


class ConfusionMatrix(BaseModel):
    """
    Square non-negative integer matrix of true vs. predicted class counts.

    ``counts[i][j]`` is the number of samples of true class ``i`` predicted as
    class ``j``; the sum of all entries is the number of evaluated samples.
    """

    model_config = ConfigDict(frozen=True)

    counts: Tuple[Tuple[int, ...], ...]

    @model_validator(mode="after")
    def _check_shape(self) -> "ConfusionMatrix":
        _validate_counts(self.counts)
        return self

    @classmethod
    def from_array(cls, data) -> "ConfusionMatrix":
        """
        Builds a matrix from any 2-D array-like of counts.

        Raises:
            InvalidInputError: If the data is empty, not square, not integral
                or contains negative counts.
        """
        arr = np.asarray(data)
        if arr.ndim != 2 or arr.size == 0:
            raise InvalidInputError(f"Confusion matrix must be a non-empty 2-D array, got shape {arr.shape}")
        if arr.dtype.kind == "f":
            if not np.all(np.isfinite(arr)) or not np.all(arr == np.round(arr)):
                raise InvalidInputError("Confusion matrix counts must be integers")
        elif arr.dtype.kind not in "iub":
            raise InvalidInputError(f"Confusion matrix counts must be integers, got dtype {arr.dtype}")

        counts = tuple(tuple(int(v) for v in row) for row in arr.tolist())
        _validate_counts(counts)
        return cls(counts=counts)

    @classmethod
    def from_labels(
        cls,
        predicted: Sequence[int],
        true: Sequence[int],
        num_classes: Optional[int] = None,
    ) -> "ConfusionMatrix":
        """
        Reduces two equal-length label sequences into a confusion matrix.

        This is the single reduction path: ``build_confusion_matrix``, the
        tracker and the evaluator all end up here.
        The matrix size is ``1 + max(label)`` over both sequences unless
        ``num_classes`` is given.

        Raises:
            InvalidInputError: On empty input, length mismatch, negative or
                out-of-range labels.
        """
        preds = as_label_array(predicted, "predicted")
        labels = as_label_array(true, "true")

        if preds.size == 0 or labels.size == 0:
            raise InvalidInputError("Cannot build a confusion matrix from an empty evaluation set")
        if preds.size != labels.size:
            raise InvalidInputError(
                f"Predicted and true label sequences differ in length: {preds.size} != {labels.size}"
            )

        observed = int(max(preds.max(), labels.max())) + 1
        size = observed if num_classes is None else num_classes
        if size < observed:
            raise InvalidInputError(f"Label {observed - 1} out of range for {size} classes")

        counts = sk_confusion_matrix(labels, preds, labels=np.arange(size))
        return cls.from_array(counts)

    @property
    def num_classes(self) -> int:
        return len(self.counts)

    @property
    def total(self) -> int:
        """Number of evaluated samples."""
        return int(sum(sum(row) for row in self.counts))

    @property
    def trace(self) -> int:
        """Number of correctly classified samples."""
        return int(sum(self.counts[i][i] for i in range(self.num_classes)))

    def to_numpy(self) -> np.ndarray:
        return np.asarray(self.counts, dtype=np.int64)

    def merge(self, other: "ConfusionMatrix") -> "ConfusionMatrix":
        """
        Element-wise sum of two matrices.

        A smaller matrix is zero-padded to the larger size, which happens when
        a batch simply never saw the highest class index.
        """
        size = max(self.num_classes, other.num_classes)
        merged = np.zeros((size, size), dtype=np.int64)
        for source in (self.to_numpy(), other.to_numpy()):
            n = source.shape[0]
            merged[:n, :n] += source
        return ConfusionMatrix.from_array(merged)

    def to_dataframe(self, class_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
        """DataFrame view with actual classes as rows and predictions as columns."""
        names = _class_labels(self.num_classes, class_names)
        return pd.DataFrame(
            self.to_numpy(),
            index=pd.Index([f"actual {n}" for n in names]),
            columns=pd.Index([f"pred {n}" for n in names]),
        )

    def render(self, class_names: Optional[Sequence[str]] = None) -> str:
        """Fixed-width text rendering used by the evaluation report."""
        return self.to_dataframe(class_names).to_string()


class ClassMetrics(BaseModel):
    """
    Precision, recall and F1 for one class.

    Each score is 0.0 when its denominator is zero (no predicted positives for
    precision, no actual positives for recall, ``precision + recall == 0`` for
    F1).
    """

    model_config = ConfigDict(frozen=True)

    class_index: int = Field(ge=0)
    precision: Score = Field(ge=0.0, le=1.0)
    recall: Score = Field(ge=0.0, le=1.0)
    f1: Score = Field(ge=0.0, le=1.0)
    true_positives: int = Field(default=0, ge=0)
    false_positives: int = Field(default=0, ge=0)
    false_negatives: int = Field(default=0, ge=0)

    @property
    def support(self) -> int:
        """Number of samples whose true class is this one."""
        return self.true_positives + self.false_negatives

    def __str__(self) -> str:
        return (
            f"Class {self.class_index} - Precision: {self.precision:.4f}, "
            f"Recall: {self.recall:.4f}, F1: {self.f1:.4f}"
        )


class EvaluationSnapshot(BaseModel):
    """
    One scored evaluation: global metrics plus the per-class breakdown.

    Global precision, recall and F1 are macro-averages, i.e. the unweighted
    mean of the per-class values over every class.

    Attributes:
        epoch: Epoch the snapshot was taken at (0 for one-shot evaluations).
        accuracy: Correct predictions over all predictions.
        precision: Macro-averaged precision.
        recall: Macro-averaged recall.
        f1: Macro-averaged F1 score.
        training_time_ms: Wall time attributed to this evaluation.
        classes: Per-class metrics ordered by class index.
        confusion_matrix: Matrix the snapshot was computed from, when known.
        loss: Optional loss value reported alongside the predictions.
    """

    model_config = ConfigDict(frozen=True)

    epoch: int = Field(default=0, ge=0)
    accuracy: Score = Field(ge=0.0, le=1.0)
    precision: Score = Field(ge=0.0, le=1.0)
    recall: Score = Field(ge=0.0, le=1.0)
    f1: Score = Field(ge=0.0, le=1.0)
    training_time_ms: int = Field(default=0, ge=0)
    classes: Tuple[ClassMetrics, ...] = ()
    confusion_matrix: Optional[ConfusionMatrix] = None
    loss: Optional[float] = None

    @model_validator(mode="after")
    def _check_class_order(self) -> "EvaluationSnapshot":
        for position, metrics in enumerate(self.classes):
            if metrics.class_index != position:
                raise ValueError(
                    f"Class metrics must be ordered by index: position {position} "
                    f"holds class {metrics.class_index}"
                )
        return self

    @property
    def per_class(self) -> Mapping[int, ClassMetrics]:
        """Read-only mapping class index -> ClassMetrics, in index order."""
        return MappingProxyType({m.class_index: m for m in self.classes})

    @property
    def num_classes(self) -> int:
        return len(self.classes)

    def class_metrics(self, class_index: int) -> Optional[ClassMetrics]:
        """Metrics for one class, or None when the index is unknown."""
        if 0 <= class_index < len(self.classes):
            return self.classes[class_index]
        return None

    def metric(self, name: str) -> float:
        """Global metric by name: accuracy, precision, recall or f1."""
        if name not in GLOBAL_METRICS:
            raise KeyError(f"Unknown metric {name!r}; expected one of {GLOBAL_METRICS}")
        return getattr(self, name)

    def with_class_metrics(self, metrics: ClassMetrics) -> "EvaluationSnapshot":
        """
        Returns a new snapshot with one class replaced or appended.

        Macro-averages are recomputed; the receiver is left untouched.
        """
        classes: List[ClassMetrics] = list(self.classes)
        if metrics.class_index < len(classes):
            classes[metrics.class_index] = metrics
        elif metrics.class_index == len(classes):
            classes.append(metrics)
        else:
            raise InvalidInputError(
                f"Cannot add class {metrics.class_index} to a snapshot with {len(classes)} classes"
            )

        return EvaluationSnapshot(
            epoch=self.epoch,
            accuracy=self.accuracy,
            precision=macro_average([c.precision for c in classes]),
            recall=macro_average([c.recall for c in classes]),
            f1=macro_average([c.f1 for c in classes]),
            training_time_ms=self.training_time_ms,
            classes=tuple(classes),
            confusion_matrix=self.confusion_matrix,
            loss=self.loss,
        )

    def with_epoch(self, epoch: int, training_time_ms: Optional[int] = None) -> "EvaluationSnapshot":
        """Re-stamped copy carrying a new epoch (and optionally a new time)."""
        update = {"epoch": epoch}
        if training_time_ms is not None:
            update["training_time_ms"] = training_time_ms
        return EvaluationSnapshot.model_validate({**self.model_dump(), **update})

    def summary(self) -> str:
        """One-line summary used in tracker logs."""
        return (
            f"Epoch {self.epoch} - Accuracy: {self.accuracy:.4f}, Precision: {self.precision:.4f}, "
            f"Recall: {self.recall:.4f}, F1: {self.f1:.4f}, Time: {self.training_time_ms} ms"
        )

    def detailed_report(self) -> str:
        """Multi-line breakdown of global and per-class metrics."""
        lines = [
            f"=== Evaluation report for epoch {self.epoch} ===",
            f"Accuracy: {self.accuracy:.4f}",
            f"Macro precision: {self.precision:.4f}",
            f"Macro recall: {self.recall:.4f}",
            f"Macro F1: {self.f1:.4f}",
            f"Training time: {self.training_time_ms} ms",
            "",
            "Per-class metrics:",
        ]
        lines.extend(str(m) for m in self.classes)
        return "\n".join(lines) + "\n"


GLOBAL_METRICS: Tuple[str, ...] = ("accuracy", "precision", "recall", "f1")


def macro_average(values: Sequence[float]) -> float:
    """Unweighted mean, 0.0 for an empty sequence, clipped to [0, 1]."""
    if len(values) == 0:
        return 0.0
    return float(np.clip(np.mean(values), 0.0, 1.0))


# HELPERS
def _validate_counts(counts: Tuple[Tuple[int, ...], ...]) -> None:
    size = len(counts)
    if size == 0:
        raise InvalidInputError("Confusion matrix must have at least one class")
    for row in counts:
        if len(row) != size:
            raise InvalidInputError(f"Confusion matrix must be square, got a row of length {len(row)} for {size} classes")
        if any(v < 0 for v in row):
            raise InvalidInputError("Confusion matrix counts must be non-negative")


def as_label_array(values: Sequence[int], name: str) -> np.ndarray:
    """Flattens class indices to int64, rejecting fractional or negative values."""
    arr = np.asarray(values).ravel()
    if arr.size == 0:
        return arr.astype(np.int64)
    if arr.dtype.kind == "f":
        if not np.all(arr == np.round(arr)):
            raise InvalidInputError(f"{name} labels must be integer class indices")
    elif arr.dtype.kind not in "iub":
        raise InvalidInputError(f"{name} labels must be integer class indices, got dtype {arr.dtype}")
    arr = arr.astype(np.int64)
    if arr.min() < 0:
        raise InvalidInputError(f"{name} labels must be non-negative")
    return arr


def _class_labels(num_classes: int, class_names: Optional[Sequence[str]]) -> List[str]:
    if class_names is None:
        return [str(i) for i in range(num_classes)]
    return [class_names[i] if i < len(class_names) else str(i) for i in range(num_classes)]
