"""
ROC Curves & Operating-Threshold Selection.

Builds one-vs-rest ROC curves from per-class scores and picks, for each
class, the decision threshold maximizing Youden's J statistic
(``TPR - FPR``). Among thresholds sharing the maximal J the lowest one wins,
so the choice is deterministic.
"""

# Standard Imports
import csv
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Tuple

# Third-Party Imports
import numpy as np
from pydantic import BaseModel, ConfigDict, model_validator
from sklearn.metrics import auc as sk_auc
from sklearn.metrics import roc_curve

# Internal Imports
from evalkit.core import LOGGER_NAME, InvalidInputError

logger = logging.getLogger(LOGGER_NAME)

# Fallback operating point when a curve carries no usable sample
DEFAULT_THRESHOLD: float = 0.5

THRESHOLD_CSV_HEADER: Tuple[str, ...] = ("ClassIndex", "OptimalThreshold", "AUC")


class RocCurve(BaseModel):
    """
    ROC samples for one class.

    ``fpr[k]`` and ``tpr[k]`` are the rates obtained when predicting the class
    for every score ``>= thresholds[k]``.
    """

    model_config = ConfigDict(frozen=True)

    fpr: Tuple[float, ...]
    tpr: Tuple[float, ...]
    thresholds: Tuple[float, ...]
    auc: float = 0.0

    @model_validator(mode="after")
    def _check_lengths(self) -> "RocCurve":
        if not (len(self.fpr) == len(self.tpr) == len(self.thresholds)):
            raise ValueError(
                f"ROC arrays differ in length: fpr={len(self.fpr)}, "
                f"tpr={len(self.tpr)}, thresholds={len(self.thresholds)}"
            )
        return self

    @classmethod
    def from_scores(cls, binary_labels: Any, scores: Any) -> "RocCurve":
        """
        Computes the curve and its AUC with scikit-learn.

        A class that is absent (or is the only one present) in
        ``binary_labels`` has no defined curve; an empty curve with AUC 0.0
        is returned and a warning is logged.
        """
        y_true = np.asarray(binary_labels).ravel().astype(bool)
        y_score = np.asarray(scores, dtype=np.float64).ravel()

        if y_true.size != y_score.size:
            raise InvalidInputError(f"Labels and scores differ in length: {y_true.size} != {y_score.size}")
        if y_true.size == 0:
            raise InvalidInputError("Cannot build a ROC curve from an empty evaluation set")

        if y_true.all() or not y_true.any():
            logger.warning("ROC curve undefined: only one class present in labels. Defaulting AUC to 0.0")
            return cls(fpr=(), tpr=(), thresholds=(), auc=0.0)

        fpr, tpr, thresholds = roc_curve(y_true, y_score)
        return cls(
            fpr=tuple(fpr.tolist()),
            tpr=tuple(tpr.tolist()),
            thresholds=tuple(thresholds.tolist()),
            auc=float(sk_auc(fpr, tpr)),
        )


class OptimalThreshold(BaseModel):
    """Selected operating point of one class."""

    model_config = ConfigDict(frozen=True)

    class_index: int
    threshold: float
    auc: float
    j_statistic: float = 0.0


def roc_curves_from_probabilities(labels: Any, probs: Any) -> Dict[int, RocCurve]:
    """
    One-vs-rest ROC curve per class column of a score matrix.

    Args:
        labels: True class index per sample (or one-hot rows).
        probs: (samples, classes) score matrix, e.g. softmax outputs.
    """
    scores = np.asarray(probs, dtype=np.float64)
    targets = np.asarray(labels)
    if targets.ndim == 2:
        targets = targets.argmax(axis=1)
    if scores.ndim != 2:
        raise InvalidInputError(f"Expected a (samples, classes) score matrix, got shape {scores.shape}")
    if scores.shape[0] != targets.size:
        raise InvalidInputError(f"Labels and scores differ in length: {targets.size} != {scores.shape[0]}")

    return {
        class_idx: RocCurve.from_scores(targets == class_idx, scores[:, class_idx])
        for class_idx in range(scores.shape[1])
    }


def select_threshold(curve: RocCurve) -> Tuple[float, float]:
    """
    Threshold maximizing Youden's J on one curve.

    Returns:
        (threshold, J). Ties on J resolve to the lowest threshold; a curve
        without finite samples yields ``(DEFAULT_THRESHOLD, 0.0)``. The
        ``inf`` sentinel scikit-learn prepends is never selected.
    """
    thresholds = np.asarray(curve.thresholds, dtype=np.float64)
    j_values = np.asarray(curve.tpr, dtype=np.float64) - np.asarray(curve.fpr, dtype=np.float64)

    usable = np.isfinite(j_values) & np.isfinite(thresholds)
    if not usable.any():
        return DEFAULT_THRESHOLD, 0.0

    j_values = j_values[usable]
    thresholds = thresholds[usable]
    best_j = j_values.max()
    return float(thresholds[j_values == best_j].min()), float(best_j)


def find_optimal_thresholds(roc_curves: Mapping[int, RocCurve]) -> Dict[int, OptimalThreshold]:
    """
    Youden-optimal threshold for every class.

    Args:
        roc_curves: class index -> ROC curve.

    Returns:
        class index -> OptimalThreshold, in ascending class order.
    """
    results: Dict[int, OptimalThreshold] = {}
    for class_idx in sorted(roc_curves):
        curve = roc_curves[class_idx]
        threshold, j_stat = select_threshold(curve)
        if not curve.thresholds:
            logger.warning(
                f"Class {class_idx}: no ROC samples, using default threshold {DEFAULT_THRESHOLD}"
            )
        results[class_idx] = OptimalThreshold(
            class_index=class_idx, threshold=threshold, auc=curve.auc, j_statistic=j_stat
        )
    return results


def write_thresholds_csv(thresholds: Mapping[int, OptimalThreshold], path: Path) -> Path:
    """
    Writes ``ClassIndex,OptimalThreshold,AUC`` rows, one per class.

    Floats use six decimals.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(THRESHOLD_CSV_HEADER)
        for class_idx in sorted(thresholds):
            item = thresholds[class_idx]
            writer.writerow([class_idx, f"{item.threshold:.6f}", f"{item.auc:.6f}"])
        f.flush()
        os.fsync(f.fileno())

    logger.info(f"Optimal thresholds exported → {path.name}")
    return path
