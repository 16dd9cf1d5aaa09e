"""Visualization utilities for tracked metrics.

Renders the evolution of a run's metrics as PNG charts: global metrics per
epoch, the per-class breakdown of one snapshot, evaluation time per epoch and
the confusion matrix. All figures use the non-interactive Agg backend and are
closed after saving.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence

import matplotlib

matplotlib.use("Agg")  # Use non-interactive backend for plotting

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from sklearn.metrics import ConfusionMatrixDisplay  # noqa: E402

from evalkit.core import LOGGER_NAME  # noqa: E402

from .snapshot import ConfusionMatrix, EvaluationSnapshot  # noqa: E402

# Global logger instance
logger = logging.getLogger(LOGGER_NAME)

FIG_DPI = 150

METRIC_STYLES = (
    ("accuracy", "Accuracy", "#3498db"),
    ("precision", "Precision", "#2ecc71"),
    ("recall", "Recall", "#e67e22"),
    ("f1", "F1 Score", "#9b59b6"),
)


# PUBLIC INTERFACE
def plot_metrics_evolution(history: Sequence[EvaluationSnapshot], out_path: Path) -> Path:
    """Plot accuracy, precision, recall and F1 against the epoch.

    Args:
        history: Snapshots in epoch order.
        out_path: Destination PNG file.
    """
    epochs = [s.epoch for s in history]
    fig, ax = plt.subplots(figsize=(9, 6))

    for attr, label, color in METRIC_STYLES:
        ax.plot(epochs, [getattr(s, attr) for s in history], color=color, lw=2, marker="o", label=label)

    ax.set_xlabel("Epoch")
    ax.set_ylabel("Score")
    ax.set_ylim(0.0, 1.05)
    ax.grid(True, linestyle="--", alpha=0.4)
    ax.legend(loc="lower right")
    fig.suptitle("Metrics Evolution", fontsize=14)
    fig.tight_layout()

    return _save_figure(fig, out_path, "Metrics evolution chart")


def plot_class_metrics(
    snapshot: EvaluationSnapshot, out_path: Path, class_names: Optional[Sequence[str]] = None
) -> Path:
    """Grouped bar chart of per-class precision, recall and F1 for one snapshot."""
    indices = np.arange(snapshot.num_classes)
    labels = [
        class_names[i] if class_names and i < len(class_names) else f"Class {i}" for i in indices
    ]
    width = 0.27

    fig, ax = plt.subplots(figsize=(max(9, snapshot.num_classes * 0.9), 6))
    for offset, (attr, label, color) in zip((-width, 0.0, width), METRIC_STYLES[1:]):
        values = [getattr(m, attr) for m in snapshot.classes]
        ax.bar(indices + offset, values, width, label=label, color=color)

    ax.set_xticks(indices)
    ax.set_xticklabels(labels, rotation=45, ha="right")
    ax.set_ylabel("Score")
    ax.set_ylim(0.0, 1.05)
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    ax.legend()
    ax.set_title(f"Per-Class Metrics (Epoch {snapshot.epoch})", fontsize=12)
    fig.tight_layout()

    return _save_figure(fig, out_path, "Class metrics chart")


def plot_training_time(history: Sequence[EvaluationSnapshot], out_path: Path) -> Path:
    """Bar chart of the time attributed to each recorded epoch."""
    epochs = [s.epoch for s in history]
    times_s = [s.training_time_ms / 1000.0 for s in history]

    fig, ax = plt.subplots(figsize=(9, 5))
    ax.bar(epochs, times_s, color="#e74c3c")
    ax.set_xlabel("Epoch")
    ax.set_ylabel("Time (s)")
    ax.grid(True, axis="y", linestyle="--", alpha=0.4)
    ax.set_title("Training Time per Epoch", fontsize=12)
    fig.tight_layout()

    return _save_figure(fig, out_path, "Training time chart")


def plot_confusion_matrix(
    matrix: ConfusionMatrix, out_path: Path, class_names: Optional[Sequence[str]] = None
) -> Path:
    """Generate and save a row-normalized confusion matrix plot."""
    counts = matrix.to_numpy().astype(np.float64)
    row_totals = counts.sum(axis=1, keepdims=True)
    normalized = np.divide(counts, row_totals, out=np.zeros_like(counts), where=row_totals > 0)

    labels = (
        list(class_names)[: matrix.num_classes]
        if class_names and len(class_names) >= matrix.num_classes
        else [str(i) for i in range(matrix.num_classes)]
    )

    disp = ConfusionMatrixDisplay(confusion_matrix=normalized, display_labels=labels)
    fig, ax = plt.subplots(figsize=(11, 9))
    disp.plot(ax=ax, cmap="Blues", xticks_rotation=45, values_format=".3f")
    ax.set_title("Confusion Matrix", fontsize=12, pad=20)
    fig.tight_layout()

    return _save_figure(fig, out_path, "Confusion matrix")


def generate_all_charts(
    history: Sequence[EvaluationSnapshot],
    output_dir: Path,
    model_name: str,
    class_names: Optional[Sequence[str]] = None,
) -> List[Path]:
    """Render every chart for a run.

    The per-class and confusion matrix charts use the latest snapshot.

    Returns:
        Paths of the written PNG files; empty when ``history`` is empty.
    """
    if not history:
        logger.warning("No metrics recorded, skipping chart generation")
        return []

    output_dir.mkdir(parents=True, exist_ok=True)
    latest = history[-1]

    paths = [
        plot_metrics_evolution(history, output_dir / f"{model_name}_metrics_evolution.png"),
        plot_class_metrics(latest, output_dir / f"{model_name}_class_metrics.png", class_names),
        plot_training_time(history, output_dir / f"{model_name}_training_time.png"),
    ]
    if latest.confusion_matrix is not None:
        paths.append(
            plot_confusion_matrix(
                latest.confusion_matrix, output_dir / f"{model_name}_confusion_matrix.png", class_names
            )
        )
    return paths


# PRIVATE HELPERS
def _save_figure(fig, out_path: Path, label: str) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=FIG_DPI, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"{label} saved → {out_path.name}")
    return out_path
