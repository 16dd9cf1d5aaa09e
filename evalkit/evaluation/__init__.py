"""
Evaluation and Reporting Package

Scores classification predictions and turns the results into artifacts.
Provides the immutable evaluation data model, the metrics calculator, the
one-shot ModelEvaluator, quality-gate validation, multi-model comparison,
ROC-based threshold selection and matplotlib charts.
"""

# =========================================================================== #
#                                Internal Imports                             #
# =========================================================================== #
from .batch import BatchLike, PredictionBatch, as_batch, iter_batches
from .comparison import ComparisonReport, MetricWinner, compare, generate_model_comparison_report
from .evaluator import ModelEvaluator
from .metrics import (
    build_confusion_matrix,
    compute_classification_metrics,
    from_confusion_matrix,
    from_predictions,
)
from .reporting import EvaluationReport, create_evaluation_report
from .snapshot import GLOBAL_METRICS, ClassMetrics, ConfusionMatrix, EvaluationSnapshot, macro_average
from .thresholds import (
    DEFAULT_THRESHOLD,
    OptimalThreshold,
    RocCurve,
    find_optimal_thresholds,
    roc_curves_from_probabilities,
    write_thresholds_csv,
)
from .validation import ThresholdValidator
from .visualization import (
    generate_all_charts,
    plot_class_metrics,
    plot_confusion_matrix,
    plot_metrics_evolution,
    plot_training_time,
)

# =========================================================================== #
#                                PACKAGE INTERFACE                            #
# =========================================================================== #

__all__ = [
    # Data Model
    "ConfusionMatrix",
    "ClassMetrics",
    "EvaluationSnapshot",
    "GLOBAL_METRICS",
    "macro_average",
    # Inputs
    "PredictionBatch",
    "BatchLike",
    "as_batch",
    "iter_batches",
    # Metrics
    "from_confusion_matrix",
    "from_predictions",
    "build_confusion_matrix",
    "compute_classification_metrics",
    # Evaluation
    "ModelEvaluator",
    "ThresholdValidator",
    # Reporting
    "EvaluationReport",
    "create_evaluation_report",
    "ComparisonReport",
    "MetricWinner",
    "compare",
    "generate_model_comparison_report",
    # Thresholds
    "DEFAULT_THRESHOLD",
    "RocCurve",
    "OptimalThreshold",
    "roc_curves_from_probabilities",
    "find_optimal_thresholds",
    "write_thresholds_csv",
    # Visualizations
    "plot_metrics_evolution",
    "plot_class_metrics",
    "plot_training_time",
    "plot_confusion_matrix",
    "generate_all_charts",
]
