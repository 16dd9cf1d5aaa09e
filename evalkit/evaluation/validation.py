"""
Quality Gate Validation.

Checks a snapshot against the configured metric minimums. The gate passes
only if accuracy, precision, recall and F1 are each greater than or equal to
their minimum. Validation never raises: a missing snapshot simply fails.
"""

# Standard Imports
import logging
from typing import List, Optional

# Internal Imports
from evalkit.core import LOGGER_NAME, ThresholdSet

from .snapshot import GLOBAL_METRICS, EvaluationSnapshot

logger = logging.getLogger(LOGGER_NAME)


class ThresholdValidator:
    """Stateless quality gate over EvaluationSnapshot objects."""

    @staticmethod
    def failures(snapshot: Optional[EvaluationSnapshot], thresholds: ThresholdSet) -> List[str]:
        """
        Names of the metrics falling below their minimum.

        A ``None`` snapshot fails on every metric.
        """
        if snapshot is None:
            return list(GLOBAL_METRICS)

        minimums = thresholds.as_dict()
        return [name for name in GLOBAL_METRICS if snapshot.metric(name) < minimums[name]]

    @staticmethod
    def validate(snapshot: Optional[EvaluationSnapshot], thresholds: ThresholdSet) -> bool:
        """
        True iff every global metric meets its minimum.

        Each failing metric is logged at WARNING with its value and minimum.
        """
        if snapshot is None:
            logger.warning("Quality gate failed: no evaluation snapshot available")
            return False

        failed = ThresholdValidator.failures(snapshot, thresholds)
        minimums = thresholds.as_dict()
        for name in failed:
            logger.warning(
                f"Quality gate: {name} {snapshot.metric(name):.4f} below minimum {minimums[name]:.4f}"
            )

        if not failed:
            logger.debug(f"Quality gate passed at epoch {snapshot.epoch}")
        return not failed
