"""
Pytest Configuration and Shared Fixtures for the evalkit Test Suite.

This module provides reusable test fixtures, including:
- Reference confusion matrices and their scored snapshots
- Snapshot factories for tracker, comparison and export tests
- A configuration manifest rooted in a temporary directory
- Log capture for the non-propagating ``evalkit`` logger

Fixtures are automatically discovered by pytest across all test modules.
"""

# Standard Imports
import logging

# Third-Party Imports
import pytest

# Internal Imports
from evalkit.core import LOGGER_NAME, Config
from evalkit.evaluation import ClassMetrics, EvaluationSnapshot, from_confusion_matrix

# Three-class reference scenario: 200 samples, 160 correct
REFERENCE_MATRIX = [[50, 5, 5], [10, 40, 10], [5, 5, 70]]


# LOGGING
@pytest.fixture(autouse=True)
def _propagate_evalkit_logs():
    """Let caplog see records of the evalkit logger, which does not propagate by default."""
    evalkit_logger = logging.getLogger(LOGGER_NAME)
    previous = evalkit_logger.propagate
    evalkit_logger.propagate = True
    yield
    evalkit_logger.propagate = previous


# SNAPSHOT FIXTURES
@pytest.fixture
def reference_matrix():
    """The three-class reference confusion matrix as nested lists."""
    return [row[:] for row in REFERENCE_MATRIX]


@pytest.fixture
def reference_snapshot():
    """Snapshot scored from the reference matrix at epoch 1."""
    return from_confusion_matrix(REFERENCE_MATRIX, epoch=1, training_time_ms=1200)


@pytest.fixture
def make_snapshot():
    """Factory building a snapshot with uniform per-class scores."""

    def _make(
        epoch=1,
        accuracy=0.9,
        precision=0.9,
        recall=0.9,
        f1=0.9,
        training_time_ms=1000,
        num_classes=2,
        loss=None,
    ):
        classes = tuple(
            ClassMetrics(class_index=i, precision=precision, recall=recall, f1=f1)
            for i in range(num_classes)
        )
        return EvaluationSnapshot(
            epoch=epoch,
            accuracy=accuracy,
            precision=precision,
            recall=recall,
            f1=f1,
            training_time_ms=training_time_ms,
            classes=classes,
            loss=loss,
        )

    return _make


# CONFIGURATION FIXTURES
@pytest.fixture
def tmp_config(tmp_path):
    """Manifest writing every artifact under tmp_path."""
    return Config.from_properties(
        {
            "metrics.output.dir": str(tmp_path / "metrics"),
            "metrics.model.name": "test_model",
            "metrics.evaluation.frequency": "1",
        }
    )
