"""
Test Suite for the Metrics Calculator.

Covers scoring of confusion matrices and raw label sequences: accuracy,
per-class precision/recall/F1, macro-averaging, zero-denominator handling
and input validation.
"""

# Third-Party Imports
import numpy as np
import pytest

# Internal Imports
from evalkit.core import InvalidInputError
from evalkit.evaluation import (
    ConfusionMatrix,
    build_confusion_matrix,
    compute_classification_metrics,
    from_confusion_matrix,
    from_predictions,
)


@pytest.mark.unit
class TestFromConfusionMatrix:
    """Scoring a known three-class confusion matrix."""

    def test_accuracy(self, reference_snapshot):
        """160 correct predictions out of 200."""
        assert reference_snapshot.accuracy == pytest.approx(0.8)

    def test_per_class_values(self, reference_snapshot):
        """Class 0: TP=50, predicted 65, actual 60."""
        cls0 = reference_snapshot.per_class[0]

        assert cls0.precision == pytest.approx(50 / 65)
        assert cls0.recall == pytest.approx(50 / 60)
        assert cls0.f1 == pytest.approx(0.8)
        assert cls0.true_positives == 50
        assert cls0.false_positives == 15
        assert cls0.false_negatives == 10
        assert cls0.support == 60

    def test_macro_averages(self, reference_snapshot):
        """Global scores are the unweighted mean over classes."""
        precisions = [50 / 65, 40 / 50, 70 / 85]
        recalls = [50 / 60, 40 / 60, 70 / 80]
        f1s = [100 / 125, 80 / 110, 140 / 165]

        assert reference_snapshot.precision == pytest.approx(np.mean(precisions))
        assert reference_snapshot.recall == pytest.approx(np.mean(recalls))
        assert reference_snapshot.f1 == pytest.approx(np.mean(f1s))

    def test_metadata_stamped(self, reference_snapshot, reference_matrix):
        """Epoch, time and the source matrix are carried on the snapshot."""
        assert reference_snapshot.epoch == 1
        assert reference_snapshot.training_time_ms == 1200
        assert reference_snapshot.confusion_matrix.to_numpy().tolist() == reference_matrix

    def test_identity_matrix_is_perfect(self):
        """A diagonal matrix scores 1.0 everywhere."""
        snap = from_confusion_matrix(np.eye(4, dtype=int) * 7)

        assert snap.accuracy == 1.0
        assert snap.precision == 1.0
        assert snap.recall == 1.0
        assert snap.f1 == 1.0

    def test_unpredicted_class_scores_zero(self):
        """A class never predicted and never present contributes 0.0."""
        snap = from_confusion_matrix([[3, 0, 0], [0, 2, 0], [0, 0, 0]])
        cls2 = snap.per_class[2]

        assert (cls2.precision, cls2.recall, cls2.f1) == (0.0, 0.0, 0.0)
        assert snap.precision == pytest.approx(2 / 3)

    def test_empty_matrix_scores_zero(self):
        """A matrix without samples yields zero accuracy instead of failing."""
        snap = from_confusion_matrix([[0, 0], [0, 0]])

        assert snap.accuracy == 0.0
        assert snap.f1 == 0.0

    def test_scores_within_unit_interval(self):
        """All scores stay in [0, 1] for arbitrary counts."""
        rng = np.random.default_rng(seed=7)
        snap = from_confusion_matrix(rng.integers(0, 50, size=(5, 5)))

        for value in (snap.accuracy, snap.precision, snap.recall, snap.f1):
            assert 0.0 <= value <= 1.0
        for m in snap.classes:
            assert 0.0 <= m.precision <= 1.0
            assert 0.0 <= m.recall <= 1.0
            assert 0.0 <= m.f1 <= 1.0

    @pytest.mark.parametrize(
        "matrix",
        [
            [[1, 2, 3], [4, 5, 6]],
            [[1, -1], [0, 2]],
            [],
            [[0.5, 1], [1, 1]],
        ],
    )
    def test_malformed_matrix_rejected(self, matrix):
        """Non-square, negative, empty or fractional matrices are invalid."""
        with pytest.raises(InvalidInputError):
            from_confusion_matrix(matrix)


@pytest.mark.unit
class TestFromPredictions:
    """Scoring raw predicted/true label sequences."""

    def test_matches_matrix_scoring(self):
        """Scoring labels equals scoring their confusion matrix."""
        true = [0, 0, 1, 1, 2, 2, 2]
        pred = [0, 1, 1, 1, 2, 0, 2]

        by_labels = from_predictions(pred, true)
        by_matrix = from_confusion_matrix(ConfusionMatrix.from_labels(pred, true))

        assert by_labels.accuracy == pytest.approx(by_matrix.accuracy)
        assert by_labels.f1 == pytest.approx(by_matrix.f1)

    def test_matrix_size_from_max_label(self):
        """Matrix size is 1 + the highest label seen in either sequence."""
        cm = build_confusion_matrix([0, 3], [1, 0])

        assert cm.num_classes == 4
        assert cm.total == 2

    def test_num_classes_pads_matrix(self):
        """An explicit class count enlarges the matrix."""
        snap = from_predictions([0, 1], [0, 1], num_classes=5)

        assert snap.num_classes == 5
        assert snap.accuracy == 1.0

    def test_length_mismatch(self):
        """Sequences of different lengths are rejected."""
        with pytest.raises(InvalidInputError):
            from_predictions([0, 1, 1], [0, 1])

    def test_empty_input(self):
        """An empty evaluation set is rejected."""
        with pytest.raises(InvalidInputError):
            from_predictions([], [])

    def test_negative_label(self):
        """Negative class indices are rejected."""
        with pytest.raises(InvalidInputError):
            from_predictions([0, -1], [0, 1])

    def test_label_out_of_declared_range(self):
        """A label beyond num_classes is rejected."""
        with pytest.raises(InvalidInputError):
            from_predictions([0, 4], [0, 1], num_classes=3)

    def test_build_matches_from_labels(self):
        """Both entry points produce the same matrix, float tensors included."""
        pred = np.array([0.0, 2.0, 1.0, 2.0])
        true = [0, 2, 2, 1]

        assert build_confusion_matrix(pred, true, num_classes=4) == ConfusionMatrix.from_labels(
            pred, true, num_classes=4
        )

    def test_fractional_label_rejected(self):
        """Fractional class indices are rejected, never truncated."""
        with pytest.raises(InvalidInputError, match="integer class indices"):
            build_confusion_matrix([0, 1.5], [0, 1])

    def test_accepts_numpy_arrays(self):
        """NumPy arrays work like plain sequences."""
        snap = from_predictions(np.array([1, 1, 0]), np.array([1, 0, 0]), epoch=4, loss=0.3)

        assert snap.epoch == 4
        assert snap.loss == pytest.approx(0.3)
        assert snap.accuracy == pytest.approx(2 / 3)


@pytest.mark.unit
def test_compute_classification_metrics_returns_python_floats():
    """Dict helper exposes the four global metrics as plain floats."""
    results = compute_classification_metrics(np.array([0, 1, 1, 0]), np.array([0, 1, 0, 0]))

    assert set(results) == {"accuracy", "precision", "recall", "f1"}
    assert results["accuracy"] == pytest.approx(0.75)
    for value in results.values():
        assert type(value) is float
