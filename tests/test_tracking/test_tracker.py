"""
Test Suite for the Epoch-Scheduled Metrics Tracker.

Tests cover the evaluation schedule, training-time measurement, history
immutability, exporter fan-out and failure isolation, and the missing
validation source path.
"""

from unittest.mock import MagicMock, patch

import pytest

from evalkit.core import Config, ExportFailure, InvalidInputError
from evalkit.evaluation import PredictionBatch
from evalkit.tracking import CsvExporter, MetricsTracker, TrainingListener


def _source(predicted=(0, 1, 1, 0), labels=(0, 1, 0, 0), loss=None):
    batch = PredictionBatch(predicted=predicted, labels=labels, loss=loss)
    return lambda: batch


def _run(tracker, epochs):
    for epoch in epochs:
        tracker.on_epoch_start(epoch)
        tracker.on_epoch_end(epoch)


# --- SCHEDULE TESTS ---


@pytest.mark.unit
def test_frequency_one_records_every_epoch():
    """With frequency 1 every epoch is recorded in order."""
    tracker = MetricsTracker(_source(), evaluation_frequency=1)

    _run(tracker, range(1, 4))

    assert [s.epoch for s in tracker.history()] == [1, 2, 3]


@pytest.mark.unit
def test_frequency_skips_unscheduled_epochs():
    """With frequency 2 over epochs 1..5 only 2 and 4 are recorded."""
    tracker = MetricsTracker(_source(), evaluation_frequency=2)

    _run(tracker, range(1, 6))

    assert [s.epoch for s in tracker.history()] == [2, 4]


@pytest.mark.unit
def test_skipped_epoch_returns_none_and_skips_source():
    """Unscheduled epochs never pull a validation batch."""
    source = MagicMock(return_value=PredictionBatch(predicted=[0], labels=[0]))
    tracker = MetricsTracker(source, evaluation_frequency=3)

    assert tracker.on_epoch_end(1) is None
    assert tracker.on_epoch_end(2) is None
    source.assert_not_called()
    assert tracker.on_epoch_end(3) is not None
    source.assert_called_once()


@pytest.mark.unit
def test_invalid_frequency_rejected():
    """Frequency below one is rejected."""
    with pytest.raises(InvalidInputError):
        MetricsTracker(_source(), evaluation_frequency=0)


@pytest.mark.unit
def test_epoch_regression_rejected():
    """Recorded epochs must strictly increase."""
    tracker = MetricsTracker(_source())
    tracker.on_epoch_end(3)

    with pytest.raises(InvalidInputError):
        tracker.on_epoch_end(3)
    with pytest.raises(InvalidInputError):
        tracker.on_epoch_end(2)
    assert len(tracker.history()) == 1


# --- SNAPSHOT CONTENT TESTS ---


@pytest.mark.unit
def test_snapshot_scores_validation_batch():
    """The recorded snapshot scores the batch returned by the source."""
    tracker = MetricsTracker(_source(loss=0.42))

    snap = tracker.on_epoch_end(1)

    assert snap.accuracy == pytest.approx(0.75)
    assert snap.loss == pytest.approx(0.42)
    assert tracker.latest() is snap


@pytest.mark.unit
def test_source_may_return_plain_pair():
    """A (predicted, labels) pair is accepted from the source."""
    tracker = MetricsTracker(lambda: ([1, 1], [1, 0]))

    assert tracker.on_epoch_end(1).accuracy == pytest.approx(0.5)


@pytest.mark.unit
@patch("evalkit.tracking.tracker.time.monotonic")
def test_training_time_measured_from_epoch_start(mock_monotonic):
    """Training time is the elapsed milliseconds since on_epoch_start."""
    mock_monotonic.side_effect = [100.0, 102.5]
    tracker = MetricsTracker(_source())

    tracker.on_epoch_start(1)
    snap = tracker.on_epoch_end(1)

    assert snap.training_time_ms == 2500


@pytest.mark.unit
def test_training_time_zero_without_start():
    """An epoch end without a matching start records zero time."""
    tracker = MetricsTracker(_source())
    tracker.on_epoch_start(1)

    assert tracker.on_epoch_end(2).training_time_ms == 0


# --- HISTORY TESTS ---


@pytest.mark.unit
def test_history_is_immutable_copy():
    """history() returns a tuple detached from internal state."""
    tracker = MetricsTracker(_source())
    tracker.on_epoch_end(1)

    snapshot_view = tracker.history()
    tracker.on_epoch_end(2)

    assert isinstance(snapshot_view, tuple)
    assert len(snapshot_view) == 1
    assert len(tracker.history()) == 2


@pytest.mark.unit
def test_empty_tracker():
    """A fresh tracker has no history and a placeholder report."""
    tracker = MetricsTracker(_source())

    assert tracker.history() == ()
    assert tracker.latest() is None
    assert tracker.progress_report() == "No metrics recorded"


@pytest.mark.unit
def test_progress_report_rows():
    """Progress report has a header and one tab-separated row per snapshot."""
    tracker = MetricsTracker(_source(), model_name="resnet")
    _run(tracker, [1, 2])

    lines = tracker.progress_report().strip().splitlines()

    assert lines[0] == "Training progress: resnet"
    assert lines[1].split("\t")[0] == "Epoch"
    assert [line.split("\t")[0] for line in lines[2:]] == ["1", "2"]
    assert lines[2].split("\t")[1] == "0.7500"


# --- MISSING SOURCE TESTS ---


@pytest.mark.unit
def test_missing_source_warns_and_records_nothing(caplog):
    """Without a validation source epoch ends are a logged no-op."""
    tracker = MetricsTracker(None)

    with caplog.at_level("WARNING"):
        result = tracker.on_epoch_end(1)

    assert result is None
    assert tracker.history() == ()
    assert any("No validation source" in rec.message for rec in caplog.records)


@pytest.mark.unit
def test_failing_source_skips_epoch(caplog):
    """A validation source that raises is logged; the epoch is not recorded."""
    source = MagicMock(side_effect=OSError("validation shard unavailable"))
    tracker = MetricsTracker(source)

    with caplog.at_level("ERROR"):
        result = tracker.on_epoch_end(1)

    assert result is None
    assert tracker.history() == ()
    assert any("validation shard unavailable" in rec.message for rec in caplog.records)

    source.side_effect = None
    source.return_value = PredictionBatch(predicted=[0], labels=[0])
    assert tracker.on_epoch_end(2).epoch == 2


@pytest.mark.unit
def test_source_input_errors_propagate():
    """Malformed validation data is surfaced, not skipped."""
    tracker = MetricsTracker(lambda: ([1, 1, 1], []))

    with pytest.raises(InvalidInputError):
        tracker.on_epoch_end(1)
    assert tracker.history() == ()


# --- EXPORTER TESTS ---


@pytest.mark.unit
def test_exporters_receive_each_snapshot():
    """Every exporter gets every recorded snapshot."""
    first, second = MagicMock(), MagicMock()
    tracker = MetricsTracker(_source(), evaluation_frequency=2, exporters=[first, second])

    _run(tracker, range(1, 5))

    assert first.export.call_count == 2
    assert second.export.call_count == 2
    assert first.export.call_args.args[0].epoch == 4


@pytest.mark.unit
def test_failing_exporter_does_not_block_others(caplog):
    """Export failures are logged and skipped; history is unaffected."""
    broken = MagicMock()
    broken.export.side_effect = ExportFailure("broken", "disk full")
    crashing = MagicMock()
    crashing.export.side_effect = RuntimeError("unexpected")
    healthy = MagicMock()
    tracker = MetricsTracker(_source(), exporters=[broken, crashing, healthy])

    with caplog.at_level("WARNING"):
        snap = tracker.on_epoch_end(1)

    healthy.export.assert_called_once_with(snap)
    assert tracker.history() == (snap,)
    warnings = [rec.message for rec in caplog.records if rec.levelname == "WARNING"]
    assert any("disk full" in msg for msg in warnings)
    assert any("unexpected" in msg for msg in warnings)


@pytest.mark.unit
def test_context_manager_opens_and_closes_exporters():
    """Entering opens every exporter; leaving closes them."""
    exporter = MagicMock()

    with MetricsTracker(_source(), exporters=[exporter]) as tracker:
        exporter.open.assert_called_once()
        tracker.on_epoch_end(1)

    exporter.close.assert_called_once()


@pytest.mark.unit
def test_open_failure_is_logged(caplog):
    """An exporter failing to open is reported but does not abort the run."""
    exporter = MagicMock()
    exporter.open.side_effect = ExportFailure("mlflow", "server unreachable")

    with caplog.at_level("WARNING"):
        with MetricsTracker(_source(), exporters=[exporter]) as tracker:
            tracker.on_epoch_end(1)

    assert any("server unreachable" in rec.message for rec in caplog.records)
    exporter.export.assert_called_once()


# --- CONFIGURATION TESTS ---


@pytest.mark.unit
def test_from_config_defaults_to_csv_exporter(tmp_config):
    """from_config wires frequency, name and the CSV exporter."""
    tracker = MetricsTracker.from_config(tmp_config, _source())

    assert tracker.evaluation_frequency == 1
    assert tracker.model_name == "test_model"
    assert len(tracker.exporters) == 1
    assert isinstance(tracker.exporters[0], CsvExporter)


@pytest.mark.unit
@patch("evalkit.tracking.tracker.Logger.setup")
def test_from_config_configures_logging(mock_setup, tmp_path):
    """The telemetry section is handed to the logger."""
    cfg = Config.from_properties(
        {"logging.dir": str(tmp_path / "logs"), "logging.level": "DEBUG"}
    )

    MetricsTracker.from_config(cfg, _source(), exporters=[])

    mock_setup.assert_called_once_with(log_dir=cfg.telemetry.log_dir, level="DEBUG")


@pytest.mark.unit
def test_from_config_explicit_exporters():
    """Explicit exporters replace the configured ones."""
    tracker = MetricsTracker.from_config(Config(), _source(), exporters=[])

    assert tracker.exporters == []


@pytest.mark.unit
def test_tracker_satisfies_training_listener():
    """The tracker can be used wherever a TrainingListener is expected."""

    def drive(listener: TrainingListener):
        listener.on_epoch_start(1)
        return listener.on_epoch_end(1)

    assert drive(MetricsTracker(_source())) is not None


# --- INTEGRATION ---


@pytest.mark.integration
def test_tracker_writes_csv_through_exporter(tmp_config):
    """A configured tracker appends one CSV row per recorded epoch."""
    with MetricsTracker.from_config(tmp_config, _source()) as tracker:
        _run(tracker, [1, 2, 3])

    lines = tmp_config.metrics.metrics_csv_path().read_text().strip().splitlines()
    assert lines[0] == "Epoch,Accuracy,Precision,Recall,F1Score,TrainingTime"
    assert [line.split(",")[0] for line in lines[1:]] == ["1", "2", "3"]
