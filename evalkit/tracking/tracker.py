"""
Epoch-Scheduled Metrics Tracker.

Hooks into a training loop through the TrainingListener protocol. Every
``evaluation_frequency`` epochs it pulls one validation batch, scores it,
appends the snapshot to an in-memory history and forwards it to the
configured exporters.

The tracker has a single writer (the training loop). ``history()`` always
returns an immutable copy, so readers never observe a half-appended list.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple

from evalkit.core import LOGGER_NAME, Config, ExportFailure, InvalidInputError, Logger, LogStyle
from evalkit.evaluation import EvaluationSnapshot, PredictionBatch, as_batch, from_predictions

from .exporters import ExporterProtocol, create_exporters

logger = logging.getLogger(LOGGER_NAME)

ValidationSource = Callable[[], Any]


class TrainingListener(Protocol):
    """Protocol the training loop calls around each epoch."""

    def on_epoch_start(self, epoch: int) -> None: ...

    def on_epoch_end(self, epoch: int) -> Optional[EvaluationSnapshot]: ...


class MetricsTracker:
    """Records an EvaluationSnapshot every N epochs.

    Args:
        validation_source: Zero-argument callable returning a PredictionBatch
            (or a ``(predicted, labels)`` pair) for the current model state.
            When None, epoch ends are logged and ignored.
        evaluation_frequency: Evaluate when ``epoch % evaluation_frequency == 0``.
        output_dir: Directory handed to file-based exporters.
        model_name: Run identifier used in logs and file names.
        exporters: Sinks receiving each recorded snapshot.
    """

    def __init__(
        self,
        validation_source: Optional[ValidationSource] = None,
        evaluation_frequency: int = 1,
        output_dir: Optional[Path] = None,
        model_name: str = "model",
        exporters: Optional[Sequence[ExporterProtocol]] = None,
    ) -> None:
        if evaluation_frequency < 1:
            raise InvalidInputError(
                f"evaluation_frequency must be >= 1, got {evaluation_frequency}"
            )
        self.validation_source = validation_source
        self.evaluation_frequency = evaluation_frequency
        self.output_dir = output_dir
        self.model_name = model_name
        self.exporters: List[ExporterProtocol] = list(exporters or [])

        self._history: List[EvaluationSnapshot] = []
        self._epoch_start: Optional[float] = None
        self._running_epoch: Optional[int] = None

    @classmethod
    def from_config(
        cls,
        cfg: Config,
        validation_source: Optional[ValidationSource] = None,
        exporters: Optional[Sequence[ExporterProtocol]] = None,
    ) -> MetricsTracker:
        """Build a tracker from the manifest; exporters default to ``create_exporters(cfg)``.

        The ``telemetry`` section configures the shared logger.
        """
        Logger.setup(log_dir=cfg.telemetry.log_dir, level=cfg.telemetry.log_level)
        return cls(
            validation_source=validation_source,
            evaluation_frequency=cfg.metrics.evaluation_frequency,
            output_dir=cfg.metrics.output_dir,
            model_name=cfg.metrics.model_name,
            exporters=create_exporters(cfg) if exporters is None else exporters,
        )

    # LIFECYCLE
    def open(self) -> None:
        for exporter in self.exporters:
            try:
                exporter.open()
            except ExportFailure as e:
                logger.warning(f"Exporter {type(exporter).__name__} failed to open: {e}")

    def close(self) -> None:
        for exporter in self.exporters:
            try:
                exporter.close()
            except Exception as e:
                logger.warning(f"Exporter {type(exporter).__name__} failed to close: {e}")

    def __enter__(self) -> MetricsTracker:
        self.open()
        return self

    def __exit__(self, *_args: Any) -> None:
        self.close()

    # TRAINING HOOKS
    def on_epoch_start(self, epoch: int) -> None:
        """Mark the start of ``epoch`` for training-time measurement."""
        self._epoch_start = time.monotonic()
        self._running_epoch = epoch

    def on_epoch_end(self, epoch: int) -> Optional[EvaluationSnapshot]:
        """Evaluate ``epoch`` if it is scheduled.

        Returns:
            The recorded snapshot, or None when the epoch was skipped or the
            validation source failed.

        Raises:
            InvalidInputError: If ``epoch`` does not exceed the last recorded
                epoch, or the validation batch cannot be scored.
        """
        elapsed_ms = self._consume_elapsed_ms(epoch)

        if epoch % self.evaluation_frequency != 0:
            return None

        if self.validation_source is None:
            logger.warning(f"No validation source configured, epoch {epoch} not evaluated")
            return None

        latest = self.latest()
        if latest is not None and epoch <= latest.epoch:
            raise InvalidInputError(
                f"Epoch {epoch} does not follow last recorded epoch {latest.epoch}"
            )

        try:
            raw = self.validation_source()
        except InvalidInputError:
            raise
        except Exception as e:
            logger.error(f"Validation source failed, epoch {epoch} not evaluated: {e}")
            return None

        batch: PredictionBatch = as_batch(raw)
        snapshot = from_predictions(
            batch.predicted,
            batch.labels,
            epoch=epoch,
            training_time_ms=elapsed_ms,
            loss=batch.loss,
        )
        self._history.append(snapshot)
        logger.info(f"{LogStyle.ARROW} [{self.model_name}] {snapshot.summary()}")

        self._export(snapshot)
        return snapshot

    # QUERIES
    def history(self) -> Tuple[EvaluationSnapshot, ...]:
        """Recorded snapshots in epoch order (immutable copy)."""
        return tuple(self._history)

    def latest(self) -> Optional[EvaluationSnapshot]:
        return self._history[-1] if self._history else None

    def progress_report(self) -> str:
        """Tab-separated table of the whole history."""
        if not self._history:
            return "No metrics recorded"

        lines = [f"Training progress: {self.model_name}", "Epoch\tAccuracy\tPrecision\tRecall\tF1\tTime(ms)"]
        for s in self._history:
            lines.append(
                f"{s.epoch}\t{s.accuracy:.4f}\t{s.precision:.4f}\t{s.recall:.4f}\t{s.f1:.4f}\t{s.training_time_ms}"
            )
        return "\n".join(lines) + "\n"

    # PRIVATE HELPERS
    def _consume_elapsed_ms(self, epoch: int) -> int:
        if self._epoch_start is None or self._running_epoch != epoch:
            elapsed = 0
        else:
            elapsed = int((time.monotonic() - self._epoch_start) * 1000)
        self._epoch_start = None
        self._running_epoch = None
        return elapsed

    def _export(self, snapshot: EvaluationSnapshot) -> None:
        for exporter in self.exporters:
            try:
                exporter.export(snapshot)
            except ExportFailure as e:
                logger.warning(f"Export skipped at epoch {snapshot.epoch}: {e}")
            except Exception as e:
                failure = ExportFailure(type(exporter).__name__, str(e))
                logger.warning(f"Export skipped at epoch {snapshot.epoch}: {failure}")
