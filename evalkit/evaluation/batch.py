"""
Prediction batch container.

The boundary type between a training loop (or inference pipeline) and the
metrics subsystem: predicted class indices, true class indices and an
optional loss. Tensors from any framework are accepted as long as they can be
converted with ``numpy.asarray``.
"""

from __future__ import annotations

# Standard Imports
from typing import Any, Iterable, Iterator, Optional, Tuple, Union

# Third-Party Imports
import numpy as np
from pydantic import BaseModel, ConfigDict

# Internal Imports
from evalkit.core.exceptions import InvalidInputError

from .snapshot import as_label_array


class PredictionBatch(BaseModel):
    """
    One batch of predictions to be scored.

    Attributes:
        predicted: Predicted class index per sample.
        labels: True class index per sample.
        loss: Optional loss reported for the batch.
    """

    model_config = ConfigDict(frozen=True)

    predicted: Tuple[int, ...]
    labels: Tuple[int, ...]
    loss: Optional[float] = None

    def __init__(self, **data: Any) -> None:
        # Errors surface as InvalidInputError, not pydantic ValidationError
        for field in ("predicted", "labels"):
            if field in data:
                data[field] = tuple(as_label_array(data[field], field).tolist())
        if "predicted" in data and "labels" in data and len(data["predicted"]) != len(data["labels"]):
            raise InvalidInputError(
                f"Predicted and true label sequences differ in length: "
                f"{len(data['predicted'])} != {len(data['labels'])}"
            )
        super().__init__(**data)

    def __len__(self) -> int:
        return len(self.labels)

    @classmethod
    def from_probabilities(
        cls, probs: Any, labels: Any, loss: Optional[float] = None
    ) -> "PredictionBatch":
        """
        Builds a batch from per-class scores by taking the arg-max per row.

        Labels may be class indices or one-hot rows.
        """
        scores = np.asarray(probs)
        if scores.ndim != 2:
            raise InvalidInputError(f"Expected a (samples, classes) score matrix, got shape {scores.shape}")

        targets = np.asarray(labels)
        if targets.ndim == 2:
            targets = targets.argmax(axis=1)

        return cls(predicted=scores.argmax(axis=1), labels=targets, loss=loss)


BatchLike = Union[PredictionBatch, Tuple[Any, Any]]


def iter_batches(source: Iterable[BatchLike]) -> Iterator[PredictionBatch]:
    """Normalizes an iterable of batches or ``(predicted, labels)`` pairs."""
    for item in source:
        yield as_batch(item)


def as_batch(item: BatchLike) -> PredictionBatch:
    """Coerces a single batch-like value into a PredictionBatch."""
    if isinstance(item, PredictionBatch):
        return item
    try:
        predicted, labels = item
    except (TypeError, ValueError) as e:
        raise InvalidInputError(
            f"Expected a PredictionBatch or a (predicted, labels) pair, got {type(item).__name__}"
        ) from e
    return PredictionBatch(predicted=predicted, labels=labels)
