"""
Quality Gate Configuration Schema.

Minimum acceptable global metrics. A model whose evaluation snapshot falls
strictly below any of these values fails the gate. Defaults mirror the
``test.min.*`` values the training harness has always shipped with.
"""

# Third-Party Imports
from pydantic import BaseModel, ConfigDict, Field

# Internal Imports
from .types import Probability


class ThresholdSet(BaseModel):
    """Read-only minimums for accuracy, precision, recall and F1."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_accuracy: Probability = Field(default=0.8, description="test.min.accuracy")
    min_precision: Probability = Field(default=0.75, description="test.min.precision")
    min_recall: Probability = Field(default=0.75, description="test.min.recall")
    min_f1: Probability = Field(default=0.75, description="test.min.f1")

    def as_dict(self) -> dict:
        """Maps snapshot metric names to their minimums."""
        return {
            "accuracy": self.min_accuracy,
            "precision": self.min_precision,
            "recall": self.min_recall,
            "f1": self.min_f1,
        }
