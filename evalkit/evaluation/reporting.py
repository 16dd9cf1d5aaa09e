"""
Evaluation Report Module

Turns a scored snapshot into a human-readable text report with fixed
sections:

    1. Title (model name, generation date)
    2. Global metrics
    3. Confusion matrix
    4. Per-class metrics

Tables are rendered through pandas so column alignment stays consistent
with the CSV and Excel artifacts produced elsewhere in the package.
"""

# Standard Imports
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

# Third-Party Imports
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

# Internal Imports
from evalkit.core import LOGGER_NAME, LogStyle

from .snapshot import EvaluationSnapshot

logger = logging.getLogger(LOGGER_NAME)

REPORT_SECTIONS = ("GLOBAL METRICS", "CONFUSION MATRIX", "PER-CLASS METRICS")


class EvaluationReport(BaseModel):
    """
    Validated container for one model evaluation report.

    Attributes:
        model_name: Identifier of the evaluated model.
        snapshot: Scored evaluation the report describes.
        class_names: Optional human-readable class labels.
        timestamp: Generation time, ``YYYYmmdd_HHMMSS``.
        path: File the report was saved to (set by ``save``).
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_name: str
    snapshot: EvaluationSnapshot
    class_names: Optional[List[str]] = None
    timestamp: str = Field(default_factory=lambda: datetime.now().strftime("%Y%m%d_%H%M%S"))
    path: Optional[Path] = None

    def class_label(self, class_index: int) -> str:
        if self.class_names and class_index < len(self.class_names):
            return self.class_names[class_index]
        return f"Class {class_index}"

    def per_class_dataframe(self) -> pd.DataFrame:
        """Per-class table: one row per class with P/R/F1 and support."""
        rows = [
            {
                "Class": self.class_label(m.class_index),
                "Precision": m.precision,
                "Recall": m.recall,
                "F1": m.f1,
                "Support": m.support,
            }
            for m in self.snapshot.classes
        ]
        return pd.DataFrame(rows, columns=["Class", "Precision", "Recall", "F1", "Support"])

    def render(self) -> str:
        """Full report text."""
        snap = self.snapshot
        generated = datetime.strptime(self.timestamp, "%Y%m%d_%H%M%S").strftime("%d/%m/%Y %H:%M")

        lines: List[str] = [
            LogStyle.HEAVY,
            f"MODEL EVALUATION REPORT: {self.model_name}",
            f"Date: {generated}",
            LogStyle.HEAVY,
            "",
            REPORT_SECTIONS[0],
            LogStyle.DOUBLE,
            f"Accuracy: {snap.accuracy:.4f}",
            f"Precision: {snap.precision:.4f}",
            f"Recall: {snap.recall:.4f}",
            f"F1 Score: {snap.f1:.4f}",
            f"Evaluation time: {snap.training_time_ms} ms",
            "",
            REPORT_SECTIONS[1],
            LogStyle.DOUBLE,
        ]

        if snap.confusion_matrix is not None:
            lines.append(snap.confusion_matrix.render(self._names_for_matrix()))
        else:
            lines.append("(not available)")
        lines.append("")

        lines.extend([REPORT_SECTIONS[2], LogStyle.DOUBLE])
        if snap.classes:
            lines.append(self.per_class_dataframe().to_string(index=False, float_format=lambda v: f"{v:.4f}"))
        else:
            lines.append("(no classes)")

        lines.extend(["", LogStyle.HEAVY, "END OF REPORT", LogStyle.HEAVY])
        return "\n".join(lines) + "\n"

    def save(self, path: Path) -> "EvaluationReport":
        """
        Writes the rendered report and returns a copy carrying its path.

        Args:
            path: Destination ``.txt`` file; parent directories are created.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render())
            f.flush()
            os.fsync(f.fileno())

        logger.info(f"Evaluation report saved → {path.name}")
        return self.model_copy(update={"path": path})

    def _names_for_matrix(self) -> Optional[Sequence[str]]:
        return self.class_names if self.class_names else None


def report_filename(model_name: str, timestamp: str) -> str:
    """``<model>_evaluation_report_<timestamp>.txt``"""
    return f"{model_name}_evaluation_report_{timestamp}.txt"


def create_evaluation_report(
    snapshot: EvaluationSnapshot,
    model_name: str,
    output_dir: Path,
    class_names: Optional[Sequence[str]] = None,
) -> EvaluationReport:
    """
    Builds and saves an evaluation report under ``output_dir``.

    Returns:
        The saved report (``report.path`` points at the written file).
    """
    report = EvaluationReport(
        model_name=model_name,
        snapshot=snapshot,
        class_names=list(class_names) if class_names else None,
    )
    return report.save(output_dir / report_filename(model_name, report.timestamp))
