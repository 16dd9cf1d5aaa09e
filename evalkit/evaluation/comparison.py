"""
Model Comparison Reporting.

Compares the global metrics of several models (or several runs of one model)
side by side and names the best entry for each metric. The winner of a
metric is its arg-max; on ties the first entry wins.

Exports:
    - Plain-text table with one "Best <metric>: <name> (<value>)" line per metric
    - Excel workbook styled like the rest of the run artifacts
"""

# Standard Imports
import logging
import os
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

# Third-Party Imports
import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils.dataframe import dataframe_to_rows
from pydantic import BaseModel, ConfigDict

# Internal Imports
from evalkit.core import LOGGER_NAME, InvalidInputError, LogStyle

from .snapshot import GLOBAL_METRICS, EvaluationSnapshot

logger = logging.getLogger(LOGGER_NAME)

METRIC_LABELS: Dict[str, str] = {
    "accuracy": "Accuracy",
    "precision": "Precision",
    "recall": "Recall",
    "f1": "F1-Score",
}


class MetricWinner(BaseModel):
    """Best entry for one metric."""

    model_config = ConfigDict(frozen=True)

    metric: str
    name: str
    index: int
    value: float


class ComparisonReport(BaseModel):
    """
    Side-by-side comparison of named snapshots.

    Attributes:
        names: Model/run names, aligned with ``snapshots``.
        snapshots: Scored evaluations being compared.
        winners: metric -> MetricWinner for accuracy, precision, recall, f1.
    """

    model_config = ConfigDict(frozen=True)

    names: Tuple[str, ...]
    snapshots: Tuple[EvaluationSnapshot, ...]
    winners: Dict[str, MetricWinner]

    def best(self, metric: str) -> str:
        """Name of the winning entry for ``metric``."""
        return self.winners[metric].name

    def to_dataframe(self) -> pd.DataFrame:
        rows = [
            {
                "Model": name,
                "Accuracy": snap.accuracy,
                "Precision": snap.precision,
                "Recall": snap.recall,
                "F1-Score": snap.f1,
                "Time (ms)": snap.training_time_ms,
            }
            for name, snap in zip(self.names, self.snapshots)
        ]
        return pd.DataFrame(rows)

    def render(self) -> str:
        """Text report: header, comparison table, then one winner line per metric."""
        table = self.to_dataframe().to_string(
            index=False, float_format=lambda v: f"{v:.4f}"
        )
        lines: List[str] = [
            LogStyle.HEAVY,
            "MODEL COMPARISON REPORT",
            LogStyle.HEAVY,
            "",
            table,
            "",
        ]
        for metric in GLOBAL_METRICS:
            winner = self.winners[metric]
            lines.append(f"Best {METRIC_LABELS[metric]}: {winner.name} ({winner.value:.4f})")
        return "\n".join(lines) + "\n"

    def save(self, path: Path) -> Path:
        """Writes the text report, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render())
            f.flush()
            os.fsync(f.fileno())

        logger.info(f"Comparison report saved → {path}")
        return path

    def save_excel(self, path: Path) -> Path:
        """
        Writes the comparison table to a formatted Excel sheet.

        Winning cells are highlighted in bold on each metric column.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        df = self.to_dataframe()

        wb = Workbook()
        ws = wb.active
        ws.title = "Model Comparison"

        header_fill = PatternFill(start_color="D7E4BC", end_color="D7E4BC", fill_type="solid")
        header_font = Font(bold=True)
        border = Border(
            left=Side(style="thin"),
            right=Side(style="thin"),
            top=Side(style="thin"),
            bottom=Side(style="thin"),
        )
        alignment_left = Alignment(horizontal="left", vertical="center", wrap_text=True)
        alignment_center = Alignment(horizontal="center", vertical="center")

        winning_cells = {
            (self.winners[metric].index + 2, list(df.columns).index(METRIC_LABELS[metric]) + 1)
            for metric in GLOBAL_METRICS
        }

        for r_idx, row in enumerate(dataframe_to_rows(df, index=False, header=True), 1):
            for c_idx, value in enumerate(row, 1):
                cell = ws.cell(row=r_idx, column=c_idx, value=value)
                cell.border = border

                if r_idx == 1:
                    cell.fill = header_fill
                    cell.font = header_font
                    cell.alignment = alignment_center
                    continue

                cell.alignment = alignment_left
                if isinstance(value, float):
                    cell.number_format = "0.0000"
                elif isinstance(value, int) and not isinstance(value, bool):
                    cell.number_format = "0"
                if (r_idx, c_idx) in winning_cells:
                    cell.font = header_font

        for column in ws.columns:
            max_length = 0
            column_letter = column[0].column_letter
            for cell in column:
                if cell.value is not None:
                    max_length = max(max_length, len(str(cell.value)))
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 50)

        wb.save(path)
        logger.info(f"Comparison workbook saved → {path}")
        return path


def compare(snapshots: Sequence[EvaluationSnapshot], names: Sequence[str]) -> ComparisonReport:
    """
    Compares snapshots and identifies the best entry per metric.

    Args:
        snapshots: Scored evaluations, one per model/run.
        names: Display names aligned with ``snapshots``.

    Raises:
        InvalidInputError: If the sequences differ in length or are empty.
    """
    if len(snapshots) != len(names):
        raise InvalidInputError(
            f"Number of snapshots ({len(snapshots)}) must match number of names ({len(names)})"
        )
    if not snapshots:
        raise InvalidInputError("At least one snapshot is required for a comparison")

    winners = {metric: _find_winner(snapshots, names, metric) for metric in GLOBAL_METRICS}
    return ComparisonReport(names=tuple(names), snapshots=tuple(snapshots), winners=winners)


def generate_model_comparison_report(
    snapshots: Sequence[EvaluationSnapshot], names: Sequence[str], output_path: Path
) -> ComparisonReport:
    """
    Compares snapshots and writes the text report to ``output_path``.

    Raises:
        InvalidInputError: If the sequences differ in length or are empty.
    """
    report = compare(snapshots, names)
    report.save(output_path)
    return report


def _find_winner(
    snapshots: Sequence[EvaluationSnapshot], names: Sequence[str], metric: str
) -> MetricWinner:
    """Arg-max of ``metric``; a later entry must be strictly better to win."""
    best_index = 0
    best_value = snapshots[0].metric(metric)
    for idx in range(1, len(snapshots)):
        value = snapshots[idx].metric(metric)
        if value > best_value:
            best_index, best_value = idx, value
    return MetricWinner(metric=metric, name=names[best_index], index=best_index, value=best_value)
