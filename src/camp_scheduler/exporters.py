"""Export functionality for schedule search results."""

import csv
import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Font
from openpyxl.utils import get_column_letter

from .constants import PERIODS
from .scheduler.driver import SearchResult

# Excel styling
FONT_HEADER = Font(bold=True)
FONT_OVERRIDE = Font(italic=True, color="C00000")
ALIGN_HEADER = Alignment(horizontal="center", vertical="center")
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 40


class BaseExporter(ABC):
    """Base class for exporters."""

    @abstractmethod
    def export(self, result: SearchResult, output_path: str | Path) -> None:
        """Export search result to file.

        Args:
            result: SearchResult to export
            output_path: Path to output file or directory
        """
        pass


def camper_rows(result: SearchResult) -> list[dict[str, Any]]:
    """Per-camper rows: class, rank and override flag for every period."""
    schedule = result.best
    by_name = {c.name: c for c in schedule.campers}
    rows = []
    for row in schedule.camper_rows():
        camper = by_name[row["name"]]
        records = {r.period: r for r in camper.enrollments}
        out: dict[str, Any] = {
            "name": row["name"],
            "age": row["age"],
            "swim_level": row["swim_level"],
        }
        for period in PERIODS:
            record = records.get(period)
            out[f"period_{period}"] = record.title if record else ""
            out[f"period_{period}_rank"] = record.rank if record else ""
            out[f"period_{period}_override"] = record.is_override if record else False
        out["final_choices"] = "; ".join(c or "-" for c in camper.final_choices)
        rows.append(out)
    return rows


def period_rows(result: SearchResult) -> list[dict[str, Any]]:
    """Per-instance rows with rosters."""
    rows = []
    for board in result.best.boards:
        for instance in board.instances:
            rows.append(
                {
                    "period": board.period,
                    "class": instance.title,
                    "enrollment": instance.enrollment,
                    "capacity": instance.max_capacity,
                    "override_campers": "; ".join(sorted(instance.override_campers)),
                    "roster": "; ".join(instance.roster),
                }
            )
    return rows


def summary_rows(result: SearchResult) -> list[dict[str, Any]]:
    """Metric/value rows describing the search."""
    schedule = result.best
    stats = result.statistics
    worst = schedule.worst_choice()
    return [
        {"metric": "score", "value": schedule.score},
        {"metric": "best_trial", "value": schedule.trial_index},
        {"metric": "base_seed", "value": stats.base_seed},
        {"metric": "trials_attempted", "value": stats.attempted},
        {"metric": "trials_completed", "value": stats.completed},
        {"metric": "trials_failed", "value": stats.failed},
        {"metric": "distinct_scores", "value": stats.distinct_scores},
        {"metric": "elapsed_seconds", "value": round(stats.elapsed_seconds, 3)},
        {"metric": "campers", "value": len(schedule.campers)},
        {"metric": "eliminated_classes", "value": len(schedule.eliminated)},
        {"metric": "override_enrollments", "value": len(schedule.override_enrollments())},
        {
            "metric": "worst_choice",
            "value": f"{worst[0]}: {worst[1]} (rank {worst[2]})" if worst else "",
        },
    ]


class JSONExporter(BaseExporter):
    """Export to JSON format."""

    def __init__(self, indent: int = 2, ensure_ascii: bool = False):
        """Initialize exporter.

        Args:
            indent: JSON indentation level
            ensure_ascii: If False, allows non-ASCII characters
        """
        self.indent = indent
        self.ensure_ascii = ensure_ascii

    def export(self, result: SearchResult, output_path: str | Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(
                result.to_dict(),
                f,
                indent=self.indent,
                ensure_ascii=self.ensure_ascii,
            )


class CSVExporter(BaseExporter):
    """Export to CSV format (multiple files)."""

    def export(self, result: SearchResult, output_path: str | Path) -> None:
        """Export search result to CSV files.

        Creates three files:
        - campers.csv: One row per camper
        - periods.csv: One row per period instance
        - summary.csv: Search summary

        Args:
            result: SearchResult to export
            output_path: Path to output directory
        """
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        self._write_csv(output_dir / "campers.csv", camper_rows(result))
        self._write_csv(output_dir / "periods.csv", period_rows(result))
        self._write_csv(output_dir / "summary.csv", summary_rows(result))

    def _write_csv(self, output_path: Path, rows: list[dict]) -> None:
        """Write rows to CSV file."""
        if not rows:
            return

        with open(output_path, "w", encoding="utf-8", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=rows[0].keys())
            writer.writeheader()
            writer.writerows(rows)


class ExcelExporter(BaseExporter):
    """Export to Excel format (single workbook with multiple sheets)."""

    def export(self, result: SearchResult, output_path: str | Path) -> None:
        """Export search result to Excel file.

        Creates workbook with sheets:
        - Campers: Per-camper schedule
        - Periods: Period instances and rosters
        - Summary: Search summary
        - Eliminated: Classes removed from the schedule

        Args:
            result: SearchResult to export
            output_path: Path to output Excel file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            self._write_sheet(writer, "Campers", camper_rows(result), ["name"])
            self._write_sheet(writer, "Periods", period_rows(result), ["period"])
            self._write_sheet(writer, "Summary", summary_rows(result), ["metric"])
            eliminated = [{"class": title} for title in sorted(result.best.eliminated)]
            self._write_sheet(writer, "Eliminated", eliminated, ["class"])
            self._mark_overrides(writer.sheets["Campers"])

    def _write_sheet(
        self,
        writer: pd.ExcelWriter,
        sheet_name: str,
        rows: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Write rows to a sheet and style its header row."""
        df = pd.DataFrame(rows) if rows else pd.DataFrame(columns=columns)
        df.to_excel(writer, sheet_name=sheet_name, index=False)

        ws = writer.sheets[sheet_name]
        for cell in ws[1]:
            cell.font = FONT_HEADER
            cell.alignment = ALIGN_HEADER
        ws.freeze_panes = "A2"

        for index, column in enumerate(df.columns, start=1):
            values = [str(column)] + [str(v) for v in df[column].tolist()]
            width = max(len(v) for v in values) + 2
            ws.column_dimensions[get_column_letter(index)].width = min(
                max(width, MIN_COLUMN_WIDTH), MAX_COLUMN_WIDTH
            )

    def _mark_overrides(self, ws) -> None:
        """Italicize period cells that hold override enrollments."""
        headers = {cell.value: cell.column for cell in ws[1]}
        for period in PERIODS:
            flag_col = headers.get(f"period_{period}_override")
            title_col = headers.get(f"period_{period}")
            if flag_col is None or title_col is None:
                continue
            for row in range(2, ws.max_row + 1):
                if ws.cell(row=row, column=flag_col).value is True:
                    ws.cell(row=row, column=title_col).font = FONT_OVERRIDE


def get_exporter(format_type: str) -> BaseExporter:
    """Get appropriate exporter for format type.

    Args:
        format_type: Export format ('json', 'csv', 'excel')

    Returns:
        Exporter instance

    Raises:
        ValueError: If format type is not supported
    """
    exporters = {
        "json": JSONExporter,
        "csv": CSVExporter,
        "excel": ExcelExporter,
    }

    if format_type not in exporters:
        raise ValueError(
            f"Unsupported format: {format_type}. Supported: {', '.join(exporters.keys())}"
        )

    return exporters[format_type]()
