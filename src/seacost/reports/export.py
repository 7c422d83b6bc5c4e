"""
Export of engine results to JSON, CSV and Excel.

The exporter only serialises result records; it never recomputes.
Rounding to display precision happens here and nowhere upstream.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import orjson
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from seacost.costing.buildup import BatchCostSummary
from seacost.exceptions import ExportError
from seacost.logging import get_logger
from seacost.types import (
    FinancialRatio,
    Interpretation,
    ScenarioOutcome,
    SensitivityPoint,
    generate_id,
    round_display,
    utc_now,
)
from seacost.valuation.dcf import DCFResult
from seacost.valuation.scenarios import ScenarioSummary
from seacost.valuation.sensitivity import TornadoBar

logger = get_logger(__name__)

SHEET_TITLES = {
    "batch": "Batch Cost",
    "dcf": "DCF Model",
    "scenarios": "Scenarios",
    "ratios": "Ratios",
    "sensitivity": "Sensitivity",
}

INTERPRETATION_FILLS = {
    Interpretation.EXCELLENT: "C6EFCE",
    Interpretation.GOOD: "DDEBF7",
    Interpretation.AVERAGE: "FFEB9C",
    Interpretation.POOR: "FFC7CE",
}


@dataclass
class AnalysisWorkbook:
    """Container for everything one export run writes."""

    title: str
    batch_summary: BatchCostSummary | None = None
    dcf_result: DCFResult | None = None
    scenarios: list[ScenarioOutcome] = field(default_factory=list)
    scenario_summary: ScenarioSummary | None = None
    ratios: list[FinancialRatio] = field(default_factory=list)
    sensitivity: list[SensitivityPoint] = field(default_factory=list)
    tornado: list[TornadoBar] = field(default_factory=list)
    report_id: str = field(default_factory=lambda: generate_id("rpt"))
    generated_at: datetime = field(default_factory=utc_now)

    @property
    def slug(self) -> str:
        """File-name-safe version of the title."""
        cleaned = "".join(c if c.isalnum() else "_" for c in self.title.strip().lower())
        return cleaned.strip("_") or "analysis"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON export."""
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at.isoformat(),
            "title": self.title,
            "batch": self.batch_summary.to_dict() if self.batch_summary else None,
            "dcf": self.dcf_result.to_dict() if self.dcf_result else None,
            "scenarios": [s.to_dict() for s in self.scenarios],
            "scenario_summary": self.scenario_summary.to_dict() if self.scenario_summary else None,
            "ratios": [r.to_dict() for r in self.ratios],
            "sensitivity": [p.to_dict() for p in self.sensitivity],
            "tornado": [b.to_dict() for b in self.tornado],
        }


class ReportExporter:
    """Exports analysis results to various formats.

    Supports:
    - JSON export of the full workbook
    - CSV export, one file per section
    - Excel export, one sheet per section
    """

    def export_json(self, workbook: AnalysisWorkbook, output_path: str | Path) -> Path:
        """Export the workbook to JSON.

        Args:
            workbook: Analysis workbook data.
            output_path: Output file path.

        Returns:
            Path to created file.
        """
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(orjson.dumps(workbook.to_dict(), option=orjson.OPT_INDENT_2))
        except OSError as e:
            raise ExportError(
                f"Failed to write JSON export: {e}",
                context={"path": str(output_path), "format": "json"},
            ) from e

        logger.info("JSON export written", path=str(output_path), report_id=workbook.report_id)
        return output_path

    def export_csv(self, workbook: AnalysisWorkbook, output_dir: str | Path) -> list[Path]:
        """Export each populated section to its own CSV file.

        Args:
            workbook: Analysis workbook data.
            output_dir: Output directory.

        Returns:
            List of created file paths.
        """
        output_dir = Path(output_dir)
        sections = self._sections(workbook)
        created_files: list[Path] = []

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            for name, rows in sections.items():
                path = output_dir / f"{workbook.slug}_{name}.csv"
                with open(path, "w", newline="", encoding="utf-8") as f:
                    csv.writer(f).writerows(rows)
                created_files.append(path)
        except OSError as e:
            raise ExportError(
                f"Failed to write CSV export: {e}",
                context={"path": str(output_dir), "format": "csv"},
            ) from e

        logger.info("CSV export written", files=len(created_files), report_id=workbook.report_id)
        return created_files

    def export_excel(self, workbook: AnalysisWorkbook, output_path: str | Path) -> Path:
        """Export the workbook to Excel with one sheet per section.

        Args:
            workbook: Analysis workbook data.
            output_path: Output file path.

        Returns:
            Path to created file.
        """
        output_path = Path(output_path)

        wb = Workbook()
        summary_ws = wb.active
        summary_ws.title = "Summary"
        self._create_summary_sheet(summary_ws, workbook)

        for name, rows in self._sections(workbook).items():
            ws = wb.create_sheet(SHEET_TITLES[name])
            self._write_rows(ws, rows)

        if workbook.ratios:
            self._color_ratio_sheet(wb["Ratios"], workbook.ratios)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            wb.save(output_path)
        except OSError as e:
            raise ExportError(
                f"Failed to write Excel export: {e}",
                context={"path": str(output_path), "format": "xlsx"},
            ) from e

        logger.info("Excel export written", path=str(output_path), report_id=workbook.report_id)
        return output_path

    def _sections(self, workbook: AnalysisWorkbook) -> dict[str, list[list[Any]]]:
        """Tabular rows per populated section, header row first."""
        sections: dict[str, list[list[Any]]] = {}

        if workbook.batch_summary:
            b = workbook.batch_summary
            y = b.yield_result
            p = b.packaging
            pr = b.pricing
            sections["batch"] = [
                ["Metric", "Value"],
                ["Raw Material Cost", round_display(b.raw_material_cost, 2)],
                ["Labor Cost", round_display(b.labor_cost, 2)],
                ["Packaging Cost", round_display(b.packaging_cost, 2)],
                ["Transport Cost", round_display(b.transport_cost, 2)],
                ["Other Costs", round_display(b.additional_costs, 2)],
                ["Total Cost", round_display(b.total_cost, 2)],
                ["Cost per kg", round_display(b.cost_per_kg, 2)],
                ["Final Weight (kg)", round_display(y.final_weight, 2)],
                ["Loss (kg)", round_display(y.loss, 2)],
                ["Loss %", round_display(y.loss_pct, 1)],
                ["Yield %", round_display(y.yield_pct, 1)],
                ["Bags", p.bags],
                ["Gelatin (kg)", round_display(p.gelatin_kg, 3)],
                ["Boxes", p.boxes],
                ["Selling Price per kg", round_display(pr.selling_price_per_kg, 2)],
                ["Break-even per kg", round_display(pr.break_even_price, 2)],
                ["Profit per kg", round_display(pr.profit_per_kg, 2)],
                ["Margin %", round_display(pr.margin_at_current_price, 1)],
                ["Recommended Price per kg", round_display(pr.recommended_selling_price, 2)],
                ["Market Position", pr.market_position.value],
            ]
            if b.processing is not None:
                sections["batch"].append(
                    ["Estimated Weight (kg)", round_display(b.processing.final_weight, 2)]
                )

        if workbook.dcf_result:
            d = workbook.dcf_result
            rows: list[list[Any]] = [[
                "Period", "Revenue", "Operating Expenses", "CapEx", "Working Capital",
                "FCF", "Discount Rate %", "Present Value", "Cumulative FCF",
            ]]
            for p in d.projections:
                rows.append([
                    p.period,
                    round_display(p.revenue, 2),
                    round_display(p.operating_expenses, 2),
                    round_display(p.capital_expenditure, 2),
                    round_display(p.working_capital, 2),
                    round_display(p.free_cash_flow, 2),
                    p.discount_rate,
                    round_display(p.present_value, 2),
                    round_display(p.cumulative_cash_flow, 2),
                ])
            rows.append([])
            rows.append(["Total Present Value", round_display(d.total_present_value, 2)])
            rows.append(["Terminal Value", round_display(d.terminal_value, 2)])
            rows.append(["Enterprise Value", round_display(d.enterprise_value, 2)])
            sections["dcf"] = rows

        if workbook.scenarios:
            rows = [["Scenario", "Probability %", "Revenue", "Costs", "Net Income", "ROI %", "Risk"]]
            for s in workbook.scenarios:
                rows.append([
                    s.label, s.probability, round_display(s.revenue, 2), round_display(s.costs, 2),
                    round_display(s.net_income, 2), round_display(s.roi, 1), s.risk_level.value,
                ])
            if workbook.scenario_summary:
                ss = workbook.scenario_summary
                rows.append([])
                rows.append(["Weighted Revenue", round_display(ss.weighted_revenue, 2)])
                rows.append(["Weighted Net Income", round_display(ss.weighted_net_income, 2)])
                rows.append(["Weighted ROI %", round_display(ss.weighted_roi, 1)])
                rows.append(["Risk Index", round_display(ss.risk_index, 2)])
            sections["scenarios"] = rows

        if workbook.ratios:
            rows = [["Ratio", "Category", "Value", "Benchmark", "Interpretation", "Trend"]]
            for r in workbook.ratios:
                rows.append([
                    r.name, r.category, round_display(r.value, 2), r.benchmark,
                    r.interpretation.value, r.trend.value,
                ])
            sections["ratios"] = rows

        if workbook.sensitivity or workbook.tornado:
            rows = [["Parameter", "Change %", "Metric", "Base", "Perturbed", "Delta"]]
            for pt in workbook.sensitivity:
                rows.append([
                    pt.parameter_name, pt.perturbation_pct, pt.metric,
                    round_display(pt.base_value, 2), round_display(pt.perturbed_value, 2), round_display(pt.output_delta, 2),
                ])
            if workbook.tornado:
                rows.append([])
                rows.append(["Parameter", "Low Delta", "High Delta", "Swing"])
                for bar in workbook.tornado:
                    rows.append([
                        bar.parameter_name, round_display(bar.low_delta, 2),
                        round_display(bar.high_delta, 2), round_display(bar.swing, 2),
                    ])
            sections["sensitivity"] = rows

        return sections

    def _create_summary_sheet(self, ws: Worksheet, workbook: AnalysisWorkbook) -> None:
        ws["A1"] = workbook.title
        ws["A1"].font = Font(bold=True, size=14)

        ws["A3"] = "Report ID:"
        ws["B3"] = workbook.report_id
        ws["A4"] = "Generated:"
        ws["B4"] = workbook.generated_at.strftime("%Y-%m-%d %H:%M UTC")

        row = 6
        if workbook.batch_summary:
            ws[f"A{row}"] = "Batch Total Cost:"
            ws[f"B{row}"] = round_display(workbook.batch_summary.total_cost, 2)
            ws[f"B{row}"].font = Font(bold=True)
            row += 1
        if workbook.dcf_result:
            ws[f"A{row}"] = "Enterprise Value:"
            ws[f"B{row}"] = round_display(workbook.dcf_result.enterprise_value, 2)
            ws[f"B{row}"].font = Font(bold=True)
            row += 1
        if workbook.scenario_summary:
            ws[f"A{row}"] = "Weighted Net Income:"
            ws[f"B{row}"] = round_display(workbook.scenario_summary.weighted_net_income, 2)

        ws.column_dimensions["A"].width = 25
        ws.column_dimensions["B"].width = 45

    def _write_rows(self, ws: Worksheet, rows: list[list[Any]]) -> None:
        for row in rows:
            ws.append(row)
        for cell in ws[1]:
            cell.font = Font(bold=True)
        ws.column_dimensions["A"].width = 25

    def _color_ratio_sheet(self, ws: Worksheet, ratios: list[FinancialRatio]) -> None:
        # Data rows start below the header; column E holds the interpretation
        for i, ratio in enumerate(ratios, start=2):
            color = INTERPRETATION_FILLS[ratio.interpretation]
            ws[f"E{i}"].fill = PatternFill(start_color=color, end_color=color, fill_type="solid")
