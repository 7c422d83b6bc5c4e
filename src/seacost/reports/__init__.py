"""Report export for engine results."""

from seacost.reports.export import AnalysisWorkbook, ReportExporter

__all__ = ["AnalysisWorkbook", "ReportExporter"]
