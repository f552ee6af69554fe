"""Console reporting of selection results."""

from .report_printer import ReportPrinter

__all__ = ["ReportPrinter"]
