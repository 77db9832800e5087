"""Report generation package."""

from pgledger.reports.report import WeeklyReport, build_report, render_html_report

__all__ = ["WeeklyReport", "build_report", "render_html_report"]
