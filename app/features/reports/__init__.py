"""30-day health reports and their PDF rendering."""

from app.features.reports.models import DateRange, HealthReport, ReportFormat
from app.features.reports.renderer import PdfRenderer, markdown_to_html, render_fallback_pdf
from app.features.reports.service import assemble_report, generate_health_report, report_filename

__all__ = [
    "DateRange",
    "HealthReport",
    "ReportFormat",
    "PdfRenderer",
    "markdown_to_html",
    "render_fallback_pdf",
    "assemble_report",
    "generate_health_report",
    "report_filename",
]
