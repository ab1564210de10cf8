"""Privacy report assembly and rendering."""

from thalsynth.reporting.report import (
    RECOMMENDATIONS,
    PrivacyReport,
    ReportBuilder,
    render_markdown,
)

__all__ = ["RECOMMENDATIONS", "PrivacyReport", "ReportBuilder", "render_markdown"]
