"""
Output generation for lint reports.

This package renders a LintReport for the terminal or as a JSON,
Markdown or HTML file.
"""

from .renderer import FORMATS, render_console, render_report, report_as_dict, to_html, to_json, to_markdown

__all__ = [
    "FORMATS",
    "render_console",
    "render_report",
    "report_as_dict",
    "to_html",
    "to_json",
    "to_markdown",
]
