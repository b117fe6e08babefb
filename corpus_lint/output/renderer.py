"""
Report rendering for console, JSON, Markdown and HTML output.

This module renders a LintReport using Rich for the terminal, Jinja2
templates for HTML, and custom formatting for JSON and Markdown.
"""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.slugs import slugify
from ..core.types import ERROR, LintReport

FORMATS = ("console", "json", "markdown", "html")

_SEVERITY_STYLES = {"error": "bold red", "warning": "yellow"}


def render_report(report: LintReport, fmt: str, output_path: Path | None, console: Console) -> None:
    """Render a report in the requested format.

    Console output always goes to the console. File formats are written to
    output_path, or printed to the console when no path is given.
    """
    if fmt == "console":
        render_console(report, console)
        return
    if fmt not in FORMATS:
        raise ValueError(f"Unknown report format '{fmt}'")

    renderers = {"json": to_json, "markdown": to_markdown, "html": to_html}
    text = renderers[fmt](report)
    if output_path is None:
        console.print(text, markup=False, highlight=False, soft_wrap=True)
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")


def render_console(report: LintReport, console: Console) -> None:
    """Print findings grouped by file as Rich tables, then a summary line."""
    for path, findings in report.by_path().items():
        table = Table(title=escape(path), title_justify="left", show_header=True, expand=False)
        table.add_column("Line", justify="right", style="dim")
        table.add_column("Severity")
        table.add_column("Rule", style="cyan")
        table.add_column("Message")
        for finding in findings:
            style = _SEVERITY_STYLES.get(finding.severity, "")
            table.add_row(
                str(finding.line) if finding.line else "-",
                f"[{style}]{finding.severity}[/{style}]" if style else finding.severity,
                finding.rule,
                escape(finding.message),
            )
        console.print(table)

    console.print(_summary_line(report, markup=True))


def _summary_line(report: LintReport, markup: bool = False) -> str:
    status = "passed" if report.ok else "failed"
    if markup:
        status = f"[green]{status}[/green]" if report.ok else f"[bold red]{status}[/bold red]"
    return (
        f"{report.articles} articles checked: {report.error_count} errors, "
        f"{report.warning_count} warnings, {status}"
    )


def report_as_dict(report: LintReport) -> dict[str, Any]:
    return {
        "root": report.root,
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "articles": report.articles,
        "ok": report.ok,
        "strict": report.strict,
        "errors": report.error_count,
        "warnings": report.warning_count,
        "by_rule": report.by_rule(),
        "findings": [
            {
                "path": f.path,
                "line": f.line,
                "rule": f.rule,
                "severity": f.severity,
                "message": f.message,
            }
            for f in report.findings
        ],
        "meta": report.meta,
    }


def to_json(report: LintReport) -> str:
    return json.dumps(report_as_dict(report), indent=2, ensure_ascii=False, default=str)


def to_markdown(report: LintReport) -> str:
    lines = [
        "# Corpus lint report",
        "",
        f"- Root: `{report.root}`",
        f"- Result: {_summary_line(report)}",
        "",
    ]
    if report.findings:
        lines.extend(["## Findings by rule", "", "| Rule | Count |", "| --- | ---: |"])
        for rule, count in report.by_rule().items():
            lines.append(f"| {rule} | {count} |")
        lines.append("")

    for path, findings in report.by_path().items():
        lines.append(f"## {path}")
        lines.append("")
        for finding in findings:
            location = f"line {finding.line}" if finding.line else "file"
            marker = "**error**" if finding.severity == ERROR else "warning"
            lines.append(f"- {marker} `{finding.rule}` ({location}): {finding.message}")
        lines.append("")

    return "\n".join(lines)


def to_html(report: LintReport) -> str:
    env = Environment(
        loader=FileSystemLoader(str(Path(__file__).parent / "templates")),
        autoescape=select_autoescape(["html"]),
    )
    template = env.get_template("report.html")

    used_ids: dict[str, int] = {}
    files = []
    for path, findings in report.by_path().items():
        base_id = slugify(path.replace("/", "-").replace(".", "-")) or "file"
        count = used_ids.get(base_id, 0)
        used_ids[base_id] = count + 1
        file_id = f"{base_id}-{count + 1}" if count else base_id
        files.append(
            {
                "id": file_id,
                "path": path,
                "findings": findings,
                "errors": sum(1 for f in findings if f.severity == ERROR),
                "count": len(findings),
            }
        )

    return template.render(
        title="Corpus lint report",
        generated_at=datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        report=report,
        summary=_summary_line(report),
        by_rule=report.by_rule(),
        files=files,
    )
