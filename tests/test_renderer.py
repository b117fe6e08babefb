import json
from pathlib import Path

from rich.console import Console

from corpus_lint.core.types import Finding, LintReport
from corpus_lint.output.renderer import render_report, to_html, to_json, to_markdown


def _sample_report(strict: bool = False) -> LintReport:
    return LintReport(
        root="site",
        articles=3,
        findings=[
            Finding(
                rule="url-format",
                severity="warning",
                path="content/blog/2024/2024-01-18-merge-sort-kotlin.md",
                message="url 'merge sort in kotlin' is not a slug; it will be published as 'merge-sort-in-kotlin'",
                line=7,
            ),
            Finding(
                rule="shortcode-balance",
                severity="error",
                path="content/blog/2023/2023-05-01-docker.md",
                message="Shortcode 'info' is never closed",
                line=12,
            ),
            Finding(
                rule="near-duplicate",
                severity="warning",
                path="content/blog/2023/2023-05-01-docker.md",
                message="Probable near-duplicate of <b>draft</b>.md (title 95% similar)",
            ),
        ],
        strict=strict,
    )


def test_to_json_contains_counts_and_findings() -> None:
    data = json.loads(to_json(_sample_report()))

    assert data["articles"] == 3
    assert data["errors"] == 1
    assert data["warnings"] == 2
    assert data["ok"] is False
    assert data["by_rule"] == {"near-duplicate": 1, "shortcode-balance": 1, "url-format": 1}
    assert data["findings"][0]["line"] == 7


def test_to_markdown_groups_findings_by_file() -> None:
    text = to_markdown(_sample_report())

    assert text.startswith("# Corpus lint report")
    assert "| url-format | 1 |" in text
    assert "## content/blog/2023/2023-05-01-docker.md" in text
    assert "- **error** `shortcode-balance` (line 12): Shortcode 'info' is never closed" in text
    assert "- warning `near-duplicate` (file): Probable near-duplicate" in text


def test_to_html_escapes_messages() -> None:
    html = to_html(_sample_report())

    assert "<title>Corpus lint report</title>" in html
    assert "&lt;b&gt;draft&lt;/b&gt;" in html
    assert "<b>draft</b>" not in html
    assert 'href="#content-blog-2024-2024-01-18-merge-sort-kotlin-md"' in html


def test_render_report_writes_file(tmp_path: Path) -> None:
    output_path = tmp_path / "reports" / "lint.md"

    render_report(_sample_report(), "markdown", output_path, Console(record=True))

    assert output_path.read_text(encoding="utf-8").startswith("# Corpus lint report")


def test_render_console_prints_summary() -> None:
    console = Console(record=True, width=200)

    render_report(_sample_report(), "console", None, console)
    text = console.export_text()

    assert "content/blog/2023/2023-05-01-docker.md" in text
    assert "Shortcode 'info' is never closed" in text
    assert "3 articles checked: 1 errors, 2 warnings, failed" in text


def test_strict_report_fails_on_warnings_only() -> None:
    report = LintReport(
        root="site",
        articles=1,
        findings=[Finding(rule="url-format", severity="warning", path="a.md", message="m", line=1)],
    )

    assert report.ok
    report.strict = True
    assert not report.ok
