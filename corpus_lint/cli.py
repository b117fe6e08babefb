"""
Command-line interface for corpus-lint.

Uses Typer to provide a CLI with options for the major configuration
settings. Supports loading .env files for proxy settings.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
import typer
from rich.console import Console
from rich.table import Table

from .config import load_config, validate_config
from .core import RULES
from .errors import ConfigError
from .input.loader import load_article
from .output.renderer import render_report
from .runner import run_lint
from .utils.logging import setup_logging

DEFAULT_CONFIG_NAME = "corpus-lint.yaml"
EXIT_FAILED = 1
EXIT_USAGE = 2

app = typer.Typer(add_completion=False, help="Lint a Markdown blog corpus.")
console = Console()
err_console = Console(stderr=True)


@app.command()
def lint(
    root: Path = typer.Argument(
        Path("."), exists=True, file_okay=False, dir_okay=True, help="Corpus root directory."
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help=f"YAML config file (defaults to ROOT/{DEFAULT_CONFIG_NAME} when present).",
    ),
    fmt: str | None = typer.Option(
        None, "--format", "-f", help="Report format: console, json, markdown or html."
    ),
    output: Path | None = typer.Option(None, "--output", "-o", help="Report output file."),
    strict: bool | None = typer.Option(
        None, "--strict/--no-strict", help="Treat warnings as failures."
    ),
    check_links: bool | None = typer.Option(
        None, "--check-links/--no-check-links", help="Request external URLs over HTTP."
    ),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log file format: jsonl or plain."
    ),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Lint every article under ROOT.

    Checks front matter, code fences, shortcodes and headings per article,
    then url uniqueness, near-duplicate drafts, internal links and redirects
    across the corpus.

    Args:
        root: Corpus root directory
        config: Optional path to YAML config file
        fmt: Report format (console, json, markdown, html)
        output: Report file for non-console formats
        strict: Treat warnings as failures
        check_links: Enable/disable external link checks
        progress: Whether to show progress bar
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_format: Log file format (jsonl, plain)
        log_file: Enable/disable file logging
    """
    # Load proxy settings (HTTP_PROXY, HTTPS_PROXY) from .env
    load_dotenv()

    if config is None and (root / DEFAULT_CONFIG_NAME).is_file():
        config = root / DEFAULT_CONFIG_NAME

    try:
        cfg = load_config(str(config) if config else None)

        # Override with CLI options
        if fmt:
            cfg.output.format = fmt
        if output is not None:
            cfg.output.path = str(output)
        if strict is not None:
            cfg.output.strict = strict
        if check_links is not None:
            cfg.links.check_external = check_links
        if log_level:
            cfg.logging.level = log_level
        if log_format:
            cfg.logging.format = log_format
        if log_file is not None:
            cfg.logging.file = log_file
        validate_config(cfg)

        setup_logging(cfg.logging, console=err_console)
        report = run_lint(root, cfg, show_progress=progress, console=err_console)
    except (ConfigError, OSError) as exc:
        err_console.print(f"[bold red]Error:[/bold red] {exc}", highlight=False)
        raise typer.Exit(EXIT_USAGE)

    report_path = Path(cfg.output.path) if cfg.output.path else None
    render_report(report, cfg.output.format, report_path, console)
    if report_path is not None:
        err_console.print(f"Report written: {report_path}")

    if not report.ok:
        raise typer.Exit(EXIT_FAILED)


@app.command()
def show(
    article: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True),
):
    """Print the parsed structure of a single article."""
    result = load_article(Path(article.name), article.parent)
    if result.article is None:
        err_console.print(
            f"[bold red]Cannot parse {article}[/bold red] (line {result.line or '?'}): {result.error}",
            highlight=False,
        )
        raise typer.Exit(EXIT_FAILED)

    parsed = result.article
    meta = Table(title="Front matter", show_header=False)
    for key, value in parsed.front_matter.items():
        meta.add_row(key, repr(value))
    console.print(meta)

    console.print(f"Format: {parsed.front_matter_format}, body starts at line {parsed.body_line}")
    console.print(
        f"Authors: {', '.join(parsed.authors) or '-'}; "
        f"categories: {', '.join(parsed.categories) or '-'}",
        markup=False,
    )
    for heading in parsed.headings:
        console.print(f"  {heading.line:>5}  {'#' * heading.level} {heading.text}", markup=False)
    for block in parsed.code_blocks:
        state = "" if block.closed else " (unclosed)"
        console.print(
            f"  {block.start_line:>5}  code {block.language or '<none>'} "
            f"lines {block.start_line}-{block.end_line}{state}",
            markup=False,
        )
    for shortcode in parsed.shortcodes:
        slash = "/" if shortcode.closing else ""
        console.print(
            f"  {shortcode.line:>5}  shortcode {slash}{shortcode.name} {shortcode.raw_args}".rstrip(),
            markup=False,
        )
    for link in parsed.links:
        console.print(f"  {link.line:>5}  {link.kind} link {link.target}", markup=False)


@app.command()
def rules():
    """List every rule with its default severity."""
    table = Table(title="Rules")
    table.add_column("Rule", style="cyan")
    table.add_column("Severity")
    table.add_column("Scope")
    table.add_column("Description")
    for rule in sorted(RULES.values(), key=lambda r: r.id):
        table.add_row(rule.id, rule.severity, rule.scope, rule.description)
    console.print(table)


if __name__ == "__main__":
    app()
