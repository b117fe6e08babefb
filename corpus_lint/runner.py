"""
Main lint orchestration.

This module coordinates the entire workflow:
1. Discover article files under the corpus root
2. Load each file (front matter plus body structure)
3. Run per-article rules
4. Run corpus rules (duplicate slugs, near-duplicates, links, redirects)
5. Optionally check external links over HTTP
6. Aggregate findings into a LintReport

Supports both progress bar and quiet modes.
"""

from __future__ import annotations

import logging
from pathlib import Path
import time

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from .config import AppConfig
from .core import RULES, CorpusContext, is_enabled, make_finding
from .core.types import Article, Finding, LintReport
from .fetch.links import check_external_links
from .input.loader import LoadResult, discover_articles, load_article, load_redirects
from .utils.logging import log_event

logger = logging.getLogger("corpus_lint.runner")


def run_lint(
    root: Path,
    cfg: AppConfig,
    show_progress: bool = False,
    console: Console | None = None,
) -> LintReport:
    """Run the complete lint over a corpus.

    Args:
        root: Corpus root directory (the directory holding ``content/``)
        cfg: Application configuration
        show_progress: Whether to display a progress bar while loading
        console: Rich console for progress output (creates default if None)

    Returns:
        LintReport with every finding, sorted by path, line and rule
    """
    started = time.monotonic()
    root = Path(root)
    paths = discover_articles(root, cfg)
    log_event(logger, "Lint start", event="lint_start", root=str(root), files=len(paths))

    results = _load_all(paths, root, show_progress, console)
    articles = [result.article for result in results if result.article is not None]

    findings: list[Finding] = []
    findings.extend(_load_findings(results, cfg))
    findings.extend(run_article_rules(articles, cfg))

    redirects = []
    redirects_path = cfg.content.redirects_file
    if redirects_path:
        redirects = load_redirects(root / redirects_path)
    context = CorpusContext.build(articles, redirects, redirects_path or "netlify.toml", root=root)
    findings.extend(run_corpus_rules(articles, cfg, context))
    log_event(
        logger,
        "Rules done",
        event="rules_done",
        articles=len(articles),
        redirects=len(redirects),
        findings=len(findings),
    )

    link_stats: dict[str, int] = {}
    if cfg.links.check_external and is_enabled("external-link", cfg):
        link_findings = _check_links(articles, cfg)
        link_stats = {"failures": len(link_findings)}
        findings.extend(link_findings)
        log_event(logger, "Links checked", event="links_checked", failures=len(link_findings))

    report = LintReport(
        root=str(root),
        articles=len(paths),
        findings=sorted(set(findings), key=Finding.sort_key),
        strict=cfg.output.strict,
        meta={
            "duration_seconds": round(time.monotonic() - started, 3),
            "redirects": len(redirects),
            "links": link_stats,
        },
    )
    log_event(
        logger,
        "Lint done",
        event="lint_done",
        errors=report.error_count,
        warnings=report.warning_count,
        ok=report.ok,
    )
    return report


def _load_all(
    paths: list[Path], root: Path, show_progress: bool, console: Console | None
) -> list[LoadResult]:
    if not show_progress or not paths:
        return [_load_one(path, root) for path in paths]

    results: list[LoadResult] = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console or Console(stderr=True),
        transient=True,
    ) as progress:
        task = progress.add_task("Loading articles", total=len(paths))
        for path in paths:
            results.append(_load_one(path, root))
            progress.advance(task)
    return results


def _load_one(path: Path, root: Path) -> LoadResult:
    result = load_article(path, root)
    if result.article is None:
        logger.debug("Failed to load %s: %s", path.as_posix(), result.error)
    else:
        logger.debug("Loaded %s", path.as_posix())
    return result


def _load_findings(results: list[LoadResult], cfg: AppConfig) -> list[Finding]:
    if not is_enabled("front-matter", cfg):
        return []
    return [
        make_finding("front-matter", result.path.as_posix(), result.error or "", result.line, cfg)
        for result in results
        if result.article is None
    ]


def run_article_rules(articles: list[Article], cfg: AppConfig) -> list[Finding]:
    """Run every enabled article rule against every article."""
    findings: list[Finding] = []
    rules = [rule for rule in RULES.values() if rule.scope == "article" and is_enabled(rule.id, cfg)]
    for article in articles:
        for rule in rules:
            for message, line in rule.check(article, cfg):
                findings.append(make_finding(rule.id, article.relpath, message, line, cfg))
    return findings


def run_corpus_rules(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> list[Finding]:
    """Run every enabled corpus rule over all articles together."""
    findings: list[Finding] = []
    for rule in RULES.values():
        if rule.scope != "corpus" or not is_enabled(rule.id, cfg):
            continue
        for path, message, line in rule.check(articles, cfg, context):
            findings.append(make_finding(rule.id, path, message, line, cfg))
    return findings


def _check_links(articles: list[Article], cfg: AppConfig) -> list[Finding]:
    return [
        make_finding("external-link", article.relpath, message, line, cfg)
        for article, line, message in check_external_links(articles, cfg.links)
    ]
