"""
Core data types for corpus-lint.

This module defines the fundamental data structures used throughout the linter:
- Article: One Markdown file with parsed front matter and body structure
- CodeBlock, Heading, Shortcode, Link: Structure found in an article body
- Redirect: A hosting redirect that shares the url namespace with articles
- Finding: A single rule violation
- LintReport: The aggregated result of a lint run
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from .frontmatter import parse_date

ERROR = "error"
WARNING = "warning"
SEVERITIES = (ERROR, WARNING)


@dataclass
class CodeBlock:
    """A fenced code block in an article body.

    Attributes:
        fence: The opening fence marker (e.g. "```" or "~~~~")
        language: Lowercased language tag, empty when the fence is untagged
        info: The full info string after the fence
        start_line: 1-based file line of the opening fence
        end_line: 1-based file line of the closing fence (or last line if unclosed)
        closed: Whether a matching closing fence was found
    """
    fence: str
    language: str
    info: str
    start_line: int
    end_line: int
    closed: bool = True


@dataclass
class Heading:
    """An ATX heading in an article body."""
    level: int
    text: str
    line: int


@dataclass
class Shortcode:
    """A site generator shortcode such as ``{{% info title="Note" %}}``.

    Attributes:
        name: Shortcode name without the closing slash
        raw_args: Argument string as written
        args: Keyword arguments (``title="..."``)
        positional: Positional arguments in order
        delimiter: "%" for markdown shortcodes, "<" for HTML shortcodes
        closing: Whether this is a closing tag (``{{% /info %}}``)
        self_closing: Whether this is a self-closing tag (``{{< x />}}``)
        line: 1-based file line
    """
    name: str
    raw_args: str
    args: dict[str, str] = field(default_factory=dict)
    positional: list[str] = field(default_factory=list)
    delimiter: str = "%"
    closing: bool = False
    self_closing: bool = False
    line: int = 0


@dataclass
class Link:
    """An inline Markdown link or image.

    Attributes:
        text: The link text (or alt text for images)
        target: The raw link destination
        line: 1-based file line
        kind: "internal", "external", "anchor" or "relative"
        image: Whether this is an image reference
    """
    text: str
    target: str
    line: int
    kind: str
    image: bool = False


@dataclass
class Article:
    """A Markdown article with front matter metadata and a parsed body.

    Attributes:
        path: Article path relative to the corpus root
        front_matter: Parsed metadata mapping
        front_matter_format: "yaml" or "toml"
        body: Markdown text after the front matter
        body_line: 1-based file line where the body starts
        field_lines: Top-level front matter key to 1-based file line
        code_blocks: Fenced code blocks in the body
        headings: ATX headings in the body
        shortcodes: Shortcodes in the body
        links: Inline links and images in the body
    """
    path: Path
    front_matter: dict[str, Any] = field(default_factory=dict)
    front_matter_format: str = "yaml"
    body: str = ""
    body_line: int = 1
    field_lines: dict[str, int] = field(default_factory=dict)
    code_blocks: list[CodeBlock] = field(default_factory=list)
    headings: list[Heading] = field(default_factory=list)
    shortcodes: list[Shortcode] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    @property
    def relpath(self) -> str:
        return self.path.as_posix()

    @property
    def title(self) -> str | None:
        return _as_text(self.front_matter.get("title"))

    @property
    def url(self) -> str | None:
        return _as_text(self.front_matter.get("url"))

    @property
    def summary(self) -> str | None:
        """Excerpt (Jekyll era) or description (Hugo era), whichever is set."""
        return _as_text(self.front_matter.get("excerpt")) or _as_text(
            self.front_matter.get("description")
        )

    @property
    def authors(self) -> list[str]:
        return _as_list(self.front_matter.get("authors"))

    @property
    def categories(self) -> list[str]:
        return _as_list(self.front_matter.get("categories"))

    @property
    def date(self) -> datetime | None:
        return _as_datetime(self.front_matter.get("date"))

    @property
    def modified(self) -> datetime | None:
        return _as_datetime(self.front_matter.get("modified"))

    @property
    def languages(self) -> set[str]:
        return {block.language for block in self.code_blocks if block.language}


@dataclass(frozen=True)
class Finding:
    """A single rule violation.

    Attributes:
        rule: Rule id (e.g. "duplicate-url")
        severity: "error" or "warning"
        path: Article path the finding applies to
        message: Human-readable description
        line: Optional 1-based file line
    """
    rule: str
    severity: str
    path: str
    message: str
    line: int | None = None

    def sort_key(self) -> tuple[str, int, str, str]:
        return (self.path, self.line or 0, self.rule, self.message)


@dataclass
class LintReport:
    """Aggregated result of a lint run.

    Attributes:
        root: Corpus root directory
        articles: Number of article files checked
        findings: All findings, sorted by path, line and rule
        strict: Whether warnings count as failures
        meta: Additional run metadata (config path, timings, link stats)
    """
    root: str
    articles: int = 0
    findings: list[Finding] = field(default_factory=list)
    strict: bool = False
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def error_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == ERROR)

    @property
    def warning_count(self) -> int:
        return sum(1 for f in self.findings if f.severity == WARNING)

    @property
    def ok(self) -> bool:
        if self.error_count:
            return False
        return not (self.strict and self.warning_count)

    def by_rule(self) -> dict[str, int]:
        return dict(sorted(Counter(f.rule for f in self.findings).items()))

    def by_path(self) -> dict[str, list[Finding]]:
        grouped: dict[str, list[Finding]] = {}
        for finding in self.findings:
            grouped.setdefault(finding.path, []).append(finding)
        return grouped


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    return str(value)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    return [str(value)]


def _as_datetime(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        return None


@dataclass
class Redirect:
    """A redirect rule from the hosting config (netlify.toml ``[[redirects]]``)."""
    source: str
    target: str
    status: int = 301
    line: int | None = None
