"""
Per-article lint rules.

Each rule receives one Article and the AppConfig and yields ``(message, line)``
issues. The runner turns issues into Findings with the rule's effective
severity, so rules never decide severity themselves.
"""

from __future__ import annotations

from datetime import datetime
import re
from typing import Any, Iterator
from urllib.parse import unquote

from ..config import AppConfig
from .frontmatter import parse_date
from .registry import Issue, article_rule
from .slugs import anchorize, is_slug, slugify
from .types import ERROR, WARNING, Article


GITHUB_URL_RE = re.compile(r"^https?://(www\.)?github\.com/[\w.-]+(/.*)?$")
CALLOUTS = {"info", "warning", "danger", "tip", "note"}
HEADING_ID_RE = re.compile(r"\s*\{#(?P<id>[\w-]+)\}\s*$")
HTML_ID_RE = re.compile(r"""\b(?:id|name)=["'](?P<id>[^"']+)["']""")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _line(article: Article, key: str) -> int | None:
    return article.field_lines.get(key)


@article_rule("required-field", ERROR, "Required front matter fields are present and non-empty")
def check_required_fields(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    for field_spec in cfg.front_matter.required:
        yield from _missing(article, field_spec, "Missing required front matter field")


@article_rule("recommended-field", WARNING, "Recommended front matter fields are present")
def check_recommended_fields(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    for field_spec in cfg.front_matter.recommended:
        yield from _missing(article, field_spec, "Missing recommended front matter field")


def _missing(article: Article, field_spec: str, prefix: str) -> Iterator[Issue]:
    alternatives = [name.strip() for name in field_spec.split("|") if name.strip()]
    if any(not _is_empty(article.front_matter.get(name)) for name in alternatives):
        return
    present = [name for name in alternatives if name in article.front_matter]
    label = " or ".join(f"'{name}'" for name in alternatives)
    if present:
        yield f"Front matter field {label} is empty", _line(article, present[0])
    else:
        yield f"{prefix} {label}", 1


@article_rule("field-type", ERROR, "Taxonomy fields are lists of strings; text fields are strings")
def check_field_types(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    fm = article.front_matter
    for name in cfg.front_matter.list_fields:
        if name not in fm or fm[name] is None:
            continue
        value = fm[name]
        if not isinstance(value, list):
            yield (
                f"Field '{name}' must be a list, got {type(value).__name__}",
                _line(article, name),
            )
            continue
        for item in value:
            if not isinstance(item, str) or not item.strip():
                yield f"Field '{name}' contains a non-string or empty item: {item!r}", _line(
                    article, name
                )
    for name in cfg.front_matter.string_fields:
        if name not in fm or fm[name] is None:
            continue
        if not isinstance(fm[name], str):
            yield (
                f"Field '{name}' must be a string, got {type(fm[name]).__name__}",
                _line(article, name),
            )


@article_rule("date-format", ERROR, "'date' and 'modified' parse as dates")
def check_date_format(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    for name in ("date", "modified"):
        value = article.front_matter.get(name)
        if value is None:
            continue
        try:
            parse_date(value)
        except ValueError:
            yield f"Field '{name}' is not a valid date: {value!r}", _line(article, name)


@article_rule("date-order", WARNING, "'modified' is not earlier than 'date'")
def check_date_order(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    published, modified = article.date, article.modified
    if published is None or modified is None:
        return
    modified, published = _comparable(modified, published)
    if modified < published:
        yield (
            f"'modified' ({modified:%Y-%m-%d}) is earlier than 'date' ({published:%Y-%m-%d})",
            _line(article, "modified"),
        )


def _comparable(a: datetime, b: datetime) -> tuple[datetime, datetime]:
    # Naive and aware values cannot be compared; fall back to wall-clock times
    if (a.tzinfo is None) != (b.tzinfo is None):
        return a.replace(tzinfo=None), b.replace(tzinfo=None)
    return a, b


@article_rule("url-format", WARNING, "'url' is already a lowercase hyphenated slug")
def check_url_format(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    url = article.front_matter.get("url")
    if not isinstance(url, str) or not url.strip():
        return
    value = url.strip().strip("/")
    if not is_slug(value):
        yield (
            f"url '{url}' is not a slug; it will be published as '{slugify(url)}'",
            _line(article, "url"),
        )


@article_rule("path-convention", WARNING, "File path follows content/blog/<year>/<date>-<slug>.md")
def check_path_convention(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    match = re.match(cfg.content.path_pattern, article.relpath)
    if not match:
        yield f"Path '{article.relpath}' does not follow the content naming convention", None
        return

    groups = {key: value for key, value in match.groupdict().items() if value}
    file_date = groups.get("date") or groups.get("jdate")
    year = groups.get("year")
    if year and file_date and not file_date.startswith(year):
        yield f"File date {file_date} is not in year directory {year}", None

    published = article.date
    if file_date and published is not None:
        published_day = published.strftime("%Y-%m-%d")
        if published_day != file_date:
            yield (
                f"File name date {file_date} does not match front matter date {published_day}",
                _line(article, "date"),
            )

    file_slug = groups.get("slug") or groups.get("jslug")
    if cfg.content.match_slug and file_slug and article.url:
        url_slug = slugify(article.url)
        if url_slug and url_slug != file_slug:
            yield (
                f"File name slug '{file_slug}' does not match url slug '{url_slug}'",
                _line(article, "url"),
            )


@article_rule("code-language", WARNING, "Fenced code blocks carry a known language tag")
def check_code_language(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    known = {lang.lower() for lang in cfg.code_blocks.languages}
    for block in article.code_blocks:
        if not block.language:
            if cfg.code_blocks.require_language:
                yield "Code block has no language tag", block.start_line
            continue
        if block.language not in known:
            yield f"Unknown code block language '{block.language}'", block.start_line


@article_rule("code-fence", ERROR, "Fenced code blocks are closed")
def check_code_fence(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    for block in article.code_blocks:
        if not block.closed:
            yield f"Code block opened with {block.fence} is never closed", block.start_line


@article_rule("shortcode-known", WARNING, "Shortcodes are defined by the site theme")
def check_shortcode_known(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    known = set(cfg.shortcodes.known)
    for shortcode in article.shortcodes:
        if shortcode.closing:
            continue
        if shortcode.name not in known:
            yield f"Unknown shortcode '{shortcode.name}'", shortcode.line


@article_rule("shortcode-balance", ERROR, "Paired shortcodes are opened and closed in order")
def check_shortcode_balance(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    # Any shortcode closed somewhere in the article is paired in that article
    paired = set(cfg.shortcodes.paired)
    paired.update(sc.name for sc in article.shortcodes if sc.closing)

    stack = []
    for shortcode in article.shortcodes:
        if shortcode.name not in paired or shortcode.self_closing:
            continue
        if not shortcode.closing:
            stack.append(shortcode)
            continue
        if not stack:
            yield f"Closing shortcode '/{shortcode.name}' has no matching opening", shortcode.line
            continue
        top = stack[-1]
        if top.name != shortcode.name:
            yield (
                f"Closing shortcode '/{shortcode.name}' does not match open "
                f"'{top.name}' from line {top.line}",
                shortcode.line,
            )
            continue
        stack.pop()

    for shortcode in stack:
        yield f"Shortcode '{shortcode.name}' is never closed", shortcode.line


@article_rule("shortcode-args", ERROR, "Shortcode arguments are well formed")
def check_shortcode_args(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    for shortcode in article.shortcodes:
        if shortcode.closing:
            continue
        if shortcode.raw_args.count('"') % 2:
            yield f"Shortcode '{shortcode.name}' has unbalanced quotes", shortcode.line
            continue
        if shortcode.name == "github":
            urls = shortcode.positional
            if len(urls) != 1:
                yield (
                    f"Shortcode 'github' expects one repository URL, got {len(urls)}",
                    shortcode.line,
                )
            elif not GITHUB_URL_RE.match(urls[0]):
                yield f"Shortcode 'github' URL is not a GitHub URL: {urls[0]}", shortcode.line
        elif shortcode.name in CALLOUTS:
            if "title" in shortcode.args and not shortcode.args["title"].strip():
                yield f"Shortcode '{shortcode.name}' has an empty title", shortcode.line


@article_rule("heading-structure", WARNING, "Body has no H1 and heading levels do not skip")
def check_heading_structure(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    previous = 1
    for heading in article.headings:
        if heading.level == 1:
            yield "Body contains an H1 heading; the title comes from front matter", heading.line
        elif heading.level > previous + 1:
            yield f"Heading level jumps from H{previous} to H{heading.level}", heading.line
        previous = heading.level


@article_rule("anchor-link", WARNING, "In-page '#fragment' links match a heading or element id")
def check_anchor_links(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    anchors = None
    for link in article.links:
        if link.kind != "anchor":
            continue
        fragment = unquote(link.target[1:])
        # A bare "#" is a placeholder href
        if not fragment:
            continue
        if anchors is None:
            anchors = page_anchors(article)
        if fragment not in anchors:
            yield f"Anchor '#{fragment}' matches no heading in this article", link.line


def page_anchors(article: Article) -> set[str]:
    """Collect the ids a rendered article exposes.

    Headings get Hugo's generated ids (``-1``, ``-2`` suffixes for repeats)
    unless they carry an explicit ``{#id}``; raw HTML ``id``/``name``
    attributes in the body count too.
    """
    anchors: set[str] = set()
    seen: dict[str, int] = {}
    for heading in article.headings:
        explicit = HEADING_ID_RE.search(heading.text)
        if explicit:
            anchors.add(explicit.group("id"))
            continue
        base = anchorize(heading.text)
        count = seen.get(base, 0)
        seen[base] = count + 1
        anchors.add(f"{base}-{count}" if count else base)
    anchors.update(match.group("id") for match in HTML_ID_RE.finditer(article.body))
    return anchors


@article_rule("excerpt-length", WARNING, "Excerpt or description is short enough for a teaser")
def check_excerpt_length(article: Article, cfg: AppConfig) -> Iterator[Issue]:
    summary = article.summary
    if not summary:
        return
    words = len(summary.split())
    limit = cfg.front_matter.max_excerpt_words
    if words > limit:
        key = "excerpt" if article.front_matter.get("excerpt") else "description"
        yield f"'{key}' has {words} words (limit {limit})", _line(article, key)
