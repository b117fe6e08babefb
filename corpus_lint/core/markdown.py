"""
Markdown body parser for article structure.

This module scans an article body line by line and extracts the structure
the linter checks:
- Fenced code blocks (``` or ~~~, with an optional language tag)
- ATX headings (# through ######)
- Shortcodes ({{% name %}} and {{< name >}}, opening, closing and self-closing)
- Inline links and images ([text](target), ![alt](src), <https://...>)

Everything inside a fenced code block is treated as opaque sample code, so
headings, shortcodes and links that appear in listings are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
import shlex

from .types import CodeBlock, Heading, Link, Shortcode


# Regex patterns for matching Markdown structure
FENCE_OPEN_RE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*?)[ \t]*$")
HEADING_RE = re.compile(r"^ {0,3}(?P<marks>#{1,6})(?:[ \t]+(?P<text>.*?))?(?:[ \t]+#+)?[ \t]*$")
SHORTCODE_RE = re.compile(r"\{\{%\s*(?P<pct>.*?)\s*%\}\}|\{\{<\s*(?P<ang>.*?)\s*>\}\}")
LINK_RE = re.compile(
    r"(?P<bang>!?)\[(?P<text>[^\]]*)\]\(\s*<?(?P<target>[^)\s>]+)>?(?:\s+[\"'][^\"']*[\"'])?\s*\)"
)
AUTOLINK_RE = re.compile(r"<(?P<target>https?://[^>\s]+)>")
INLINE_CODE_RE = re.compile(r"(`+)(?:(?!\1).)+?\1")
SHORTCODE_NAME_RE = re.compile(r"^[A-Za-z][\w-]*$")

_IGNORED_SCHEMES = ("mailto:", "tel:", "javascript:", "data:")


@dataclass
class BodyStructure:
    """Structure extracted from an article body."""
    code_blocks: list[CodeBlock] = field(default_factory=list)
    headings: list[Heading] = field(default_factory=list)
    shortcodes: list[Shortcode] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)


def parse_body(body: str, first_line: int = 1) -> BodyStructure:
    """Parse a Markdown body into code blocks, headings, shortcodes and links.

    Args:
        body: Markdown text after the front matter
        first_line: File line number of the first body line, so reported
            lines point into the original file

    Returns:
        BodyStructure with all elements in document order
    """
    structure = BodyStructure()
    open_block: CodeBlock | None = None

    for offset, line in enumerate(body.splitlines()):
        lineno = first_line + offset

        if open_block is not None:
            if _closes_fence(line, open_block.fence):
                open_block.end_line = lineno
                open_block.closed = True
                structure.code_blocks.append(open_block)
                open_block = None
            continue

        fence_match = FENCE_OPEN_RE.match(line)
        if fence_match and _valid_info(fence_match.group("fence"), fence_match.group("info")):
            info = fence_match.group("info")
            open_block = CodeBlock(
                fence=fence_match.group("fence"),
                language=language_tag(info),
                info=info,
                start_line=lineno,
                end_line=lineno,
                closed=False,
            )
            continue

        heading_match = HEADING_RE.match(line)
        if heading_match:
            structure.headings.append(
                Heading(
                    level=len(heading_match.group("marks")),
                    text=(heading_match.group("text") or "").strip(),
                    line=lineno,
                )
            )

        structure.shortcodes.extend(parse_shortcodes(line, lineno))
        structure.links.extend(parse_links(line, lineno))

    # An unclosed fence swallows the rest of the body
    if open_block is not None:
        open_block.end_line = first_line + max(len(body.splitlines()) - 1, 0)
        structure.code_blocks.append(open_block)

    return structure


def language_tag(info: str) -> str:
    """Extract the language tag from a fence info string.

    Examples:
        >>> language_tag("java")
        "java"
        >>> language_tag("{.kotlin .numberLines}")
        "kotlin"
        >>> language_tag("yaml {linenos=table}")
        "yaml"
    """
    info = info.strip()
    if not info:
        return ""
    if info.startswith("{"):
        info = info.strip("{}").strip()
    first = info.split()[0] if info.split() else ""
    first = first.lstrip(".").split(",")[0]
    return first.strip("{}").lower()


def parse_shortcodes(line: str, lineno: int) -> list[Shortcode]:
    """Find all shortcodes on one line.

    Commented shortcodes (``{{</* name */>}}``), which Hugo prints literally,
    are skipped.
    """
    found: list[Shortcode] = []
    for match in SHORTCODE_RE.finditer(line):
        delimiter = "%" if match.group("pct") is not None else "<"
        inner = match.group("pct") if delimiter == "%" else match.group("ang")
        inner = inner.strip()
        if inner.startswith("/*"):
            continue

        closing = inner.startswith("/")
        if closing:
            inner = inner[1:].strip()
        self_closing = inner.endswith("/")
        if self_closing:
            inner = inner[:-1].strip()

        name, _, raw_args = inner.partition(" ")
        raw_args = raw_args.strip()
        args, positional = parse_shortcode_args(raw_args)
        found.append(
            Shortcode(
                name=name,
                raw_args=raw_args,
                args=args,
                positional=positional,
                delimiter=delimiter,
                closing=closing,
                self_closing=self_closing,
                line=lineno,
            )
        )
    return found


def parse_shortcode_args(raw_args: str) -> tuple[dict[str, str], list[str]]:
    """Split a shortcode argument string into keyword and positional args.

    Examples:
        >>> parse_shortcode_args('title="Heads up" icon=warn')
        ({"title": "Heads up", "icon": "warn"}, [])
        >>> parse_shortcode_args('"https://github.com/x/y"')
        ({}, ["https://github.com/x/y"])
    """
    if not raw_args:
        return {}, []
    try:
        tokens = shlex.split(raw_args)
    except ValueError:
        # Unbalanced quotes; keep whitespace-separated tokens so other checks still run
        tokens = raw_args.split()

    args: dict[str, str] = {}
    positional: list[str] = []
    for token in tokens:
        key, sep, value = token.partition("=")
        if sep and SHORTCODE_NAME_RE.match(key):
            args[key] = value
        else:
            positional.append(token)
    return args, positional


def parse_links(line: str, lineno: int) -> list[Link]:
    """Find inline links, images and autolinks on one line, ignoring inline code."""
    text = INLINE_CODE_RE.sub(lambda m: " " * len(m.group(0)), line)
    links: list[Link] = []
    for match in LINK_RE.finditer(text):
        target = match.group("target")
        kind = classify_target(target)
        if kind is None:
            continue
        links.append(
            Link(
                text=match.group("text"),
                target=target,
                line=lineno,
                kind=kind,
                image=bool(match.group("bang")),
            )
        )
    for match in AUTOLINK_RE.finditer(text):
        target = match.group("target")
        links.append(Link(text=target, target=target, line=lineno, kind="external"))
    return links


def classify_target(target: str) -> str | None:
    """Classify a link target, or return None for schemes that are never checked."""
    lowered = target.lower()
    if lowered.startswith(_IGNORED_SCHEMES):
        return None
    if lowered.startswith(("http://", "https://", "//")):
        return "external"
    if target.startswith("#"):
        return "anchor"
    if target.startswith("/"):
        return "internal"
    return "relative"


def _closes_fence(line: str, fence: str) -> bool:
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3:
        return False
    if not stripped or stripped[0] != fence[0]:
        return False
    if stripped.strip(fence[0]):
        return False
    return len(stripped) >= len(fence)


def _valid_info(fence: str, info: str) -> bool:
    # Backtick fences cannot carry backticks in their info string
    return not (fence.startswith("`") and "`" in info)
