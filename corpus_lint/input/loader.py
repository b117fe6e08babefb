"""
Article discovery and loading.

This module finds article files under a corpus root and turns each one into
an Article. A file that cannot be read or whose front matter does not parse
produces a ``front-matter`` issue instead of raising, so one broken draft
never hides problems in the rest of the corpus.
"""

from __future__ import annotations

from dataclasses import dataclass
import fnmatch
import logging
from pathlib import Path
import re
import tomllib

from ..config import AppConfig
from ..core.frontmatter import parse_front_matter
from ..core.markdown import parse_body
from ..core.types import Article, Redirect
from ..errors import ConfigError, FrontMatterError

logger = logging.getLogger("corpus_lint.loader")

_REDIRECTS_HEADER_RE = re.compile(r"^\s*\[\[redirects\]\]\s*$")


@dataclass
class LoadResult:
    """Outcome of loading one article file.

    Either article is populated (success) or error is populated (failure),
    but never both.

    Attributes:
        path: Path relative to the corpus root
        article: The parsed Article, or None if loading failed
        error: Error message if the file could not be parsed
        line: 1-based file line of the error, if known
    """
    path: Path
    article: Article | None
    error: str | None = None
    line: int | None = None


def discover_articles(root: Path, cfg: AppConfig) -> list[Path]:
    """List article files under root matching the configured globs.

    Args:
        root: Corpus root directory
        cfg: Application configuration

    Returns:
        Sorted, de-duplicated paths relative to root
    """
    found: set[Path] = set()
    for pattern in cfg.content.globs:
        for path in root.glob(pattern):
            if not path.is_file():
                continue
            rel = path.relative_to(root)
            if _excluded(rel, cfg.content.exclude):
                continue
            found.add(rel)
    return sorted(found, key=lambda p: p.as_posix())


def _excluded(rel: Path, patterns: list[str]) -> bool:
    posix = rel.as_posix()
    for pattern in patterns:
        if fnmatch.fnmatch(posix, pattern):
            return True
        # "**/name" also matches a file at the top level
        if pattern.startswith("**/") and fnmatch.fnmatch(posix, pattern[3:]):
            return True
    return False


def load_article(path: Path, root: Path) -> LoadResult:
    """Read and parse one article file.

    Args:
        path: Path relative to root
        root: Corpus root directory

    Returns:
        LoadResult holding the Article or the reason it could not be parsed
    """
    full_path = root / path
    try:
        text = full_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        return LoadResult(path=path, article=None, error=f"File is not valid UTF-8: {exc.reason}")
    except OSError as exc:
        return LoadResult(path=path, article=None, error=f"Cannot read file: {exc}")

    return parse_article(text, path)


def parse_article(text: str, path: Path) -> LoadResult:
    """Parse article text (front matter plus body) into an Article."""
    try:
        parsed = parse_front_matter(text)
    except FrontMatterError as exc:
        return LoadResult(path=path, article=None, error=str(exc), line=exc.line)

    structure = parse_body(parsed.body, parsed.body_line)
    article = Article(
        path=path,
        front_matter=parsed.data,
        front_matter_format=parsed.format,
        body=parsed.body,
        body_line=parsed.body_line,
        field_lines=parsed.field_lines,
        code_blocks=structure.code_blocks,
        headings=structure.headings,
        shortcodes=structure.shortcodes,
        links=structure.links,
    )
    return LoadResult(path=path, article=article)


def load_redirects(path: Path) -> list[Redirect]:
    """Read ``[[redirects]]`` tables from a Netlify config file.

    Returns an empty list when the file does not exist. Line numbers point at
    each ``[[redirects]]`` header, in file order.

    Raises:
        ConfigError: If the file is not valid TOML
    """
    if not path.is_file():
        return []
    text = path.read_text(encoding="utf-8")
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in redirects file {path}: {exc}") from exc

    header_lines = [
        index + 1
        for index, line in enumerate(text.splitlines())
        if _REDIRECTS_HEADER_RE.match(line)
    ]
    redirects: list[Redirect] = []
    for index, raw in enumerate(data.get("redirects", [])):
        if not isinstance(raw, dict) or "from" not in raw or "to" not in raw:
            logger.warning("Skipping malformed redirect #%d in %s", index + 1, path)
            continue
        redirects.append(
            Redirect(
                source=str(raw["from"]),
                target=str(raw["to"]),
                status=int(raw.get("status", 301)),
                line=header_lines[index] if index < len(header_lines) else None,
            )
        )
    return redirects
