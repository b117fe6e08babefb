"""
Corpus-level rules: slug collisions, near-duplicate drafts and internal links.

These rules need every article at once:
1. Exact slug collisions after normalizing the ``url`` field (errors)
2. Fuzzy title or body similarity between different files (probable
   near-identical drafts of the same article)
3. Internal links and redirects that point at no known article
4. Images and other static files that are missing from the site
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
import re
from typing import Iterator
from urllib.parse import unquote

from rapidfuzz import fuzz

from ..config import AppConfig
from .registry import corpus_rule
from .slugs import has_path_prefix, normalize_path, slugify
from .types import ERROR, WARNING, Article, Redirect

# (path, message, line) triples yielded by corpus rules
CorpusIssue = tuple[str, str, int | None]

_WHITESPACE_RE = re.compile(r"\s+")
# File extensions such as .png or .pdf
_FILE_SUFFIX_RE = re.compile(r"^\.[a-z][a-z0-9]{0,4}$")


@dataclass
class CorpusContext:
    """Shared lookups for corpus rules.

    Attributes:
        redirects: Redirect rules from the hosting config
        redirects_path: Display path of the file the redirects came from
        slugs: Normalized article slug to the articles using it
        root: Corpus root directory, or None when static files cannot be checked
    """
    redirects: list[Redirect] = field(default_factory=list)
    redirects_path: str = "netlify.toml"
    slugs: dict[str, list[Article]] = field(default_factory=dict)
    root: Path | None = None

    @classmethod
    def build(
        cls,
        articles: list[Article],
        redirects: list[Redirect] | None = None,
        redirects_path: str = "netlify.toml",
        root: Path | None = None,
    ) -> "CorpusContext":
        slugs: dict[str, list[Article]] = {}
        for article in articles:
            if not article.url:
                continue
            slug = slugify(article.url)
            if slug:
                slugs.setdefault(slug, []).append(article)
        return cls(
            redirects=list(redirects or []),
            redirects_path=redirects_path,
            slugs=slugs,
            root=root,
        )

    @property
    def redirect_sources(self) -> set[str]:
        return {normalize_path(r.source) for r in self.redirects}

    def resolves(self, target: str, cfg: AppConfig) -> bool:
        """Return True if an internal path maps to an article, redirect or static prefix."""
        if is_asset(target, cfg):
            return True
        if any(has_path_prefix(target, prefix) for prefix in cfg.links.internal_prefixes):
            return True
        slug = normalize_path(target)
        if not slug:
            return True
        return slug in self.slugs or slug in self.redirect_sources

    def asset_exists(self, target: str, cfg: AppConfig, article: Article | None = None) -> bool:
        """Return True if a static file target exists, or cannot be checked.

        Site-absolute targets (and front matter ``image`` values) resolve
        against each configured static directory. Relative body targets also
        resolve against the article's own directory (Hugo page bundles).
        """
        if self.root is None:
            return True
        path = unquote(target.split("#", 1)[0].split("?", 1)[0])
        rel = path.lstrip("/")
        if not rel:
            return True
        bases = [self.root / directory for directory in cfg.links.static_dirs]
        if article is not None and not path.startswith("/"):
            bases.insert(0, self.root / article.path.parent)
        return any((base / rel).is_file() for base in bases)


@corpus_rule("duplicate-url", ERROR, "Article urls are unique after normalization")
def find_duplicate_urls(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> Iterator[CorpusIssue]:
    for slug, members in sorted(context.slugs.items()):
        if len(members) < 2:
            continue
        for article in members:
            others = ", ".join(o.relpath for o in members if o is not article)
            yield (
                article.relpath,
                f"url '{article.url}' (slug '{slug}') is also used by {others}",
                article.field_lines.get("url"),
            )


@corpus_rule("near-duplicate", WARNING, "No two articles have near-identical titles or bodies")
def find_near_duplicates(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> Iterator[CorpusIssue]:
    if not cfg.dedup.enabled:
        return
    title_threshold = cfg.dedup.title_similarity_threshold
    body_threshold = cfg.dedup.body_similarity_threshold

    titles = [(article.title or "").lower() for article in articles]
    bodies = [_normalize_body(article.body) for article in articles]

    for i in range(len(articles)):
        for j in range(i + 1, len(articles)):
            reasons = []
            if titles[i] and titles[j]:
                score = fuzz.ratio(titles[i], titles[j], score_cutoff=title_threshold)
                if score:
                    reasons.append(f"title {score:.0f}% similar")
            if _comparable_bodies(bodies[i], bodies[j], cfg):
                score = fuzz.ratio(bodies[i], bodies[j], score_cutoff=body_threshold)
                if score:
                    reasons.append(f"body {score:.0f}% similar")
            if not reasons:
                continue
            detail = ", ".join(reasons)
            first, second = articles[i], articles[j]
            yield first.relpath, f"Probable near-duplicate of {second.relpath} ({detail})", None
            yield second.relpath, f"Probable near-duplicate of {first.relpath} ({detail})", None


def _normalize_body(body: str) -> str:
    return _WHITESPACE_RE.sub(" ", body).strip().lower()


def _comparable_bodies(a: str, b: str, cfg: AppConfig) -> bool:
    """Skip pairs that are too short or whose lengths rule out a high ratio.

    fuzz.ratio can be at most 200 * min / (min + max), so length alone
    decides most pairs without running the comparison.
    """
    shorter, longer = sorted((len(a), len(b)))
    if shorter < cfg.dedup.min_body_chars:
        return False
    return 200 * shorter / (shorter + longer) >= cfg.dedup.body_similarity_threshold


@corpus_rule("internal-link", WARNING, "Internal links point to a known article, redirect or static path")
def find_broken_internal_links(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> Iterator[CorpusIssue]:
    for article in articles:
        for link in article.links:
            if link.kind != "internal":
                continue
            if not context.resolves(link.target, cfg):
                yield article.relpath, f"Internal link '{link.target}' matches no article url", link.line


@corpus_rule("missing-asset", WARNING, "Images and static files referenced by articles exist")
def find_missing_assets(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> Iterator[CorpusIssue]:
    if context.root is None:
        return
    dirs = ", ".join(f"{directory}/" for directory in cfg.links.static_dirs)
    for article in articles:
        image = article.front_matter.get("image")
        if isinstance(image, str) and image.strip() and not _is_remote(image):
            if not context.asset_exists(image.strip(), cfg):
                yield (
                    article.relpath,
                    f"Front matter image '{image}' matches no file under {dirs}",
                    article.field_lines.get("image"),
                )
        for link in article.links:
            if link.kind not in ("internal", "relative"):
                continue
            if not (link.image or is_asset(link.target, cfg)):
                continue
            if not context.asset_exists(link.target, cfg, article):
                kind = "Image" if link.image else "Asset"
                yield article.relpath, f"{kind} '{link.target}' matches no file under {dirs}", link.line


def is_asset(target: str, cfg: AppConfig) -> bool:
    """Return True if an internal target names a static file rather than a page."""
    if any(has_path_prefix(target, prefix) for prefix in cfg.links.asset_prefixes):
        return True
    path = target.split("#", 1)[0].split("?", 1)[0]
    suffix = PurePosixPath(path).suffix.lower()
    return bool(_FILE_SUFFIX_RE.match(suffix)) and suffix not in (".html", ".htm")


def _is_remote(value: str) -> bool:
    return value.strip().lower().startswith(("http://", "https://", "//"))


@corpus_rule("redirect-shadow", WARNING, "Redirects neither hide articles nor point to unknown paths")
def find_redirect_conflicts(
    articles: list[Article], cfg: AppConfig, context: CorpusContext
) -> Iterator[CorpusIssue]:
    for redirect in context.redirects:
        source = normalize_path(redirect.source)
        for article in context.slugs.get(source, []):
            yield (
                article.relpath,
                f"Redirect from '{redirect.source}' to '{redirect.target}' hides this article",
                article.field_lines.get("url"),
            )

        if not redirect.target.startswith("/"):
            continue
        if not context.resolves(redirect.target, cfg):
            yield (
                context.redirects_path,
                f"Redirect target '{redirect.target}' (from '{redirect.source}') matches no article url",
                redirect.line,
            )
