"""
Core domain models and lint rules.

This package contains the article model, the parsers that build it, and
the rules that check it, independent of how files are discovered or how
reports are rendered. Importing the package registers every rule.
"""

from . import dedup, rules  # noqa: F401  (registers rules)
from .dedup import CorpusContext
from .frontmatter import parse_date, parse_front_matter, split_front_matter
from .markdown import parse_body
from .registry import RULES, Rule, is_enabled, make_finding, severity_for
from .slugs import is_slug, normalize_path, slugify
from .types import Article, CodeBlock, Finding, Heading, LintReport, Link, Redirect, Shortcode

__all__ = [
    "Article",
    "CodeBlock",
    "CorpusContext",
    "Finding",
    "Heading",
    "LintReport",
    "Link",
    "Redirect",
    "RULES",
    "Rule",
    "Shortcode",
    "is_enabled",
    "is_slug",
    "make_finding",
    "normalize_path",
    "parse_body",
    "parse_date",
    "parse_front_matter",
    "severity_for",
    "slugify",
    "split_front_matter",
]
