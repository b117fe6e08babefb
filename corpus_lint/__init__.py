"""
corpus-lint - a content linter for Markdown blog corpora.

This package checks Hugo/Jekyll style articles (front matter plus Markdown
body) for corpus-integrity problems: missing titles and urls, duplicate
slugs, near-duplicate drafts, untagged or unknown code block languages,
unbalanced shortcodes and broken internal links.

Main entry point is the CLI via `corpus-lint lint` command.

Example:
    $ corpus-lint lint path/to/site --format html -o report.html
"""

__all__ = ["__version__", "AppConfig", "load_config", "run_lint", "parse_article", "slugify"]
__version__ = "0.1.0"

from .config import AppConfig, load_config
from .core.slugs import slugify
from .input.loader import parse_article
from .runner import run_lint
