"""
Input handling for article files.

This package discovers article files under a corpus root and loads them
into Article objects, plus the hosting redirects that share their url space.
"""

from .loader import LoadResult, discover_articles, load_article, load_redirects, parse_article

__all__ = ["LoadResult", "discover_articles", "load_article", "load_redirects", "parse_article"]
