"""Exception types raised by corpus-lint."""

from __future__ import annotations


class CorpusLintError(Exception):
    """Base class for all corpus-lint errors."""


class ConfigError(CorpusLintError):
    """Raised when the YAML configuration is malformed."""


class FrontMatterError(CorpusLintError):
    """Raised when an article's front matter block cannot be parsed.

    Attributes:
        line: 1-based line in the article file where the problem was found
    """

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line
