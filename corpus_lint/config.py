"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- ContentConfig: Where articles live and how their paths are named
- FrontMatterConfig: Required and recommended metadata fields
- CodeBlockConfig: Known fenced code block language tags
- ShortcodeConfig: Known and paired site generator shortcodes
- DedupConfig: Slug collision and near-duplicate draft detection
- LinkConfig: Internal link resolution and optional external link checks
- RulesConfig: Disabled rules and severity overrides
- OutputConfig: Report format settings
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import yaml

from .errors import ConfigError


DEFAULT_LANGUAGES = [
    "bash",
    "console",
    "css",
    "diff",
    "docker",
    "dockerfile",
    "go",
    "gradle",
    "groovy",
    "html",
    "http",
    "ini",
    "java",
    "javascript",
    "js",
    "json",
    "kotlin",
    "plaintext",
    "properties",
    "python",
    "sh",
    "shell",
    "sql",
    "text",
    "toml",
    "txt",
    "typescript",
    "xml",
    "yaml",
    "yml",
]


@dataclass
class ContentConfig:
    """Configuration for locating articles in the corpus.

    Attributes:
        globs: Glob patterns (relative to the corpus root) matching article files
        exclude: Glob patterns of files to skip (section index pages by default)
        path_pattern: Regex a relative article path should match; named groups
            ``year`` and ``date`` are compared against front matter, ``slug``
            against ``url`` when match_slug is set
        match_slug: Whether the file name slug must equal the urlized ``url``
        redirects_file: Optional netlify.toml holding ``[[redirects]]`` tables
    """

    globs: list[str] = field(
        default_factory=lambda: ["content/blog/**/*.md", "_posts/**/*.md"]
    )
    exclude: list[str] = field(default_factory=lambda: ["**/_index.md"])
    path_pattern: str = (
        r"^content/blog/(?P<year>\d{4})/(?P<date>\d{4}-\d{2}-\d{2})-(?P<slug>[a-z0-9][a-z0-9-]*)\.md$"
        r"|^_posts/(?P<jdate>\d{4}-\d{2}-\d{2})-(?P<jslug>[a-z0-9][a-z0-9-]*)\.md$"
    )
    match_slug: bool = False
    redirects_file: str | None = "netlify.toml"


@dataclass
class FrontMatterConfig:
    """Configuration for front matter field checks.

    Attributes:
        required: Fields that must be present and non-empty
        recommended: Fields that should be present; ``a|b`` accepts either
        list_fields: Fields that must be lists of strings (Hugo taxonomies)
        string_fields: Fields that must be plain strings
        max_excerpt_words: Upper bound on excerpt/description length
    """

    required: list[str] = field(default_factory=lambda: ["title", "url"])
    recommended: list[str] = field(
        default_factory=lambda: ["authors", "categories", "date", "excerpt|description", "image"]
    )
    list_fields: list[str] = field(default_factory=lambda: ["authors", "categories", "tags"])
    string_fields: list[str] = field(
        default_factory=lambda: ["title", "url", "excerpt", "description", "image"]
    )
    max_excerpt_words: int = 60


@dataclass
class CodeBlockConfig:
    """Configuration for fenced code blocks.

    Attributes:
        languages: Language tags the syntax highlighter understands
        require_language: Whether an untagged fence is reported
    """

    languages: list[str] = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    require_language: bool = True


@dataclass
class ShortcodeConfig:
    """Configuration for site generator shortcodes.

    Attributes:
        known: Shortcode names the site theme defines
        paired: Shortcodes that wrap content and need a closing tag
    """

    known: list[str] = field(
        default_factory=lambda: [
            "github",
            "info",
            "warning",
            "danger",
            "tip",
            "note",
            "figure",
            "youtube",
            "gist",
            "tweet",
            "ref",
            "relref",
            "highlight",
        ]
    )
    paired: list[str] = field(
        default_factory=lambda: ["info", "warning", "danger", "tip", "note", "highlight"]
    )


@dataclass
class DedupConfig:
    """Configuration for duplicate slug and near-duplicate draft detection.

    Attributes:
        enabled: Whether to compare articles for near-duplicates
        title_similarity_threshold: Fuzzy match threshold (0-100) for titles
        body_similarity_threshold: Fuzzy match threshold (0-100) for bodies
        min_body_chars: Bodies shorter than this are not compared
    """

    enabled: bool = True
    title_similarity_threshold: int = 92
    body_similarity_threshold: int = 90
    min_body_chars: int = 200


@dataclass
class LinkConfig:
    """Configuration for link checks.

    Attributes:
        internal_prefixes: Internal path prefixes (whole segments) that never map to articles
        asset_prefixes: Internal path prefixes served as static files
        static_dirs: Directories, relative to the corpus root, that static
            files are served from (``static`` for Hugo, the root for Jekyll)
        check_external: Whether to request external URLs over HTTP
        timeout_seconds: HTTP request timeout
        retries: Number of retry attempts for failed requests
        concurrency: Maximum concurrent HTTP requests
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
        ignore: URL prefixes that are never requested
    """

    internal_prefixes: list[str] = field(
        default_factory=lambda: [
            "/tags/",
            "/categories/",
            "/authors/",
            "/book",
            "/contribute/",
        ]
    )
    asset_prefixes: list[str] = field(default_factory=lambda: ["/images/", "/assets/"])
    static_dirs: list[str] = field(default_factory=lambda: ["static", "."])
    check_external: bool = False
    timeout_seconds: float = 10.0
    retries: int = 1
    concurrency: int = 8
    trust_env: bool = True
    user_agent: str = "corpus-lint/0.1 (+https://github.com/)"
    ignore: list[str] = field(default_factory=lambda: ["http://localhost", "https://localhost"])


@dataclass
class RulesConfig:
    """Configuration for rule selection.

    Attributes:
        disabled: Rule ids that are not run
        severity: Rule id to severity ("error" or "warning") overrides
    """

    disabled: list[str] = field(default_factory=list)
    severity: dict[str, str] = field(default_factory=dict)


@dataclass
class OutputConfig:
    """Configuration for report output.

    Attributes:
        format: "console", "json", "markdown" or "html"
        path: Output file for non-console formats
        strict: Treat warnings as failures
    """

    format: str = "console"
    path: str | None = None
    strict: bool = False


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Path of the log file
    """

    level: str = "WARNING"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "corpus-lint.jsonl"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    content: ContentConfig = field(default_factory=ContentConfig)
    front_matter: FrontMatterConfig = field(default_factory=FrontMatterConfig)
    code_blocks: CodeBlockConfig = field(default_factory=CodeBlockConfig)
    shortcodes: ShortcodeConfig = field(default_factory=ShortcodeConfig)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    links: LinkConfig = field(default_factory=LinkConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTION_TYPES: dict[str, type] = {
    "content": ContentConfig,
    "front_matter": FrontMatterConfig,
    "code_blocks": CodeBlockConfig,
    "shortcodes": ShortcodeConfig,
    "dedup": DedupConfig,
    "links": LinkConfig,
    "rules": RulesConfig,
    "output": OutputConfig,
    "logging": LoggingConfig,
}


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return validate_config(_merge_config(AppConfig(), raw))


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if value is None:
            continue
        if not isinstance(value, dict):
            raise ConfigError(f"Config section '{key}' must be a mapping")
        unknown = set(value) - set(data[key])
        if unknown:
            raise ConfigError(
                f"Unknown key(s) in config section '{key}': {', '.join(sorted(unknown))}"
            )
        data[key].update(value)
    return _fromdict(data)


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(**{name: cls(**data[name]) for name, cls in _SECTION_TYPES.items()})


def validate_config(cfg: AppConfig) -> AppConfig:
    """Check enumerated settings, raising ConfigError on the first bad value."""
    if cfg.output.format not in ("console", "json", "markdown", "html"):
        raise ConfigError(f"Unknown output format '{cfg.output.format}'")
    if cfg.logging.format not in ("jsonl", "plain"):
        raise ConfigError(f"Unknown log format '{cfg.logging.format}'")
    for rule_id, severity in cfg.rules.severity.items():
        if str(severity).lower() not in ("error", "warning"):
            raise ConfigError(f"Severity for rule '{rule_id}' must be 'error' or 'warning'")
    for name in ("title_similarity_threshold", "body_similarity_threshold"):
        value = getattr(cfg.dedup, name)
        if not 0 <= value <= 100:
            raise ConfigError(f"dedup.{name} must be between 0 and 100, got {value}")
    return cfg
