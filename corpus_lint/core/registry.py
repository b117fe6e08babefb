"""
Rule registry.

Rules are registered by id with a default severity and a one-line
description. Three kinds exist:
- article rules run against one Article at a time
- corpus rules run against all loaded Articles together
- built-in rules (front matter loading, external links) are emitted by the
  loader and link checker and are registered here only so they can be
  listed, disabled and re-graded like any other rule
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from ..config import AppConfig
from .types import ERROR, SEVERITIES, WARNING, Finding

# (message, line) pairs yielded by article rules
Issue = tuple[str, int | None]


@dataclass(frozen=True)
class Rule:
    """A registered lint rule.

    Attributes:
        id: Stable rule id used in config and reports
        severity: Default severity ("error" or "warning")
        description: One-line description for `corpus-lint rules`
        scope: "article", "corpus" or "builtin"
        check: The rule function, None for built-in rules
    """
    id: str
    severity: str
    description: str
    scope: str
    check: Callable[..., Iterable[Any]] | None = None


RULES: dict[str, Rule] = {}


def _register(rule: Rule) -> None:
    if rule.id in RULES:
        raise ValueError(f"Rule '{rule.id}' is already registered")
    if rule.severity not in SEVERITIES:
        raise ValueError(f"Rule '{rule.id}' has invalid severity '{rule.severity}'")
    RULES[rule.id] = rule


def article_rule(rule_id: str, severity: str, description: str):
    """Register a function ``(article, cfg) -> Iterable[Issue]`` as an article rule."""

    def decorator(func):
        _register(Rule(rule_id, severity, description, "article", func))
        return func

    return decorator


def corpus_rule(rule_id: str, severity: str, description: str):
    """Register a function ``(articles, cfg, context) -> Iterable[(path, Issue)]``."""

    def decorator(func):
        _register(Rule(rule_id, severity, description, "corpus", func))
        return func

    return decorator


def builtin_rule(rule_id: str, severity: str, description: str) -> None:
    _register(Rule(rule_id, severity, description, "builtin"))


def is_enabled(rule_id: str, cfg: AppConfig) -> bool:
    return rule_id not in cfg.rules.disabled


def severity_for(rule_id: str, cfg: AppConfig) -> str:
    """Resolve a rule's effective severity, honoring config overrides."""
    override = cfg.rules.severity.get(rule_id)
    if override is not None:
        override = str(override).lower()
        if override in SEVERITIES:
            return override
    rule = RULES.get(rule_id)
    return rule.severity if rule else ERROR


def make_finding(rule_id: str, path: str, message: str, line: int | None, cfg: AppConfig) -> Finding:
    return Finding(
        rule=rule_id,
        severity=severity_for(rule_id, cfg),
        path=path,
        message=message,
        line=line,
    )


builtin_rule("front-matter", ERROR, "Front matter exists and parses as a key-value mapping")
builtin_rule("external-link", WARNING, "External URLs respond with a success or redirect status")
