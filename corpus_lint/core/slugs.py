"""Slug and anchor helpers for article urls, link targets and headings."""

from __future__ import annotations

import re


SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*(?:/[a-z0-9]+(?:-[a-z0-9]+)*)*$")
_MD_LINK_RE = re.compile(r"!?\[([^\]]*)\]\([^)]*\)")


def slugify(text: str) -> str:
    """Convert text to a URL-safe slug the way the site generator urlizes it.

    Args:
        text: The text to slugify (a title or a hand-written url value)

    Returns:
        A lowercase, hyphenated slug; path separators are kept

    Examples:
        >>> slugify("merge sort in kotlin")
        "merge-sort-in-kotlin"
        >>> slugify("/spring-boot-paging/")
        "spring-boot-paging"
    """
    parts = []
    for part in text.strip().lower().split("/"):
        # Replace non-alphanumeric characters with hyphens
        part = re.sub(r"[^a-z0-9]+", "-", part).strip("-")
        if part:
            parts.append(part)
    return "/".join(parts)


def is_slug(value: str) -> bool:
    """Return True if a url value is already in canonical slug form."""
    return bool(SLUG_RE.match(value))


def normalize_path(target: str) -> str:
    """Normalize an internal link target to a slug for lookup.

    Drops any fragment or query string and surrounding slashes.

    Examples:
        >>> normalize_path("/spring-boot-paging/#sorting")
        "spring-boot-paging"
    """
    target = target.split("#", 1)[0].split("?", 1)[0]
    return slugify(target)


def has_path_prefix(target: str, prefix: str) -> bool:
    """Return True if target lies under prefix, matching whole path segments.

    Examples:
        >>> has_path_prefix("/book/chapter-1", "/book")
        True
        >>> has_path_prefix("/booking-system", "/book")
        False
    """
    path = target.split("#", 1)[0].split("?", 1)[0]
    base = prefix.rstrip("/")
    return path == base or path.startswith(f"{base}/")


def anchorize(text: str) -> str:
    """Convert heading text to the id the site generator gives the heading.

    Follows Hugo's default (GitHub style) anchors: link markup and emphasis
    are dropped, text is lowercased, characters other than letters, digits,
    spaces, ``-`` and ``_`` are removed and each space becomes ``-``.

    Examples:
        >>> anchorize("Using `@Transactional` with Spring")
        "using-transactional-with-spring"
    """
    text = _MD_LINK_RE.sub(r"\1", text)
    text = text.replace("`", "").replace("*", "").strip().lower()
    kept = "".join(c for c in text if c.isalnum() or c in " -_")
    return kept.replace(" ", "-")

