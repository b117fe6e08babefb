"""
Front matter parsing for Markdown articles.

Articles open with a metadata block fenced by ``---`` (YAML, used by both the
Jekyll and Hugo eras of the corpus) or ``+++`` (TOML, Hugo only):

    ---
    title: "Merge sort in Kotlin"
    authors: [ajibade]
    categories: [Kotlin]
    date: 2024-01-18 00:00:00 +1100
    url: merge sort in kotlin
    ---

The block is parsed into a plain dict; everything after the closing fence is
the article body.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
import re
import tomllib
from typing import Any

import yaml

from ..errors import FrontMatterError


FENCES = {"---": "yaml", "+++": "toml"}
_TOML_LINE_RE = re.compile(r"line (\d+)")
_TOP_LEVEL_KEY_RE = re.compile(r"^([A-Za-z_][\w-]*)\s*[:=]")
_JEKYLL_DATE_RE = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[ T](\d{1,2}:\d{2}(?::\d{2})?)(?:\.\d+)?\s*([+-]\d{2}:?\d{2})?$"
)


@dataclass
class ParsedFrontMatter:
    """Result of parsing an article's front matter.

    Attributes:
        data: Metadata mapping
        format: "yaml" or "toml"
        body: Markdown text after the closing fence
        body_line: 1-based file line where the body starts
        field_lines: Top-level key to 1-based file line
    """
    data: dict[str, Any]
    format: str
    body: str
    body_line: int
    field_lines: dict[str, int] = field(default_factory=dict)


def split_front_matter(text: str) -> tuple[str | None, str | None, str, int]:
    """Split an article into its raw front matter block and body.

    Args:
        text: Full file content

    Returns:
        Tuple of (raw block, format, body, body start line). Raw block and
        format are None when the file has no opening fence.

    Raises:
        FrontMatterError: If the opening fence is never closed
    """
    text = text.lstrip("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines:
        return None, None, "", 1

    opening = lines[0].strip()
    fmt = FENCES.get(opening)
    if fmt is None:
        return None, None, text, 1

    for index in range(1, len(lines)):
        if lines[index].strip() == opening:
            raw = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return raw, fmt, body, index + 2

    raise FrontMatterError(f"Front matter opened with '{opening}' is never closed", line=1)


def parse_front_matter(text: str) -> ParsedFrontMatter:
    """Parse an article's front matter into a dict.

    Args:
        text: Full file content

    Returns:
        ParsedFrontMatter with the metadata, body and line bookkeeping

    Raises:
        FrontMatterError: If the block is missing, empty, malformed, or not a mapping
    """
    raw, fmt, body, body_line = split_front_matter(text)
    if raw is None or fmt is None:
        raise FrontMatterError("Missing front matter block", line=1)
    if not raw.strip():
        raise FrontMatterError("Front matter block is empty", line=1)

    if fmt == "toml":
        data = _load_toml(raw)
    else:
        data = _load_yaml(raw)

    if not isinstance(data, dict):
        raise FrontMatterError(
            f"Front matter must be a key-value mapping, got {type(data).__name__}", line=2
        )
    return ParsedFrontMatter(
        data={str(key): value for key, value in data.items()},
        format=fmt,
        body=body,
        body_line=body_line,
        field_lines=_field_lines(raw),
    )


def _field_lines(raw: str) -> dict[str, int]:
    """Map top-level keys to their 1-based file line (the block starts on line 2)."""
    lines: dict[str, int] = {}
    for offset, line in enumerate(raw.splitlines()):
        match = _TOP_LEVEL_KEY_RE.match(line)
        if match:
            lines.setdefault(match.group(1), offset + 2)
    return lines


def _load_yaml(raw: str) -> Any:
    try:
        return yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        line = mark.line + 2 if mark is not None else None
        problem = getattr(exc, "problem", None) or str(exc)
        raise FrontMatterError(f"Invalid YAML front matter: {problem}", line=line) from exc


def _load_toml(raw: str) -> Any:
    try:
        return tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        match = _TOML_LINE_RE.search(str(exc))
        line = int(match.group(1)) + 1 if match else None
        raise FrontMatterError(f"Invalid TOML front matter: {exc}", line=line) from exc


def parse_date(value: Any) -> datetime:
    """Parse a front matter date value into a datetime.

    Accepts what YAML and TOML loaders produce (date and datetime objects)
    and the string forms seen across the corpus:

        >>> parse_date("2024-01-18")
        datetime.datetime(2024, 1, 18, 0, 0)
        >>> parse_date("2021-04-25 06:00:00 +1000").utcoffset()
        datetime.timedelta(seconds=36000)

    Raises:
        ValueError: If the value is not a recognizable date
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"Unsupported date value: {value!r}")

    raw = value.strip()
    if not raw:
        raise ValueError("Empty date value")
    if raw.endswith("Z"):
        raw = f"{raw[:-1]}+00:00"
    try:
        return datetime.fromisoformat(raw)
    except ValueError:
        pass

    match = _JEKYLL_DATE_RE.match(raw)
    if not match:
        raise ValueError(f"Unrecognized date format: {value!r}")
    day, clock, offset = match.groups()
    if clock.count(":") == 1:
        clock = f"{clock}:00"
    parsed = datetime.fromisoformat(f"{day}T{clock.zfill(8)}")
    if offset is None:
        return parsed
    offset = offset.replace(":", "")
    return datetime.strptime(
        f"{parsed:%Y-%m-%d %H:%M:%S} {offset}", "%Y-%m-%d %H:%M:%S %z"
    )
