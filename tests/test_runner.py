"""End-to-end tests for the lint runner over small corpora on disk."""

from pathlib import Path

import pytest

from corpus_lint.config import AppConfig
from corpus_lint.runner import run_lint


MERGE_SORT = """---
title: "Merge sort in Kotlin"
authors: [tom]
categories: [Kotlin]
date: 2024-01-18 00:00:00 +1100
modified: 2024-01-18 00:00:00 +1100
excerpt: "A step-by-step merge sort in Kotlin."
image: images/stock/0065-java-1200x628-branded.jpg
url: merge sort in kotlin
---

## How merge sort works

```kotlin
fun mergeSort(list: List<Int>): List<Int> = list
```
"""


def _write(root: Path, rel: str, text: str) -> None:
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def site(tmp_path):
    _write(tmp_path, "static/images/a.jpg", "")
    _write(tmp_path, "static/images/stock/0065-java-1200x628-branded.jpg", "")
    return tmp_path


def _article(title: str, url: str, body: str = "Body.\n") -> str:
    return (
        f'---\ntitle: "{title}"\nauthors: [tom]\ncategories: [Java]\n'
        f'date: 2024-02-01\ndescription: "About {title}"\nimage: images/a.jpg\nurl: {url}\n---\n{body}'
    )


def test_clean_article_with_loose_url_only_warns(site):
    _write(site, "content/blog/2024/2024-01-18-merge-sort-kotlin.md", MERGE_SORT)

    report = run_lint(site, AppConfig())

    assert report.articles == 1
    assert [(f.rule, f.severity, f.line) for f in report.findings] == [("url-format", "warning", 9)]
    assert report.ok


def test_strict_mode_fails_on_warnings(site):
    _write(site, "content/blog/2024/2024-01-18-merge-sort-kotlin.md", MERGE_SORT)
    cfg = AppConfig()
    cfg.output.strict = True

    report = run_lint(site, cfg)

    assert not report.ok


def test_duplicate_slugs_fail_the_run(site):
    _write(site, "content/blog/2024/2024-02-01-paging.md", _article("Paging", "spring-boot-paging"))
    _write(
        site,
        "content/blog/2024/2024-02-01-paging-again.md",
        _article("Sorting", "/Spring-Boot-Paging/"),
    )

    report = run_lint(site, AppConfig())

    duplicates = [f for f in report.findings if f.rule == "duplicate-url"]
    assert [f.path for f in duplicates] == [
        "content/blog/2024/2024-02-01-paging-again.md",
        "content/blog/2024/2024-02-01-paging.md",
    ]
    assert all(f.severity == "error" for f in duplicates)
    assert not report.ok


def test_broken_front_matter_does_not_hide_other_files(site):
    _write(site, "content/blog/2024/2024-02-01-broken.md", "---\ntitle: [oops\n---\nBody\n")
    _write(site, "content/blog/2024/2024-02-01-fine.md", _article("Fine", "fine"))

    report = run_lint(site, AppConfig())

    assert report.articles == 2
    front_matter = [f for f in report.findings if f.rule == "front-matter"]
    assert len(front_matter) == 1
    assert front_matter[0].path == "content/blog/2024/2024-02-01-broken.md"
    assert front_matter[0].severity == "error"
    assert [f for f in report.findings if f.path.endswith("fine.md")] == []


def test_disabled_rules_and_severity_overrides(site):
    _write(site, "content/blog/2024/2024-01-18-merge-sort-kotlin.md", MERGE_SORT)

    cfg = AppConfig()
    cfg.rules.severity["url-format"] = "error"
    report = run_lint(site, cfg)
    assert [(f.rule, f.severity) for f in report.findings] == [("url-format", "error")]
    assert not report.ok

    cfg = AppConfig()
    cfg.rules.disabled.append("url-format")
    report = run_lint(site, cfg)
    assert report.findings == []


def test_redirects_file_is_used_for_internal_links(site):
    body = "See [the old post](/old-post) and [nothing](/missing-post).\n"
    _write(site, "content/blog/2024/2024-02-01-links.md", _article("Links", "links", body))
    _write(site, "netlify.toml", '[[redirects]]\nfrom = "/old-post"\nto = "/links"\n')

    report = run_lint(site, AppConfig())

    assert [(f.rule, f.message) for f in report.findings] == [
        ("internal-link", "Internal link '/missing-post' matches no article url"),
    ]
    assert report.meta["redirects"] == 1


def test_empty_corpus_passes(site):
    report = run_lint(site, AppConfig())

    assert report.articles == 0
    assert report.findings == []
    assert report.ok


def test_missing_images_are_reported(site):
    body = "![diagram](/images/diagram.png) and ![logo](/images/a.jpg)\n"
    _write(site, "content/blog/2024/2024-02-01-assets.md", _article("Assets", "assets", body))
    _write(
        site,
        "content/blog/2024/2024-02-01-teaser.md",
        _article("Teaser", "teaser").replace("image: images/a.jpg", "image: images/missing.jpg"),
    )

    report = run_lint(site, AppConfig())

    assert [(f.path, f.rule, f.line, f.message) for f in report.findings] == [
        (
            "content/blog/2024/2024-02-01-assets.md",
            "missing-asset",
            10,
            "Image '/images/diagram.png' matches no file under static/, ./",
        ),
        (
            "content/blog/2024/2024-02-01-teaser.md",
            "missing-asset",
            7,
            "Front matter image 'images/missing.jpg' matches no file under static/, ./",
        ),
    ]
