"""Tests for per-article lint rules."""

from pathlib import Path

from corpus_lint.config import AppConfig
from corpus_lint.core import RULES, rules
from corpus_lint.core.registry import make_finding, severity_for
from corpus_lint.input.loader import parse_article


DEFAULT_PATH = "content/blog/2024/2024-01-18-merge-sort-kotlin.md"


def _article(front: str, body: str = "", path: str = DEFAULT_PATH):
    result = parse_article(f"---\n{front}---\n{body}", Path(path))
    assert result.article is not None, result.error
    return result.article


def _messages(check, article, cfg=None):
    return [message for message, _ in check(article, cfg or AppConfig())]


def test_required_fields_missing_url():
    article = _article('title: "Merge sort in Kotlin"\n')

    issues = list(rules.check_required_fields(article, AppConfig()))

    assert issues == [("Missing required front matter field 'url'", 1)]


def test_required_field_empty_points_at_its_line():
    article = _article('title: ""\nurl: merge-sort-kotlin\n')

    issues = list(rules.check_required_fields(article, AppConfig()))

    assert issues == [("Front matter field 'title' is empty", 2)]


def test_recommended_fields_accept_either_alternative():
    front = (
        "title: T\nurl: t\nauthors: [tom]\ncategories: [Java]\n"
        "date: 2024-01-18\ndescription: Short\nimage: images/x.jpg\n"
    )
    article = _article(front)

    assert _messages(rules.check_recommended_fields, article) == []


def test_recommended_fields_report_each_missing_field():
    article = _article("title: T\nurl: t\n")

    messages = _messages(rules.check_recommended_fields, article)

    assert "Missing recommended front matter field 'authors'" in messages
    assert "Missing recommended front matter field 'excerpt' or 'description'" in messages
    assert len(messages) == 5


def test_field_types():
    front = 'title: 2024\nurl: t\nauthors: tom\ncategories: [Java, ""]\n'
    article = _article(front)

    messages = _messages(rules.check_field_types, article)

    assert "Field 'authors' must be a list, got str" in messages
    assert "Field 'categories' contains a non-string or empty item: ''" in messages
    assert "Field 'title' must be a string, got int" in messages


def test_date_format_rejects_unparseable_dates():
    article = _article("title: T\nurl: t\ndate: yesterday\nmodified: 2024-01-20\n")

    issues = list(rules.check_date_format(article, AppConfig()))

    assert issues == [("Field 'date' is not a valid date: 'yesterday'", 4)]


def test_date_order_flags_modified_before_date():
    article = _article("title: T\nurl: t\ndate: 2024-01-18\nmodified: 2024-01-10\n")

    messages = _messages(rules.check_date_order, article)

    assert messages == ["'modified' (2024-01-10) is earlier than 'date' (2024-01-18)"]


def test_date_order_compares_mixed_offsets():
    article = _article(
        "title: T\nurl: t\ndate: 2024-01-18 00:00:00 +1100\nmodified: 2024-02-01\n"
    )

    assert _messages(rules.check_date_order, article) == []


def test_date_order_compares_aware_dates_as_instants():
    later = _article(
        "title: T\nurl: t\ndate: 2021-04-25 10:00:00 +1000\nmodified: 2021-04-25 01:00:00 +0000\n"
    )
    earlier = _article(
        "title: T\nurl: t\ndate: 2021-04-25 10:00:00 +1000\nmodified: 2021-04-24 23:00:00 +0000\n"
    )

    assert _messages(rules.check_date_order, later) == []
    assert _messages(rules.check_date_order, earlier) == [
        "'modified' (2021-04-24) is earlier than 'date' (2021-04-25)"
    ]


def test_url_format_suggests_published_slug():
    article = _article('title: "Merge sort in Kotlin"\nurl: merge sort in kotlin\n')

    issues = list(rules.check_url_format(article, AppConfig()))

    assert issues == [
        ("url 'merge sort in kotlin' is not a slug; it will be published as 'merge-sort-in-kotlin'", 3)
    ]


def test_url_format_accepts_slashes_around_slug():
    article = _article("title: T\nurl: /spring-boot-paging/\n")

    assert _messages(rules.check_url_format, article) == []


def test_path_convention_accepts_matching_date():
    article = _article("title: T\nurl: t\ndate: 2024-01-18\n")

    assert _messages(rules.check_path_convention, article) == []


def test_path_convention_flags_date_mismatch():
    article = _article("title: T\nurl: t\ndate: 2024-01-19\n")

    messages = _messages(rules.check_path_convention, article)

    assert messages == ["File name date 2024-01-18 does not match front matter date 2024-01-19"]


def test_path_convention_flags_wrong_year_directory():
    article = _article("title: T\nurl: t\n", path="content/blog/2023/2024-01-18-merge-sort-kotlin.md")

    messages = _messages(rules.check_path_convention, article)

    assert messages == ["File date 2024-01-18 is not in year directory 2023"]


def test_path_convention_accepts_jekyll_posts():
    article = _article("title: T\nurl: t\ndate: 2019-01-01\n", path="_posts/2019-01-01-junit5.md")

    assert _messages(rules.check_path_convention, article) == []


def test_path_convention_compares_file_slug_with_url_when_enabled():
    article = _article("title: T\nurl: merge sort in kotlin\ndate: 2024-01-18\n")
    cfg = AppConfig()

    assert _messages(rules.check_path_convention, article, cfg) == []

    cfg.content.match_slug = True
    issues = list(rules.check_path_convention(article, cfg))

    assert issues == [
        ("File name slug 'merge-sort-kotlin' does not match url slug 'merge-sort-in-kotlin'", 3)
    ]


def test_path_convention_flags_unknown_layout():
    article = _article("title: T\nurl: t\n", path="drafts/Merge Sort.md")

    messages = _messages(rules.check_path_convention, article)

    assert messages == ["Path 'drafts/Merge Sort.md' does not follow the content naming convention"]


def test_code_language_rule():
    body = "```kotlin\nval x = 1\n```\n\n```\nplain\n```\n\n```rust\nfn main() {}\n```\n"
    article = _article("title: T\nurl: t\n", body)

    issues = list(rules.check_code_language(article, AppConfig()))

    assert issues == [
        ("Code block has no language tag", 9),
        ("Unknown code block language 'rust'", 13),
    ]


def test_code_language_can_allow_untagged_blocks():
    cfg = AppConfig()
    cfg.code_blocks.require_language = False
    article = _article("title: T\nurl: t\n", "```\nplain\n```\n")

    assert _messages(rules.check_code_language, article, cfg) == []


def test_code_fence_rule_flags_unclosed_block():
    article = _article("title: T\nurl: t\n", "```java\nclass A {}\n")

    issues = list(rules.check_code_fence(article, AppConfig()))

    assert issues == [("Code block opened with ``` is never closed", 5)]


def test_shortcode_known_rule():
    article = _article("title: T\nurl: t\n", '{{% youtubez "abc" %}}\n{{% github "https://github.com/a/b" %}}\n')

    assert _messages(rules.check_shortcode_known, article) == ["Unknown shortcode 'youtubez'"]


def test_shortcode_balance_reports_unclosed_callout():
    article = _article("title: T\nurl: t\n", '{{% info title="Note" %}}\nText\n')

    assert _messages(rules.check_shortcode_balance, article) == ["Shortcode 'info' is never closed"]


def test_shortcode_balance_reports_crossed_tags():
    body = "{{% info %}}\n{{% warning %}}\n{{% /info %}}\n{{% /warning %}}\n"
    article = _article("title: T\nurl: t\n", body)

    messages = _messages(rules.check_shortcode_balance, article)

    assert "Closing shortcode '/info' does not match open 'warning' from line 6" in messages
    assert "Shortcode 'info' is never closed" in messages


def test_shortcode_balance_reports_stray_closing_tag():
    article = _article("title: T\nurl: t\n", "{{% /danger %}}\n")

    assert _messages(rules.check_shortcode_balance, article) == [
        "Closing shortcode '/danger' has no matching opening"
    ]


def test_shortcode_balance_accepts_nested_pairs():
    body = "{{% info %}}\n{{% tip %}}\nx\n{{% /tip %}}\n{{% /info %}}\n"
    article = _article("title: T\nurl: t\n", body)

    assert _messages(rules.check_shortcode_balance, article) == []


def test_shortcode_args_github_url():
    body = '{{% github %}}\n{{% github "https://gitlab.com/a/b" %}}\n{{% github "https://github.com/thombergs/code-examples" %}}\n'
    article = _article("title: T\nurl: t\n", body)

    messages = _messages(rules.check_shortcode_args, article)

    assert messages == [
        "Shortcode 'github' expects one repository URL, got 0",
        "Shortcode 'github' URL is not a GitHub URL: https://gitlab.com/a/b",
    ]


def test_shortcode_args_callout_title_and_quotes():
    body = '{{% info title="" %}}\n{{% /info %}}\n{{% warning title="oops %}}\n{{% /warning %}}\n'
    article = _article("title: T\nurl: t\n", body)

    messages = _messages(rules.check_shortcode_args, article)

    assert messages == [
        "Shortcode 'info' has an empty title",
        "Shortcode 'warning' has unbalanced quotes",
    ]


def test_heading_structure():
    body = "# Title again\n\n## Section\n\n#### Too deep\n\n### Fine\n"
    article = _article("title: T\nurl: t\n", body)

    issues = list(rules.check_heading_structure(article, AppConfig()))

    assert issues == [
        ("Body contains an H1 heading; the title comes from front matter", 5),
        ("Heading level jumps from H2 to H4", 9),
    ]


def test_anchor_links_match_generated_heading_ids():
    body = (
        "Jump to [setup](#setting-up-spring-boot), [again](#setup-1), [custom](#config),\n"
        "[html](#raw-target), [top](#) or [nowhere](#no-such-section).\n\n"
        "## Setting up `Spring Boot`\n\n## Setup\n\n## Setup\n\n## Configuration {#config}\n\n"
        '<a id="raw-target"></a>\n'
    )
    article = _article("title: T\nurl: t\n", body)

    issues = list(rules.check_anchor_links(article, AppConfig()))

    assert issues == [("Anchor '#no-such-section' matches no heading in this article", 6)]


def test_page_anchors():
    body = "## Why Use *Feign*?\n\n### Step 1: [Install](https://example.com)\n"
    article = _article("title: T\nurl: t\n", body)

    assert rules.page_anchors(article) == {"why-use-feign", "step-1-install"}


def test_excerpt_length():
    words = " ".join(["word"] * 61)
    article = _article(f"title: T\nurl: t\nexcerpt: {words}\n")

    issues = list(rules.check_excerpt_length(article, AppConfig()))

    assert issues == [("'excerpt' has 61 words (limit 60)", 4)]


def test_rule_registry_lists_all_rules():
    expected = {
        "front-matter",
        "required-field",
        "recommended-field",
        "field-type",
        "date-format",
        "date-order",
        "url-format",
        "path-convention",
        "code-language",
        "code-fence",
        "shortcode-known",
        "shortcode-balance",
        "shortcode-args",
        "heading-structure",
        "anchor-link",
        "excerpt-length",
        "missing-asset",
        "duplicate-url",
        "near-duplicate",
        "internal-link",
        "redirect-shadow",
        "external-link",
    }

    assert set(RULES) == expected


def test_severity_override():
    cfg = AppConfig()
    cfg.rules.severity["url-format"] = "ERROR"

    assert severity_for("url-format", cfg) == "error"
    assert severity_for("code-fence", cfg) == "error"
    assert severity_for("near-duplicate", cfg) == "warning"
    finding = make_finding("url-format", "a.md", "msg", 3, cfg)
    assert finding.severity == "error"
    assert finding.line == 3
