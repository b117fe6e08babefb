"""
External link checking over HTTP.

The site's own CI disabled external link checks because they are slow and
flaky, so this check is opt-in. When enabled, every unique external URL
(inline links, autolinks and ``github`` shortcode URLs) is requested once,
concurrently, with retry logic and backoff.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

import httpx

from ..config import LinkConfig
from ..core.types import Article

logger = logging.getLogger("corpus_lint.links")

# Servers that reject HEAD often answer with one of these; retry with GET
_HEAD_FALLBACK_STATUSES = {403, 405, 501}


@dataclass
class LinkResult:
    """Result of checking one external URL.

    Either status_code will be populated (a response arrived) or error will be
    populated (network failure), but never both.

    Attributes:
        url: The URL that was checked
        status_code: Final HTTP status code after redirects, or None
        error: Error message if the request failed, None otherwise
    """
    url: str
    status_code: int | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and self.status_code < 400


def collect_external_urls(articles: list[Article], cfg: LinkConfig) -> dict[str, list[tuple[Article, int]]]:
    """Map each unique external URL to the (article, line) places that use it."""
    urls: dict[str, list[tuple[Article, int]]] = {}
    for article in articles:
        for link in article.links:
            if link.kind == "external":
                _add(urls, _absolute(link.target), article, link.line, cfg)
        for shortcode in article.shortcodes:
            if shortcode.name == "github" and not shortcode.closing:
                for value in shortcode.positional:
                    if value.startswith(("http://", "https://")):
                        _add(urls, value, article, shortcode.line, cfg)
    return urls


def _absolute(url: str) -> str:
    return f"https:{url}" if url.startswith("//") else url


def _add(
    urls: dict[str, list[tuple[Article, int]]],
    url: str,
    article: Article,
    line: int,
    cfg: LinkConfig,
) -> None:
    if any(url.startswith(prefix) for prefix in cfg.ignore):
        return
    urls.setdefault(url, []).append((article, line))


async def check_url(client: httpx.AsyncClient, url: str, retries: int) -> LinkResult:
    """Check one URL with HEAD, falling back to GET, retrying network errors.

    Args:
        client: Shared async client (redirects followed)
        url: The URL to check
        retries: Number of retry attempts after the initial failure

    Returns:
        LinkResult with a status code on response or an error message on failure
    """
    last_error: str | None = None

    for attempt in range(retries + 1):
        try:
            resp = await client.head(url)
            if resp.status_code in _HEAD_FALLBACK_STATUSES:
                resp = await client.get(url)
            return LinkResult(url=url, status_code=resp.status_code)
        except httpx.InvalidURL as exc:
            # Malformed URLs fail the same way on every attempt
            return LinkResult(url=url, status_code=None, error=f"InvalidURL: {exc}")
        except httpx.HTTPError as exc:
            last_error = f"{type(exc).__name__}: {exc}"
            if attempt < retries:
                # Backoff: 0.5s, 1.0s, 1.5s...
                await asyncio.sleep(0.5 * (attempt + 1))

    return LinkResult(url=url, status_code=None, error=last_error)


async def check_urls_async(
    urls: list[str],
    cfg: LinkConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, LinkResult]:
    """Check many URLs concurrently, bounded by ``cfg.concurrency``."""
    semaphore = asyncio.Semaphore(max(cfg.concurrency, 1))
    results: dict[str, LinkResult] = {}

    async with httpx.AsyncClient(
        timeout=cfg.timeout_seconds,
        headers={"User-Agent": cfg.user_agent},
        follow_redirects=True,
        trust_env=cfg.trust_env,
        transport=transport,
    ) as client:

        async def _one(url: str) -> None:
            async with semaphore:
                result = await check_url(client, url, cfg.retries)
            results[url] = result
            logger.debug(
                "Checked %s: %s", url, result.status_code if result.error is None else result.error
            )

        await asyncio.gather(*(_one(url) for url in urls))

    return results


def check_external_links(
    articles: list[Article],
    cfg: LinkConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[tuple[Article, int, str]]:
    """Check all external URLs used by articles.

    Args:
        articles: Loaded articles
        cfg: Link configuration
        transport: Optional httpx transport (used to stub the network in tests)

    Returns:
        (article, line, message) for every place a failing URL is used
    """
    usages = collect_external_urls(articles, cfg)
    if not usages:
        return []
    results = asyncio.run(check_urls_async(sorted(usages), cfg, transport=transport))

    failures: list[tuple[Article, int, str]] = []
    for url, result in sorted(results.items()):
        if result.ok:
            continue
        if result.error is not None:
            message = f"External link {url} failed: {result.error}"
        else:
            message = f"External link {url} returned HTTP {result.status_code}"
        for article, line in usages[url]:
            failures.append((article, line, message))
    return failures
