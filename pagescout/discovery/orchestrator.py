"""Page discovery orchestration - sitemaps, then crawling, then common paths."""

import asyncio
import contextlib
import logging
from typing import Any, AsyncIterator
from urllib.parse import urlsplit

import httpx

from pagescout.config import get_default_config, get_section, merge_configs
from pagescout.discovery.crawler import LinkCrawler
from pagescout.discovery.models import PageDiscoveryResult
from pagescout.discovery.prober import PatternProber
from pagescout.discovery.registry import PageRegistry
from pagescout.discovery.sitemap import SitemapDiscoverer
from pagescout.discovery.timebox import Timebox
from pagescout.discovery.url_utils import prepare_base_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 100


@contextlib.asynccontextmanager
async def _http_client(
    client: httpx.AsyncClient | None,
    config: dict[str, Any],
) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the injected client, or a new one closed on exit."""
    if client is not None:
        yield client
        return

    user_agent = get_section(config, "http").get("user_agent", "PageScout/1.0")
    async with httpx.AsyncClient(
        follow_redirects=True,
        headers={"User-Agent": user_agent},
    ) as owned_client:
        yield owned_client


async def discover_pages(
    base_url: str,
    max_pages: int = DEFAULT_MAX_PAGES,
    *,
    quick: bool = False,
    config: dict[str, Any] | None = None,
    client: httpx.AsyncClient | None = None,
) -> PageDiscoveryResult:
    """Discover the pages of a site.

    Sources are merged in priority order: the homepage, then sitemap
    pages, then pages reached by crawling internal links, then common
    paths that answer. The first source to register a URL keeps it.

    Never raises: any failure degrades to the pages found so far, and at
    worst to the homepage alone.

    Args:
        base_url: Domain or URL of the site.
        max_pages: Maximum number of pages to return (at least 1).
        quick: Skip link crawling for a faster, shallower result.
        config: Configuration overrides, merged over the defaults.
        client: HTTP client to use instead of a private one; not closed.

    Returns:
        Capped, deduplicated, priority-ordered discovery result.
    """
    max_pages = max(1, max_pages)
    registry = PageRegistry(max_pages)

    site_url = (base_url or "").strip().rstrip("/")
    domain = site_url

    try:
        config = merge_configs(get_default_config(), config or {})
        timebox = Timebox(get_section(config, "discovery").get("timebox_seconds"))

        site_url = prepare_base_url(base_url)
        domain = urlsplit(site_url).hostname or site_url

        logger.info("Discovering pages for %s (max %d)", domain, max_pages)
        registry.add_homepage(site_url, domain)

        async with _http_client(client, config) as http:
            logger.info("Step 1: sitemap discovery")
            sitemap_pages = await SitemapDiscoverer(site_url, http, config, timebox).discover()
            accepted = registry.add_all(sitemap_pages)
            logger.info("Accepted %d of %d sitemap pages", accepted, len(sitemap_pages))

            if quick:
                logger.info("Step 2: skipped (quick mode)")
            else:
                logger.info("Step 2: internal link crawl")
                crawler = LinkCrawler(site_url, http, config, timebox)
                crawled_pages = await crawler.crawl(registry.remaining_slots, registry)
                accepted = registry.add_all(crawled_pages)
                logger.info("Accepted %d of %d crawled pages", accepted, len(crawled_pages))

            if registry.remaining_slots == 0:
                logger.info("Step 3: skipped (page limit reached)")
            else:
                logger.info("Step 3: common path probes")
                prober = PatternProber(site_url, http, config, timebox)
                pattern_pages = await prober.probe(registry)
                accepted = registry.add_all(pattern_pages)
                logger.info("Accepted %d of %d probed pages", accepted, len(pattern_pages))

    except Exception:
        logger.exception("Page discovery failed for %s", base_url)
        if not registry.has_homepage:
            registry.add_homepage(site_url, domain)

    result = registry.finalize()
    logger.info(
        "Discovery complete: %d pages (%s)",
        result.total_found,
        result.sources.to_dict(),
    )
    return result


def discover_pages_sync(
    base_url: str,
    max_pages: int = DEFAULT_MAX_PAGES,
    **kwargs: Any,
) -> PageDiscoveryResult:
    """Run ``discover_pages`` from synchronous code."""
    return asyncio.run(discover_pages(base_url, max_pages, **kwargs))
