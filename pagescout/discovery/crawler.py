"""Internal link crawling - bounded breadth-first traversal of a site."""

import asyncio
import logging
from typing import Any

import httpx
from bs4 import BeautifulSoup

from pagescout.config import get_section
from pagescout.discovery.models import DiscoveredPage, PageSource
from pagescout.discovery.registry import PageRegistry
from pagescout.discovery.timebox import Timebox, is_expired
from pagescout.discovery.url_utils import (
    is_valid_page_url,
    normalize_url,
    resolve_url,
    title_from_url,
)

logger = logging.getLogger(__name__)

MIN_LINK_TEXT = 2
MAX_LINK_TEXT = 100


def extract_page_links(html: str, page_url: str, base_url: str) -> list[DiscoveredPage]:
    """Extract internal page links from an HTML document.

    Links are resolved against the page they appear on. Link text becomes
    the title when it has a usable length.

    Args:
        html: Page HTML.
        page_url: URL the HTML was served from.
        base_url: Site root the links must belong to.

    Returns:
        Pages tagged ``internal-link``, one per normalized URL.
    """
    soup = BeautifulSoup(html, "html.parser")
    seen: set[str] = set()
    pages: list[DiscoveredPage] = []

    for anchor in soup.find_all("a", href=True):
        target = resolve_url(anchor["href"], page_url)
        if target is None or not is_valid_page_url(target, base_url):
            continue

        key = normalize_url(target)
        if key is None or key in seen:
            continue
        seen.add(key)

        text = " ".join(anchor.get_text(" ", strip=True).split())
        title = text if MIN_LINK_TEXT < len(text) < MAX_LINK_TEXT else title_from_url(target)

        pages.append(DiscoveredPage(url=target, title=title, source=PageSource.INTERNAL_LINK))

    return pages


class LinkCrawler:
    """Discover pages by following internal links, level by level."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        config: dict[str, Any] | None = None,
        timebox: Timebox | None = None,
    ):
        """Initialize link crawler.

        Args:
            base_url: Site root, without trailing slash.
            client: Shared HTTP client.
            config: Configuration dictionary.
            timebox: Overall budget of the discovery call.
        """
        self.base_url = base_url
        self.client = client
        self.timebox = timebox

        crawl_config = get_section(config, "crawl")
        self.max_depth = crawl_config.get("max_depth", 5)
        self.max_urls_per_depth = crawl_config.get("max_urls_per_depth", 50)
        self.delay = crawl_config.get("delay_seconds", 0.2)
        self.concurrency = max(1, crawl_config.get("concurrency", 1))
        self.seed_paths: list[str] = list(crawl_config.get("seed_paths", []))
        self.page_timeout = get_section(config, "timeouts").get("page", 8.0)

    async def crawl(self, remaining_slots: int, registry: PageRegistry) -> list[DiscoveredPage]:
        """Crawl the site for pages the registry does not know yet.

        Args:
            remaining_slots: Number of new pages still wanted.
            registry: Pages found so far; used as the next frontier and
                for deduplication, never modified here.

        Returns:
            Newly discovered pages, at most ``remaining_slots``.
        """
        found: dict[str, DiscoveredPage] = {}
        if remaining_slots <= 0:
            return []

        visited: set[str] = set()
        frontier = [self.base_url] + [f"{self.base_url}{path}" for path in self.seed_paths]

        for depth in range(self.max_depth):
            if depth > 0:
                frontier = registry.urls() + [page.url for page in found.values()]

            # Depth 0 fetches both spellings of a seed, /services and /services/
            level = self._select_level(frontier, visited, exact=depth == 0)
            if not level:
                break

            logger.info("Crawling depth %d: %d URLs", depth + 1, len(level))

            for start in range(0, len(level), self.concurrency):
                if len(found) >= remaining_slots:
                    return list(found.values())
                if is_expired(self.timebox):
                    logger.info("Timebox expired, stopping crawl at depth %d", depth + 1)
                    return list(found.values())

                batch = level[start : start + self.concurrency]
                for url in batch:
                    visited.add(normalize_url(url) or url)

                results = await asyncio.gather(*(self._extract_links(url) for url in batch))

                for links in results:
                    for page in links:
                        if len(found) >= remaining_slots:
                            break
                        key = normalize_url(page.url)
                        if key is None or key in found or registry.has(page.url):
                            continue
                        found[key] = page

                if start + self.concurrency < len(level):
                    await asyncio.sleep(self.delay)

        logger.info("Crawl found %d new pages", len(found))
        return list(found.values())

    def _select_level(
        self, frontier: list[str], visited: set[str], exact: bool = False
    ) -> list[str]:
        """Unvisited frontier URLs, capped per depth.

        Duplicates are dropped by normalized key, or by exact string when
        ``exact`` is set.
        """
        level: list[str] = []
        seen: set[str] = set()

        for url in frontier:
            key = normalize_url(url) or url
            spelling = url if exact else key
            if key in visited or spelling in seen:
                continue
            seen.add(spelling)
            level.append(url)
            if len(level) >= self.max_urls_per_depth:
                break

        return level

    async def _extract_links(self, url: str) -> list[DiscoveredPage]:
        """Fetch one page and return its internal links; errors give []."""
        timeout = self.timebox.clamp(self.page_timeout) if self.timebox else self.page_timeout

        try:
            response = await self.client.get(url, timeout=timeout)
            if not response.is_success:
                logger.debug("Crawl skipped %s: HTTP %d", url, response.status_code)
                return []

            content_type = response.headers.get("content-type", "")
            if content_type and "html" not in content_type.lower():
                return []

            return extract_page_links(response.text, str(response.url), self.base_url)
        except Exception as e:
            logger.info("Could not crawl %s: %s", url, e)
            return []
