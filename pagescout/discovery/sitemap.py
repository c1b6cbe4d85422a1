"""Sitemap discovery - candidate probing, index recursion and pagination."""

import logging
import re
import warnings
from typing import Any, Callable, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from pagescout.config import get_section
from pagescout.discovery.models import DiscoveredPage, PageSource
from pagescout.discovery.robots import fetch_robots_sitemaps
from pagescout.discovery.timebox import Timebox, is_expired
from pagescout.discovery.url_utils import (
    is_page_like,
    is_same_site,
    is_valid_url,
    normalize_url,
    title_from_url,
)

logger = logging.getLogger(__name__)

# (url, lastmod) pairs as extracted from a sitemap body
SitemapEntry = tuple[str, Optional[str]]

_CDATA_URL = re.compile(r"<!\[CDATA\[\s*(https?://[^\s\]]+)\s*\]\]>", re.IGNORECASE)

# post-sitemap2.xml (Yoast / Rank Math style)
_SEO_PLUGIN_PAGINATION = re.compile(r"^(?P<prefix>.+-sitemap)(?P<page>\d+)\.xml$", re.IGNORECASE)
# wp-sitemap-posts-post-2.xml (WordPress core style)
_WORDPRESS_PAGINATION = re.compile(r"^(?P<prefix>.+-)(?P<page>\d+)\.xml$", re.IGNORECASE)


def _soup(content: str) -> BeautifulSoup:
    # html.parser tolerates the broken markup real sitemaps contain
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
        return BeautifulSoup(content, "html.parser")


def is_sitemap_index(content: str) -> bool:
    """Check whether a sitemap body lists other sitemaps."""
    return "<sitemapindex" in content or "<sitemap>" in content


def extract_sitemap_locs(content: str) -> list[str]:
    """Get every ``<loc>`` value from a sitemap index."""
    locs = [loc.get_text(strip=True) for loc in _soup(content).find_all("loc")]
    return [loc for loc in locs if loc]


def _entries_from_url_blocks(content: str) -> list[SitemapEntry]:
    entries: list[SitemapEntry] = []
    for block in _soup(content).find_all("url"):
        loc = block.find("loc")
        if loc is None or not loc.get_text(strip=True):
            continue
        lastmod = block.find("lastmod")
        last_modified = lastmod.get_text(strip=True) if lastmod is not None else ""
        entries.append((loc.get_text(strip=True), last_modified or None))
    return entries


def _entries_from_loc_tags(content: str) -> list[SitemapEntry]:
    return [(loc, None) for loc in extract_sitemap_locs(content)]


def _entries_from_cdata(content: str) -> list[SitemapEntry]:
    return [(match.group(1), None) for match in _CDATA_URL.finditer(content)]


# Tried in order until one of them extracts something
PARSE_STRATEGIES: list[tuple[str, Callable[[str], list[SitemapEntry]]]] = [
    ("url blocks", _entries_from_url_blocks),
    ("loc tags", _entries_from_loc_tags),
    ("cdata", _entries_from_cdata),
]


def extract_sitemap_entries(content: str) -> list[SitemapEntry]:
    """Extract page entries from a leaf sitemap.

    Args:
        content: Sitemap body.

    Returns:
        Entries from the first strategy that finds any.
    """
    for name, strategy in PARSE_STRATEGIES:
        entries = strategy(content)
        if entries:
            logger.debug("Sitemap parsed via %s: %d entries", name, len(entries))
            return entries
    return []


def parse_sitemap_pages(content: str, base_url: str) -> list[DiscoveredPage]:
    """Parse a leaf sitemap into same-site, page-like pages.

    Args:
        content: Sitemap body.
        base_url: Site root the pages must belong to.

    Returns:
        Pages tagged ``sitemap``, in document order.
    """
    pages: list[DiscoveredPage] = []

    for url, lastmod in extract_sitemap_entries(content):
        if not is_valid_url(url):
            logger.debug("Skipping malformed sitemap URL: %s", url)
            continue

        if not is_same_site(url, base_url) or not is_page_like(url):
            continue

        pages.append(
            DiscoveredPage(
                url=url,
                title=title_from_url(url),
                source=PageSource.SITEMAP,
                last_modified=lastmod,
            )
        )

    return pages


def paginated_sitemap_urls(sitemap_url: str, limit: int) -> list[str]:
    """Build the URLs of the pages following a paginated sitemap.

    ``post-sitemap1.xml`` gives ``post-sitemap2.xml``, ``post-sitemap3.xml``...
    and ``wp-sitemap-posts-post-1.xml`` gives ``wp-sitemap-posts-post-2.xml``...

    Args:
        sitemap_url: URL of a child sitemap.
        limit: Number of following pages to build.

    Returns:
        Following sitemap URLs, empty if the filename is not paginated.
    """
    parts = urlsplit(sitemap_url)
    directory, _, filename = parts.path.rpartition("/")

    match = _SEO_PLUGIN_PAGINATION.match(filename) or _WORDPRESS_PAGINATION.match(filename)
    if not match:
        return []

    prefix = match.group("prefix")
    page = int(match.group("page"))

    return [
        urlunsplit(parts._replace(path=f"{directory}/{prefix}{page + offset}.xml"))
        for offset in range(1, limit + 1)
    ]


class SitemapDiscoverer:
    """Collect pages from a site's XML sitemaps."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        config: dict[str, Any] | None = None,
        timebox: Timebox | None = None,
    ):
        """Initialize sitemap discoverer.

        Args:
            base_url: Site root, without trailing slash.
            client: Shared HTTP client.
            config: Configuration dictionary.
            timebox: Overall budget of the discovery call.
        """
        self.base_url = base_url
        self.client = client
        self.timebox = timebox

        sitemap_config = get_section(config, "sitemap")
        timeouts = get_section(config, "timeouts")

        self.candidate_paths: list[str] = list(sitemap_config.get("candidate_paths", []))
        self.use_robots_txt = sitemap_config.get("use_robots_txt", True)
        self.max_pagination_pages = sitemap_config.get("max_pagination_pages", 10)
        self.sitemap_timeout = timeouts.get("sitemap", 15.0)
        self.child_timeout = timeouts.get("child_sitemap", 10.0)
        self.robots_timeout = timeouts.get("robots", 5.0)

        self._seen_sitemaps: set[str] = set()
        self._pages: dict[str, DiscoveredPage] = {}

    async def discover(self) -> list[DiscoveredPage]:
        """Probe candidate sitemaps and collect their pages.

        Returns:
            Pages tagged ``sitemap``, deduplicated by normalized URL.
        """
        candidates = [urljoin(self.base_url, path) for path in self.candidate_paths]
        await self._process_candidates(candidates)

        if self.use_robots_txt and not is_expired(self.timebox):
            declared = await fetch_robots_sitemaps(
                self.client, self.base_url, self._timeout(self.robots_timeout)
            )
            await self._process_candidates(
                [url for url in declared if is_valid_url(url) and is_same_site(url, self.base_url)]
            )

        logger.info(
            "Sitemaps yielded %d pages from %d sitemap URLs",
            len(self._pages),
            len(self._seen_sitemaps),
        )
        return list(self._pages.values())

    async def _process_candidates(self, candidates: list[str]) -> None:
        for sitemap_url in candidates:
            if is_expired(self.timebox):
                logger.info("Timebox expired, stopping sitemap discovery")
                return

            if sitemap_url in self._seen_sitemaps:
                continue
            self._seen_sitemaps.add(sitemap_url)

            try:
                content = await self._fetch(sitemap_url, self.sitemap_timeout)
                if content is None:
                    continue

                logger.info("Found sitemap: %s", sitemap_url)
                if is_sitemap_index(content):
                    await self._process_index(sitemap_url, content)
                else:
                    self._collect(parse_sitemap_pages(content, self.base_url))
            except Exception as e:
                logger.debug("Could not process sitemap %s: %s", sitemap_url, e)

    async def _process_index(self, index_url: str, content: str) -> None:
        children = extract_sitemap_locs(content)
        logger.debug("Sitemap index %s lists %d child sitemaps", index_url, len(children))

        for child_url in children:
            if is_expired(self.timebox):
                return

            if ".xml" not in child_url.lower() or not is_valid_url(child_url):
                continue
            if child_url in self._seen_sitemaps:
                continue
            self._seen_sitemaps.add(child_url)

            pages = await self._fetch_leaf(child_url)
            if pages is None:
                continue

            logger.debug("Child sitemap %s yielded %d pages", child_url, len(pages))
            self._collect(pages)
            await self._follow_pagination(child_url)

    async def _follow_pagination(self, sitemap_url: str) -> None:
        """Probe the pages after a paginated sitemap until one is empty."""
        for next_url in paginated_sitemap_urls(sitemap_url, self.max_pagination_pages):
            if is_expired(self.timebox):
                return

            if next_url in self._seen_sitemaps:
                continue
            self._seen_sitemaps.add(next_url)

            pages = await self._fetch_leaf(next_url)
            if not pages:
                logger.debug("Pagination of %s ends before %s", sitemap_url, next_url)
                return

            self._collect(pages)

    async def _fetch_leaf(self, sitemap_url: str) -> list[DiscoveredPage] | None:
        """Fetch and parse a child sitemap, None when it is missing or broken."""
        try:
            content = await self._fetch(sitemap_url, self.child_timeout)
            if content is None:
                return None
            return parse_sitemap_pages(content, self.base_url)
        except Exception as e:
            logger.debug("Could not parse sitemap %s: %s", sitemap_url, e)
            return None

    async def _fetch(self, url: str, timeout: float) -> str | None:
        """GET a sitemap body, None when missing or unreachable."""
        try:
            response = await self.client.get(url, timeout=self._timeout(timeout))
        except httpx.HTTPError as e:
            logger.debug("Sitemap fetch failed for %s: %s", url, e)
            return None

        if not response.is_success:
            logger.debug("Sitemap %s returned HTTP %d", url, response.status_code)
            return None

        return response.text

    def _collect(self, pages: list[DiscoveredPage]) -> None:
        for page in pages:
            key = normalize_url(page.url)
            if key and key not in self._pages:
                self._pages[key] = page

    def _timeout(self, timeout: float) -> float:
        return self.timebox.clamp(timeout) if self.timebox else timeout
