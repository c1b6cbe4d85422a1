"""Discovery module - sitemap, crawl and common-path page discovery."""

from pagescout.discovery.crawler import LinkCrawler
from pagescout.discovery.orchestrator import discover_pages, discover_pages_sync
from pagescout.discovery.prober import PatternProber
from pagescout.discovery.registry import PageRegistry
from pagescout.discovery.sitemap import SitemapDiscoverer
from pagescout.discovery.url_utils import is_same_site, is_valid_page_url, normalize_url

__all__ = [
    "discover_pages",
    "discover_pages_sync",
    "SitemapDiscoverer",
    "LinkCrawler",
    "PatternProber",
    "PageRegistry",
    "normalize_url",
    "is_same_site",
    "is_valid_page_url",
]
