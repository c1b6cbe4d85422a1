"""PageScout - page discovery for website audits.

Enumerates the pages of a site from its XML sitemaps, its internal links
and a catalog of common content paths.
"""

__version__ = "1.0.0"
__author__ = "PageScout Team"

from pagescout.discovery.models import DiscoveredPage, PageDiscoveryResult, PageSource
from pagescout.discovery.orchestrator import discover_pages, discover_pages_sync

__all__ = [
    "discover_pages",
    "discover_pages_sync",
    "DiscoveredPage",
    "PageDiscoveryResult",
    "PageSource",
]
