"""Page registry - deduplicated, capped page map for one discovery call."""

import logging

from pagescout.discovery.models import (
    DiscoveredPage,
    PageDiscoveryResult,
    PageSource,
    SourceCounts,
)
from pagescout.discovery.url_utils import normalize_url
from pagescout.exceptions import RegistryFinalizedError

logger = logging.getLogger(__name__)

# Which counter a source increments when its page is accepted
_COUNTER_FOR_SOURCE = {
    PageSource.HOMEPAGE: "homepage",
    PageSource.SITEMAP: "sitemap",
    PageSource.INTERNAL_LINK: "internal_links",
}


class PageRegistry:
    """Map from normalized URL to page, owned by a single discovery call.

    The first page registered for a key wins; later duplicates are
    dropped. Nothing is accepted past ``max_pages`` except the homepage.
    """

    def __init__(self, max_pages: int = 100):
        """Initialize registry.

        Args:
            max_pages: Maximum number of pages to accept.
        """
        self.max_pages = max_pages
        self.sources = SourceCounts()
        self._pages: dict[str, DiscoveredPage] = {}
        self._homepage_key: str | None = None
        self._finalized = False

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, url: object) -> bool:
        return isinstance(url, str) and self.has(url)

    @property
    def remaining_slots(self) -> int:
        return max(0, self.max_pages - len(self._pages))

    @property
    def has_homepage(self) -> bool:
        return self._homepage_key is not None and self._homepage_key in self._pages

    def has(self, url: str) -> bool:
        """Check whether a URL (in any equivalent form) is registered."""
        key = normalize_url(url)
        return key is not None and key in self._pages

    def urls(self) -> list[str]:
        """Registered URLs in insertion order."""
        return [page.url for page in self._pages.values()]

    def add_homepage(self, url: str, domain: str) -> DiscoveredPage:
        """Register the homepage regardless of the page cap.

        Args:
            url: Site root URL.
            domain: Host shown in the title.

        Returns:
            The homepage entry.
        """
        self._check_open()

        # Unparsable roots still get an entry so callers always see a homepage
        key = normalize_url(url) or url
        homepage = DiscoveredPage(
            url=url,
            title=f"Homepage - {domain}",
            source=PageSource.HOMEPAGE,
        )

        if key not in self._pages:
            self._pages[key] = homepage
            self.sources.homepage += 1
        self._homepage_key = key
        return self._pages[key]

    def add(self, page: DiscoveredPage) -> bool:
        """Register a page if there is room and its URL is new.

        Args:
            page: Page to register.

        Returns:
            True if the page was accepted.
        """
        self._check_open()

        if len(self._pages) >= self.max_pages:
            return False

        key = normalize_url(page.url)
        if key is None:
            logger.debug("Rejected unnormalizable URL: %s", page.url)
            return False

        if key in self._pages:
            return False

        self._pages[key] = page
        counter = _COUNTER_FOR_SOURCE[page.source]
        setattr(self.sources, counter, getattr(self.sources, counter) + 1)
        return True

    def add_all(self, pages: list[DiscoveredPage]) -> int:
        """Register pages in order, returning how many were accepted."""
        return sum(1 for page in pages if self.add(page))

    def finalize(self) -> PageDiscoveryResult:
        """Close the registry and build the result.

        Returns:
            Pages sorted by source priority and capped at ``max_pages``.
        """
        self._check_open()
        self._finalized = True

        pages = sorted(self._pages.values(), key=lambda page: page.source.priority)
        pages = pages[: self.max_pages]

        return PageDiscoveryResult(
            pages=pages,
            total_found=len(pages),
            sources=self.sources,
        )

    def _check_open(self) -> None:
        if self._finalized:
            raise RegistryFinalizedError("Registry was already finalized")
