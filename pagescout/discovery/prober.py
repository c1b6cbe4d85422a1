"""Common path probing - concurrent existence checks for typical pages."""

import asyncio
import logging
from typing import Any

import httpx

from pagescout.config import get_section
from pagescout.discovery.models import DiscoveredPage, PageSource
from pagescout.discovery.registry import PageRegistry
from pagescout.discovery.timebox import Timebox, is_expired
from pagescout.discovery.url_utils import normalize_url, title_from_url

logger = logging.getLogger(__name__)


class PatternProber:
    """Check whether well-known content paths exist on a site."""

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        config: dict[str, Any] | None = None,
        timebox: Timebox | None = None,
    ):
        """Initialize pattern prober.

        Args:
            base_url: Site root, without trailing slash.
            client: Shared HTTP client.
            config: Configuration dictionary.
            timebox: Overall budget of the discovery call.
        """
        self.base_url = base_url
        self.client = client
        self.timebox = timebox

        probe_config = get_section(config, "probe")
        self.max_patterns = probe_config.get("max_patterns", 30)
        self.patterns: list[str] = list(probe_config.get("patterns", []))[: self.max_patterns]
        self.timeout = get_section(config, "timeouts").get("probe", 5.0)

    async def probe(self, registry: PageRegistry) -> list[DiscoveredPage]:
        """Probe every catalog path not already registered.

        All probes run at once; a failing probe never affects the others.

        Args:
            registry: Pages found so far.

        Returns:
            Pages tagged ``internal-link`` for paths that answered 2xx.
        """
        if is_expired(self.timebox):
            logger.info("Timebox expired, skipping pattern probes")
            return []

        urls: list[str] = []
        keys: set[str] = set()
        for pattern in self.patterns:
            url = f"{self.base_url}{pattern}"
            key = normalize_url(url)
            if key is None or key in keys or registry.has(url):
                continue
            keys.add(key)
            urls.append(url)

        results = await asyncio.gather(
            *(self._check_single(url) for url in urls),
            return_exceptions=True,
        )

        pages: list[DiscoveredPage] = []
        for url, result in zip(urls, results):
            if isinstance(result, BaseException):
                logger.debug("Probe failed for %s: %s", url, result)
                continue
            if result:
                pages.append(
                    DiscoveredPage(
                        url=url,
                        title=title_from_url(url),
                        source=PageSource.INTERNAL_LINK,
                    )
                )

        logger.info("Pattern probes found %d of %d paths", len(pages), len(urls))
        return pages

    async def _check_single(self, url: str) -> bool:
        """HEAD a URL, retrying as GET when HEAD is not allowed.

        Args:
            url: URL to check.

        Returns:
            True if the URL answered 2xx.
        """
        timeout = self.timebox.clamp(self.timeout) if self.timebox else self.timeout

        try:
            response = await self.client.head(url, timeout=timeout)

            if response.status_code == 405:
                response = await self.client.get(url, timeout=timeout)

            return response.is_success
        except httpx.HTTPError:
            return False
