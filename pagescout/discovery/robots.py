"""Robots.txt parsing - sitemap declarations."""

import logging
from urllib.parse import urljoin

import httpx

logger = logging.getLogger(__name__)


def parse_sitemap_directives(content: str) -> list[str]:
    """Extract ``Sitemap:`` URLs from robots.txt content.

    Sitemap directives apply globally, regardless of user-agent group.

    Args:
        content: Raw robots.txt content.

    Returns:
        Declared sitemap URLs in file order, without duplicates.
    """
    sitemaps: list[str] = []

    for line in content.splitlines():
        line = line.split("#", 1)[0].strip()

        if ":" not in line:
            continue

        directive, value = line.split(":", 1)
        value = value.strip()

        if directive.strip().lower() == "sitemap" and value and value not in sitemaps:
            sitemaps.append(value)

    return sitemaps


async def fetch_robots_sitemaps(
    client: httpx.AsyncClient,
    base_url: str,
    timeout: float = 5.0,
) -> list[str]:
    """Fetch robots.txt and return the sitemaps it declares.

    Args:
        client: HTTP client.
        base_url: Base URL of the target.
        timeout: Request timeout.

    Returns:
        Declared sitemap URLs, empty if robots.txt is missing.
    """
    robots_url = urljoin(base_url + "/", "/robots.txt")

    try:
        response = await client.get(robots_url, timeout=timeout)
    except httpx.HTTPError as e:
        logger.debug("robots.txt unavailable at %s: %s", robots_url, e)
        return []

    if response.status_code != 200:
        return []

    return parse_sitemap_directives(response.text)
