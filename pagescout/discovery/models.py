"""Discovery data model - pages, sources and results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class PageSource(str, Enum):
    """Where a discovered page came from."""

    HOMEPAGE = "homepage"
    SITEMAP = "sitemap"
    INTERNAL_LINK = "internal-link"

    @property
    def priority(self) -> int:
        """Sort ordinal: homepage first, then sitemap, then internal links."""
        return _SOURCE_PRIORITY[self]


_SOURCE_PRIORITY = {
    PageSource.HOMEPAGE: 0,
    PageSource.SITEMAP: 1,
    PageSource.INTERNAL_LINK: 2,
}


@dataclass
class DiscoveredPage:
    """A page found during discovery.

    ``url`` keeps the form it was found in; deduplication works on the
    normalized key (see ``url_utils.normalize_url``).
    """

    url: str
    title: str
    source: PageSource
    description: Optional[str] = None
    last_modified: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Wire form, optional keys omitted when unset."""
        data: dict[str, Any] = {
            "url": self.url,
            "title": self.title,
            "source": self.source.value,
        }
        if self.description is not None:
            data["description"] = self.description
        if self.last_modified is not None:
            data["lastModified"] = self.last_modified
        return data


@dataclass
class SourceCounts:
    """Pages accepted into the registry, per source."""

    sitemap: int = 0
    internal_links: int = 0
    homepage: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "sitemap": self.sitemap,
            "internalLinks": self.internal_links,
            "homepage": self.homepage,
        }


@dataclass
class PageDiscoveryResult:
    """Final, capped and priority-ordered discovery output."""

    pages: list[DiscoveredPage]
    total_found: int
    sources: SourceCounts = field(default_factory=SourceCounts)

    @property
    def urls(self) -> list[str]:
        return [page.url for page in self.pages]

    def to_dict(self) -> dict[str, Any]:
        return {
            "pages": [page.to_dict() for page in self.pages],
            "totalFound": self.total_found,
            "sources": self.sources.to_dict(),
        }
