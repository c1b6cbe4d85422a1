"""Shared fixtures: a fake website served through httpx.MockTransport."""

from typing import Any, Callable
from urllib.parse import urlsplit, urlunsplit

import httpx
import pytest

from pagescout.config import get_default_config, merge_configs

BASE_URL = "https://example.com"


def route_key(url: str) -> str:
    """Canonical lookup key; a bare host means its root path."""
    parts = urlsplit(url)
    return urlunsplit(parts._replace(path=parts.path or "/"))


def urlset(*paths: str, base: str = BASE_URL) -> str:
    """Build a leaf sitemap listing the given paths."""
    entries = "".join(f"<url><loc>{base}{path}</loc></url>" for path in paths)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</urlset>'
    )


def sitemap_index(*urls: str) -> str:
    """Build a sitemap index listing the given sitemap URLs."""
    entries = "".join(f"<sitemap><loc>{url}</loc></sitemap>" for url in urls)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        f'<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">{entries}</sitemapindex>'
    )


def links_page(*hrefs: str) -> str:
    """Build an HTML page linking to the given targets."""
    anchors = "".join(f'<a href="{href}">Link to {href.strip("/")}</a>' for href in hrefs)
    return f"<html><body><nav>{anchors}</nav></body></html>"


class FakeSite:
    """Canned responses keyed by URL; anything unknown answers 404."""

    def __init__(self, unknown_raises: bool = False):
        self.routes: dict[str, Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: list[httpx.Request] = []
        self.unknown_raises = unknown_raises

    def xml(self, url: str, body: str) -> "FakeSite":
        self.routes[route_key(url)] = lambda request: httpx.Response(
            200, text=body, headers={"content-type": "application/xml"}
        )
        return self

    def html(self, url: str, body: str) -> "FakeSite":
        self.routes[route_key(url)] = lambda request: httpx.Response(200, html=body)
        return self

    def status(self, url: str, code: int) -> "FakeSite":
        self.routes[route_key(url)] = lambda request: httpx.Response(code)
        return self

    def fail(self, url: str) -> "FakeSite":
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        self.routes[route_key(url)] = handler
        return self

    def route(self, url: str, handler: Callable[[httpx.Request], httpx.Response]) -> "FakeSite":
        self.routes[route_key(url)] = handler
        return self

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get(route_key(str(request.url)))
        if handler is None:
            if self.unknown_raises:
                raise httpx.ConnectTimeout("timed out", request=request)
            return httpx.Response(404)
        return handler(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle), follow_redirects=True)

    def requested(self, url: str, method: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if route_key(str(request.url)) == route_key(url)
            and (method is None or request.method == method)
        )


def make_config(**sections: Any) -> dict[str, Any]:
    """Defaults without the politeness delay, with section overrides."""
    config = merge_configs(get_default_config(), {"crawl": {"delay_seconds": 0}})
    return merge_configs(config, sections)


@pytest.fixture
def site() -> FakeSite:
    return FakeSite()


@pytest.fixture
def config() -> dict[str, Any]:
    return make_config()
