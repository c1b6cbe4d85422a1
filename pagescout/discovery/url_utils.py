"""URL utilities - normalization, validation, same-site and page-like filters."""

import re
from urllib.parse import unquote, urljoin, urlsplit

from pagescout.exceptions import InvalidBaseUrlError

# Static assets and downloads that are never audit pages
STATIC_EXTENSIONS = (
    ".pdf",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".svg",
    ".css",
    ".js",
    ".ico",
    ".xml",
    ".txt",
    ".zip",
    ".exe",
    ".dmg",
)

# Admin and upload areas
EXCLUDED_PATH_FRAGMENTS = (
    "/wp-admin/",
    "/wp-content/uploads/",
    "/admin/",
    "/api/",
)

SKIPPED_LINK_PREFIXES = ("#", "mailto:", "tel:", "javascript:", "data:")

DEFAULT_PORTS = {"http": 80, "https": 443}

_EMBEDDED_SCHEME = re.compile(r"https?:", re.IGNORECASE)
_PAGE_EXTENSION = re.compile(r"\.(html?|php)$", re.IGNORECASE)


def is_valid_url(url: str) -> bool:
    """Check if a string is an indexable HTTP/HTTPS URL.

    Rejects URLs with a second scheme embedded in the path, e.g.
    ``https://example.com/http://other.com/x``, which broken sitemap
    generators produce by concatenating URLs.

    Args:
        url: String to validate.

    Returns:
        True if valid URL.
    """
    try:
        parsed = urlsplit(url.strip())
        if parsed.scheme.lower() not in ("http", "https") or not parsed.hostname:
            return False
        parsed.port  # raises ValueError on a malformed port
    except (ValueError, AttributeError):
        return False

    return not _EMBEDDED_SCHEME.search(parsed.path)


def normalize_url(url: str, base: str | None = None) -> str | None:
    """Build the deduplication key for a URL.

    - Resolves relative URLs against ``base``
    - Lowercases the scheme and host, strips a leading ``www.``
    - Removes default ports (80, 443)
    - Removes trailing slashes from paths (except root)
    - Keeps the query string, drops the fragment

    Args:
        url: Absolute or relative URL.
        base: URL to resolve relative URLs against.

    Returns:
        Normalized key, or None if the URL is rejected.
    """
    try:
        if base:
            url = urljoin(base, url.strip())
    except ValueError:
        return None

    if not is_valid_url(url):
        return None

    parsed = urlsplit(url.strip())
    scheme = parsed.scheme.lower()
    host = _strip_www(parsed.hostname.lower())

    port = parsed.port
    netloc = host if port is None or DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/") or "/"

    key = f"{scheme}://{netloc}{path}"
    if parsed.query:
        key = f"{key}?{parsed.query}"
    return key


def resolve_url(href: str, referrer: str) -> str | None:
    """Resolve a link target against the page it was found on.

    Args:
        href: Raw ``href`` attribute value.
        referrer: URL of the page containing the link.

    Returns:
        Absolute URL, or None for in-page, mail, phone and script targets.
    """
    href = (href or "").strip()
    if not href or href.lower().startswith(SKIPPED_LINK_PREFIXES):
        return None

    try:
        return urljoin(referrer, href)
    except ValueError:
        return None


def registrable_host(url: str) -> str:
    """Get the host used for same-site matching (lowercase, no ``www.``).

    Args:
        url: Full URL.

    Returns:
        Host, or an empty string if the URL cannot be parsed.
    """
    try:
        host = urlsplit(url.strip()).hostname or ""
    except ValueError:
        return ""
    return _strip_www(host.lower())


def is_same_site(url: str, base_url: str) -> bool:
    """Check if two URLs belong to the same site, ignoring ``www.``."""
    host = registrable_host(url)
    return bool(host) and host == registrable_host(base_url)


def is_page_like(url: str) -> bool:
    """Check whether a URL is a candidate content page.

    Excludes static assets, admin and upload areas, feeds, attachment
    pages and URLs carrying a fragment.

    Args:
        url: Absolute URL.

    Returns:
        True if the URL looks like a page.
    """
    if "#" in url:
        return False

    try:
        parsed = urlsplit(url.strip())
    except ValueError:
        return False

    path = parsed.path.lower()

    if path.endswith(STATIC_EXTENSIONS):
        return False

    if any(fragment in path for fragment in EXCLUDED_PATH_FRAGMENTS):
        return False

    if "/feed/" in path or path.endswith("/feed"):
        return False

    if "attachment_id=" in parsed.query:
        return False

    return True


def is_valid_page_url(url: str, base_url: str) -> bool:
    """Check that a URL is valid, on the same site and page-like."""
    return is_valid_url(url) and is_same_site(url, base_url) and is_page_like(url)


def title_from_url(url: str) -> str:
    """Derive a readable title from the last path segment.

    Args:
        url: Page URL.

    Returns:
        Title such as ``"Case Studies"`` for ``/case-studies/``.
    """
    try:
        path = urlsplit(url).path
    except ValueError:
        return url

    segments = [segment for segment in path.split("/") if segment]
    if not segments:
        return "Homepage"

    title = _PAGE_EXTENSION.sub("", unquote(segments[-1]))
    title = re.sub(r"[-_]+", " ", title).strip()
    return re.sub(r"\b\w", lambda m: m.group(0).upper(), title) or url


def prepare_base_url(base_url: str) -> str:
    """Turn user input into a site root URL.

    Adds ``https://`` when no scheme is given and strips trailing slashes.

    Args:
        base_url: Domain or URL as supplied by the caller.

    Returns:
        Base URL without trailing slash.

    Raises:
        InvalidBaseUrlError: If no crawlable http(s) URL can be built.
    """
    candidate = (base_url or "").strip()
    if not candidate:
        raise InvalidBaseUrlError("Base URL is empty")

    if "://" not in candidate:
        candidate = f"https://{candidate}"

    candidate = candidate.rstrip("/")

    try:
        parsed = urlsplit(candidate)
        parsed.port
    except ValueError as e:
        raise InvalidBaseUrlError(f"Invalid base URL {base_url!r}: {e}") from e

    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidBaseUrlError(f"Unsupported scheme in base URL {base_url!r}")
    if not parsed.hostname:
        raise InvalidBaseUrlError(f"Base URL {base_url!r} has no host")

    return candidate


def _strip_www(host: str) -> str:
    return host[4:] if host.startswith("www.") else host
