"""Exceptions raised by PageScout."""


class PageScoutError(Exception):
    """Base exception for PageScout errors."""

    pass


class InvalidBaseUrlError(PageScoutError, ValueError):
    """Raised when a base URL cannot be turned into a crawlable site root."""

    pass


class RegistryFinalizedError(PageScoutError):
    """Raised when a page registry is modified after it was finalized."""

    pass
