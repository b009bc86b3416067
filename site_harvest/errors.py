"""Exception hierarchy for SiteHarvest.

Per-page errors (:class:`FetchError`, :class:`ParseError`) are caught by the
crawler and only logged; :class:`ConfigurationError` is the one error a
crawl job lets escape, and it is raised before any request is made.
"""
from __future__ import annotations

from typing import Optional

__all__ = ("HarvestError", "FetchError", "ParseError", "ConfigurationError")


class HarvestError(Exception):
    """Base class for all SiteHarvest errors."""


class _PageError(HarvestError):
    def __init__(self, url: str, reason: str, *, status: Optional[int] = None) -> None:
        super().__init__(f"{url}: {reason}")
        self.url = url
        self.reason = reason
        self.status = status


class FetchError(_PageError):
    """Network failure, timeout, non-success status or unusable body."""


class ParseError(_PageError):
    """The fetched document could not be turned into page content."""


class ConfigurationError(HarvestError, ValueError):
    """Invalid crawl budget or settings; the job fails before it starts."""
