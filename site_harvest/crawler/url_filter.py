"""
URL eligibility and normalization for the SiteHarvest crawler.
"""
from __future__ import annotations

import posixpath
from typing import Iterable, Tuple
from urllib.parse import parse_qsl, quote, unquote, urlencode, urlparse, urlunparse

__all__ = ("DEFAULT_SKIP_EXTENSIONS", "is_eligible", "normalize_url", "same_host")

DEFAULT_SKIP_EXTENSIONS: Tuple[str, ...] = (
    # stylesheets / scripts
    ".css", ".js",
    # images
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp", ".bmp",
    # archives
    ".zip", ".tar", ".gz", ".rar", ".7z",
    # audio / video
    ".mp3", ".mp4", ".avi", ".mov", ".wav", ".webm",
    # documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # fonts
    ".woff", ".woff2", ".ttf",
)


def same_host(url: str, other: str) -> bool:
    """True if both URLs have the same hostname (port and case ignored)."""
    host = urlparse(url).hostname
    return bool(host) and host == urlparse(other).hostname


def is_eligible(
    candidate_url: str,
    seed_url: str,
    skip_extensions: Iterable[str] = DEFAULT_SKIP_EXTENSIONS,
) -> bool:
    """
    Decide whether a discovered link may be crawled.

    The link must be an http(s) URL on exactly the seed's host, and its path
    must not end with one of *skip_extensions* (case-insensitive).
    """
    if not candidate_url or not candidate_url.strip():
        return False
    try:
        parsed = urlparse(candidate_url.strip())
        # .hostname/.port raise ValueError on malformed netlocs
        host = parsed.hostname
        parsed.port
    except ValueError:
        return False
    if parsed.scheme.lower() not in ("http", "https") or not host:
        return False
    if not same_host(candidate_url.strip(), seed_url):
        return False
    path = unquote(parsed.path).lower()
    return not path.endswith(tuple(ext.lower() for ext in skip_extensions))


def normalize_url(url: str) -> str:
    """
    Canonical form used as the visited-set key: lowercase scheme and host,
    collapsed dot segments, ``/`` for an empty path, sorted query, no fragment.
    """
    parsed = urlparse(url.strip())
    scheme = parsed.scheme.lower()
    netloc = parsed.netloc.lower()
    path = unquote(parsed.path or "/")
    norm = posixpath.normpath(path)
    if path.endswith("/") and not norm.endswith("/"):
        norm += "/"
    if norm.startswith("//"):
        norm = "/" + norm.lstrip("/")
    if not norm.startswith("/"):
        norm = "/" + norm
    norm = quote(norm, safe="/:@!$&'()*+,;=-._~")
    qs = parse_qsl(parsed.query, keep_blank_values=True)
    qs.sort()
    query = urlencode(qs, doseq=True)
    return urlunparse((scheme, netloc, norm, "", query, ""))
