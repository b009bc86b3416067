# site_harvest/crawler/link_extractor.py
"""
Outbound link enumeration for fetched pages.
"""
from __future__ import annotations

from typing import List
from urllib.parse import urljoin, urlparse

from bs4.element import Tag

from site_harvest.crawler.models import PageData
from site_harvest.crawler.url_filter import normalize_url


def extract_links(page: PageData) -> List[str]:
    """
    Extract absolute, normalized HTTP(S) links from a parsed page.

    Relative hrefs resolve against ``<base href>`` when present, otherwise
    against the page's final (post-redirect) URL. Ignores mailto:, tel:,
    javascript: and fragment-only links; duplicates are dropped, order kept.
    Host filtering is left to the URL classifier.
    """
    base = page.final_url
    base_tag = page.document.find("base", href=True)
    if isinstance(base_tag, Tag) and isinstance(base_tag.get("href"), str):
        base = urljoin(base, base_tag["href"].strip())

    seen: set[str] = set()
    links: List[str] = []
    for tag in page.document.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if not isinstance(href_val, str):
            continue
        raw = href_val.strip()
        if not raw or raw.startswith(("#", "mailto:", "javascript:", "tel:")):
            continue
        try:
            absolute = urljoin(base, raw)
            if urlparse(absolute).scheme not in ("http", "https"):
                continue
            normalized = normalize_url(absolute)
        except ValueError:
            # malformed netloc, e.g. an unclosed IPv6 bracket
            continue
        if normalized not in seen:
            seen.add(normalized)
            links.append(normalized)
    return links
