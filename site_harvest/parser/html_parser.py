"""HTML content extraction for SiteHarvest.

Turns a parsed document into an :class:`~site_harvest.crawler.models.ExtractedPage`:

* boilerplate regions (navigation, header/footer, sidebars, ads, scripts)
  are removed first;
* the title falls back from ``<head><title>`` to the first ``<h1>``, to
  any ``<title>``, to ``"Untitled Page"``;
* the main text comes from the first strategy in :data:`MAIN_CONTENT_STRATEGIES`
  that yields non-empty text;
* description, keywords and language come from ``<meta>`` tags and
  ``<html lang>``.

Extraction mutates the document it is given. Callers that still need the
full tree (e.g. for link enumeration) must read it beforehand.
"""
from __future__ import annotations

import re
from collections.abc import Callable, Sequence
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_harvest.crawler.models import DEFAULT_LANGUAGE, UNTITLED, ExtractedPage
from site_harvest.errors import ParseError

__all__: Sequence[str] = (
    "BOILERPLATE_SELECTORS",
    "MAIN_CONTENT_STRATEGIES",
    "ContentExtractor",
    "clean_text",
    "strip_boilerplate",
    "resolve_title",
    "find_main_region",
)

BOILERPLATE_SELECTORS: tuple[str, ...] = (
    "nav",
    "header",
    "footer",
    "aside",
    "script",
    "style",
    "noscript",
    ".navigation",
    ".nav",
    ".menu",
    ".sidebar",
    "#sidebar",
    ".ads",
    ".advertisement",
)

_WS_RE = re.compile(r"\s+")

Strategy = Callable[[BeautifulSoup], Optional[Tag]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def clean_text(node: Tag) -> str:
    """Visible text of *node* with every whitespace run collapsed to one space."""
    return _WS_RE.sub(" ", node.get_text(" ")).strip()


def strip_boilerplate(soup: BeautifulSoup, selectors: Sequence[str] = BOILERPLATE_SELECTORS) -> int:
    """Detach all elements matching *selectors*; returns how many were removed."""
    removed = 0
    for selector in selectors:
        for element in soup.select(selector):
            # extract() is safe on nodes whose ancestor was already detached
            element.extract()
            removed += 1
    return removed


def resolve_title(soup: BeautifulSoup) -> str:
    head = soup.head
    if head is not None and head.title is not None:
        text = clean_text(head.title)
        if text:
            return text
    for name in ("h1", "title"):
        tag = soup.find(name)
        if isinstance(tag, Tag):
            text = clean_text(tag)
            if text:
                return text
    return UNTITLED


def _first(name: str) -> Strategy:
    def strategy(soup: BeautifulSoup) -> Optional[Tag]:
        tag = soup.find(name)
        return tag if isinstance(tag, Tag) else None

    strategy.__name__ = f"first_{name}"
    return strategy


def _content_container(soup: BeautifulSoup) -> Optional[Tag]:
    return soup.select_one(".content, .main-content, #content, #main")


def _body(soup: BeautifulSoup) -> Optional[Tag]:
    return soup.body


def _whole_document(soup: BeautifulSoup) -> Optional[Tag]:
    # fragments only; a page with a <body> never falls back to <head> text
    return soup if soup.body is None else None


MAIN_CONTENT_STRATEGIES: tuple[Strategy, ...] = (
    _first("main"),
    _first("article"),
    _content_container,
    _body,
    _whole_document,
)


def find_main_region(
    soup: BeautifulSoup, strategies: Sequence[Strategy] = MAIN_CONTENT_STRATEGIES
) -> tuple[Optional[Tag], str]:
    """Try *strategies* in order; return the first region with non-empty text."""
    for strategy in strategies:
        region = strategy(soup)
        if region is None:
            continue
        text = clean_text(region)
        if text:
            return region, text
    return None, ""


def _meta_content(soup: BeautifulSoup, name: str) -> Optional[str]:
    tag = soup.find("meta", attrs={"name": re.compile(rf"^\s*{name}\s*$", re.IGNORECASE)})
    if not isinstance(tag, Tag):
        return None
    value = tag.get("content")
    if not isinstance(value, str):
        return None
    return value.strip() or None


def _language(soup: BeautifulSoup) -> str:
    html = soup.find("html")
    if isinstance(html, Tag):
        lang = html.get("lang")
        if isinstance(lang, str) and lang.strip():
            return lang.strip()[:2].lower()
    return DEFAULT_LANGUAGE


# ---------------------------------------------------------------------------
# Public class
# ---------------------------------------------------------------------------


class ContentExtractor:
    """Boilerplate-stripping main-content extractor.

    Parameters
    ----------
    boilerplate
        CSS selectors removed before anything else is read.
    strategies
        Ordered main-content locators; see :data:`MAIN_CONTENT_STRATEGIES`.
    """

    def __init__(
        self,
        boilerplate: Sequence[str] = BOILERPLATE_SELECTORS,
        strategies: Sequence[Strategy] = MAIN_CONTENT_STRATEGIES,
    ) -> None:
        self.boilerplate = tuple(boilerplate)
        self.strategies = tuple(strategies)

    def extract(self, document: BeautifulSoup, url: str) -> Optional[ExtractedPage]:
        """Return the page's content, or None when no usable text remains.

        Raises ParseError if *document* holds no element tree at all.
        """
        if not isinstance(document, BeautifulSoup) or document.find(True) is None:
            raise ParseError(url, "document has no elements")

        strip_boilerplate(document, self.boilerplate)
        title = resolve_title(document)
        _, content = find_main_region(document, self.strategies)
        if not content:
            return None

        return ExtractedPage(
            url=url,
            title=title,
            content=content,
            meta_description=_meta_content(document, "description"),
            meta_keywords=_meta_content(document, "keywords"),
            language=_language(document),
        )
