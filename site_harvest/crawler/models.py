"""
Data models for the SiteHarvest crawler.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Iterator, List, Optional

from bs4 import BeautifulSoup

__all__ = ("PageData", "ExtractedPage", "CrawlResult", "DEFAULT_LANGUAGE", "UNTITLED")

DEFAULT_LANGUAGE = "en"
UNTITLED = "Untitled Page"


@dataclass(slots=True)
class PageData:
    """A fetched and parsed HTML document."""

    url: str
    document: BeautifulSoup
    final_url: str = ""

    def __post_init__(self) -> None:
        if not self.final_url:
            self.final_url = self.url


@dataclass(slots=True, frozen=True)
class ExtractedPage:
    """Clean text and metadata of one page, derived from a single fetch."""

    url: str
    title: str
    content: str
    meta_description: Optional[str] = None
    meta_keywords: Optional[str] = None
    language: str = DEFAULT_LANGUAGE

    @property
    def content_length(self) -> int:
        return len(self.content)

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["content_length"] = self.content_length
        data["word_count"] = self.word_count
        return data


@dataclass(slots=True)
class CrawlResult:
    """Accepted pages of one crawl job. Page order carries no meaning."""

    seed_url: str
    site_id: str
    pages: List[ExtractedPage] = field(default_factory=list)
    fetch_count: int = 0

    def __iter__(self) -> Iterator[ExtractedPage]:
        return iter(self.pages)

    def __len__(self) -> int:
        return len(self.pages)

    def urls(self) -> List[str]:
        return [p.url for p in self.pages]
