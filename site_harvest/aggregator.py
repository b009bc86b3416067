"""site_harvest.aggregator: сводный отчёт по результатам обхода."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, TypedDict

from site_harvest.crawler.models import CrawlResult


class PageInfo(TypedDict, total=False):
    """Информация об извлечённой странице."""

    url: str
    title: str
    content: str
    meta_description: Optional[str]
    meta_keywords: Optional[str]
    language: str
    content_length: int
    word_count: int


class CrawlStats(TypedDict):
    """Сводные показатели обхода."""

    total_pages: int
    total_words: int
    total_characters: int
    fetched_urls: int
    languages: Dict[str, int]


@dataclass(slots=True)
class CrawlReport:
    """Отчёт по одному заданию обхода: страницы и сводка."""

    seed_url: str
    site_id: str
    pages: List[PageInfo] = field(default_factory=list)
    stats: Optional[CrawlStats] = None

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление отчёта."""
        return json.dumps(asdict(self), ensure_ascii=False, indent=2 if pretty else None)


def _stats(result: CrawlResult) -> CrawlStats:
    return {
        "total_pages": len(result),
        "total_words": sum(p.word_count for p in result),
        "total_characters": sum(p.content_length for p in result),
        "fetched_urls": result.fetch_count,
        "languages": dict(Counter(p.language for p in result)),
    }


def aggregate_results(result: CrawlResult) -> CrawlReport:
    """Собирает CrawlReport из CrawlResult; страницы упорядочены по URL."""
    pages: List[PageInfo] = [
        PageInfo(**page.to_dict()) for page in sorted(result, key=lambda p: p.url)
    ]
    return CrawlReport(
        seed_url=result.seed_url,
        site_id=result.site_id,
        pages=pages,
        stats=_stats(result),
    )
