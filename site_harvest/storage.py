"""site_harvest.storage: интерфейс хранилища страниц и реализация в памяти."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol, Tuple

from site_harvest.crawler.models import ExtractedPage

__all__ = ("PageSink", "StoredPage", "InMemoryPageStore")


class PageSink(Protocol):
    """Получатель принятых страниц. Вызов должен быть идемпотентным."""

    async def save(self, page: ExtractedPage, owner_id: str) -> None: ...


@dataclass(slots=True)
class StoredPage:
    """Страница в хранилище: то, что видит конвейер индексации."""

    owner_id: str
    page: ExtractedPage
    created_at: datetime
    is_indexed: bool = False
    vector_id: Optional[str] = None

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def title(self) -> str:
        return self.page.title

    @property
    def content(self) -> str:
        return self.page.content

    @property
    def language(self) -> str:
        return self.page.language


class InMemoryPageStore:
    """Хранилище в памяти: upsert по (owner_id, url), безопасно для конкурентных вызовов."""

    def __init__(self) -> None:
        self._pages: Dict[Tuple[str, str], StoredPage] = {}
        self._lock = threading.Lock()

    async def save(self, page: ExtractedPage, owner_id: str) -> None:
        key = (owner_id, page.url)
        with self._lock:
            existing = self._pages.get(key)
            if existing is not None and existing.page == page:
                return
            # новая версия контента сбрасывает индексацию
            self._pages[key] = StoredPage(
                owner_id=owner_id, page=page, created_at=datetime.now(timezone.utc)
            )

    def list_pages(self, owner_id: str) -> List[StoredPage]:
        with self._lock:
            return [p for (owner, _), p in self._pages.items() if owner == owner_id]

    def list_unindexed(self, owner_id: str) -> List[StoredPage]:
        return [p for p in self.list_pages(owner_id) if not p.is_indexed]

    def get(self, owner_id: str, url: str) -> Optional[StoredPage]:
        with self._lock:
            return self._pages.get((owner_id, url))

    def mark_indexed(self, owner_id: str, url: str, vector_id: str) -> None:
        with self._lock:
            stored = self._pages.get((owner_id, url))
            if stored is None:
                raise KeyError(f"page not stored: {owner_id} {url}")
            stored.is_indexed = True
            stored.vector_id = vector_id

    def stats(self, owner_id: str) -> Dict[str, int]:
        """Сводка по сайту: число страниц, слов, символов и проиндексированных страниц."""
        pages = self.list_pages(owner_id)
        return {
            "total_pages": len(pages),
            "total_words": sum(p.page.word_count for p in pages),
            "total_characters": sum(p.page.content_length for p in pages),
            "indexed_pages": sum(1 for p in pages if p.is_indexed),
        }

    def __len__(self) -> int:
        with self._lock:
            return len(self._pages)
