"""
Set of URLs already claimed by one crawl job.
"""
from __future__ import annotations

import threading
from typing import Optional, Set


class VisitedSet:
    """
    Concurrency-safe URL deduplication shared by all workers of one crawl.

    A URL is inserted at most once; only the caller whose :meth:`try_claim`
    returned True may fetch it. When *limit* is passed, the size check and
    the insert happen under the same lock, so the set never grows past it.
    """

    def __init__(self) -> None:
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def try_claim(self, url: str, limit: Optional[int] = None) -> bool:
        with self._lock:
            if url in self._urls:
                return False
            if limit is not None and len(self._urls) >= limit:
                return False
            self._urls.add(url)
            return True

    def size(self) -> int:
        with self._lock:
            return len(self._urls)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, url: object) -> bool:
        with self._lock:
            return url in self._urls
