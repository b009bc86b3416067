from __future__ import annotations

import asyncio
import enum
import time
from typing import List, Optional

from aiohttp import ClientSession, ClientTimeout

from site_harvest.config import CrawlConfig
from site_harvest.crawler.fetcher import Fetcher, PageFetcher
from site_harvest.crawler.link_extractor import extract_links
from site_harvest.crawler.models import CrawlResult, ExtractedPage, PageData
from site_harvest.crawler.url_filter import is_eligible, normalize_url
from site_harvest.crawler.validator import ContentValidator
from site_harvest.crawler.visited import VisitedSet
from site_harvest.errors import FetchError, ParseError
from site_harvest.logger import get_logger
from site_harvest.parser.html_parser import ContentExtractor
from site_harvest.storage import PageSink

__all__ = ("AsyncCrawler", "CrawlState")


class CrawlState(enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    DONE = "done"


class AsyncCrawler:
    """Depth- and page-bounded concurrent crawler.

    Every accepted page's eligible links are visited as child coroutines
    that the parent joins before returning (structured join). In-flight
    fetches are capped by a semaphore of ``config.concurrency`` slots,
    held only around network I/O so a waiting parent never blocks a child.
    The page budget is a hard cap: claims go through
    :meth:`VisitedSet.try_claim` with ``config.max_pages`` as the limit.
    Once the budget is spent the crawler is DRAINING: nothing new is
    claimed and only branches already in flight finish.
    """

    def __init__(
        self,
        config: CrawlConfig,
        fetcher: Optional[PageFetcher] = None,
        sink: Optional[PageSink] = None,
        owner_id: Optional[str] = None,
        extractor: Optional[ContentExtractor] = None,
        validator: Optional[ContentValidator] = None,
    ) -> None:
        self.config = config
        self.fetcher = fetcher
        self.sink = sink
        self.owner_id = owner_id or config.owner_id
        self.extractor = extractor or ContentExtractor()
        self.validator = validator or ContentValidator(config.min_content_chars, config.min_word_count)
        self.seed = normalize_url(config.seed)
        self.visited = VisitedSet()
        self.state = CrawlState.IDLE
        self.fetch_count = 0
        self.session: Optional[ClientSession] = None
        self.logger = get_logger("crawler")
        self._slots: Optional[asyncio.Semaphore] = None

    async def __aenter__(self) -> AsyncCrawler:
        if self.fetcher is None:
            self.session = ClientSession(
                timeout=ClientTimeout(total=self.config.fetch_timeout),
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self.fetcher = Fetcher(self.session, self.config)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def crawl(self) -> CrawlResult:
        if self.fetcher is None:
            raise RuntimeError("Fetcher not initialized; use 'async with AsyncCrawler(...)'")
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"Crawler already used (state={self.state.value})")

        self.logger.info(
            "Crawl started: %s (max_depth=%d, max_pages=%d, concurrency=%d)",
            self.seed, self.config.max_depth, self.config.max_pages, self.config.concurrency,
        )
        start = time.monotonic()
        self._slots = asyncio.Semaphore(self.config.concurrency)
        self.state = CrawlState.RUNNING
        pages: List[ExtractedPage] = []
        try:
            if self.visited.try_claim(self.seed, self.config.max_pages):
                pages = await self._branch(self.seed, 0)
        except asyncio.CancelledError:
            self.state = CrawlState.DONE
            raise

        # every branch has been joined by now
        self._drain()
        duration = time.monotonic() - start
        self.logger.info(
            "Crawl finished: %d accepted of %d fetched in %.2f s",
            len(pages), self.fetch_count, duration,
        )
        result = CrawlResult(
            seed_url=self.seed,
            site_id=self.owner_id,
            pages=pages,
            fetch_count=self.fetch_count,
        )
        self.state = CrawlState.DONE
        return result

    async def _visit(self, url: str, depth: int) -> List[ExtractedPage]:
        """Fetch, extract, validate and emit *url*, then expand its links."""
        page = await self._fetch(url)
        if page is None:
            return []

        # links first: extraction strips navigation out of the tree
        links = extract_links(page) if depth < self.config.max_depth else []

        accepted: List[ExtractedPage] = []
        extracted = self._extract(page)
        if extracted is not None and self.validator.is_acceptable(extracted):
            accepted.append(extracted)
            await self._emit(extracted)
        else:
            self.logger.debug("Rejected content: %s", url)
            if not self.config.follow_rejected_links:
                return accepted

        children = []
        for link in links:
            if not is_eligible(link, self.seed, self.config.skip_extensions):
                continue
            if not self.visited.try_claim(link, self.config.max_pages):
                if self.visited.size() >= self.config.max_pages:
                    if self.state is CrawlState.RUNNING:
                        self.logger.info("Page budget reached (%d); draining in-flight pages", self.visited.size())
                    self._drain()
                    break
                continue
            children.append(self._branch(link, depth + 1))
        if children:
            for branch in await asyncio.gather(*children):
                accepted.extend(branch)
        return accepted

    async def _branch(self, url: str, depth: int) -> List[ExtractedPage]:
        try:
            return await self._visit(url, depth)
        except Exception:
            # one broken page must not cancel its siblings in the join
            self.logger.exception("Unexpected error while visiting %s", url)
            return []

    def _drain(self) -> None:
        """No more URLs can be claimed; only in-flight branches remain."""
        if self.state is CrawlState.RUNNING:
            self.state = CrawlState.DRAINING

    async def _fetch(self, url: str) -> Optional[PageData]:
        if self._slots is None or self.fetcher is None:
            raise RuntimeError("Crawler not started; call crawl()")
        async with self._slots:
            self.fetch_count += 1
            try:
                return await self.fetcher.fetch(url)
            except FetchError as exc:
                self.logger.warning("Failed to fetch %s: %s", url, exc.reason)
                return None

    def _extract(self, page: PageData) -> Optional[ExtractedPage]:
        try:
            return self.extractor.extract(page.document, page.url)
        except ParseError as exc:
            self.logger.warning("Failed to extract %s: %s", page.url, exc.reason)
            return None

    async def _emit(self, page: ExtractedPage) -> None:
        if self.sink is None:
            return
        try:
            await self.sink.save(page, self.owner_id)
        except Exception:
            self.logger.exception("Storage rejected page %s", page.url)

    run = crawl
