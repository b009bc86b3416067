"""site_harvest.engine: точка входа задания обхода (CrawlJob) и обёртки для CLI."""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional, Union

from site_harvest.config import CrawlConfig, make_config
from site_harvest.crawler.crawler import AsyncCrawler
from site_harvest.crawler.fetcher import PageFetcher
from site_harvest.crawler.models import CrawlResult
from site_harvest.logger import logger
from site_harvest.storage import PageSink

__all__ = ["CrawlJob", "start_crawl", "run_crawl"]


class CrawlJob:
    """Одно задание обхода: конфигурация на входе, CrawlResult на выходе.

    Ошибки отдельных страниц не пробрасываются; единственная ошибка,
    доступная вызывающему, - ConfigurationError, и она возникает до старта.
    """

    def __init__(
        self,
        config: Union[CrawlConfig, Mapping[str, Any]],
        sink: Optional[PageSink] = None,
        fetcher: Optional[PageFetcher] = None,
    ) -> None:
        self.config = config if isinstance(config, CrawlConfig) else make_config(**config)
        self.sink = sink
        self.fetcher = fetcher

    async def run(self) -> CrawlResult:
        """Запускает обход до завершения всех ветвей и возвращает принятые страницы."""
        logger.info("Starting crawl job for %s (owner=%s)", self.config.seed, self.config.owner_id)
        async with AsyncCrawler(self.config, fetcher=self.fetcher, sink=self.sink) as crawler:
            result = await crawler.crawl()
        logger.info("Crawl job for %s done: %d pages", self.config.seed, len(result))
        return result


async def start_crawl(cfg: CrawlConfig, sink: Optional[PageSink] = None) -> CrawlResult:
    """
    Корутина для CLI: выполняет CrawlJob и возвращает CrawlResult.

    Parameters
    ----------
    cfg : CrawlConfig
        Конфигурация обхода.
    sink : PageSink, optional
        Хранилище, которому передаётся каждая принятая страница.
    """
    return await CrawlJob(cfg, sink=sink).run()


def run_crawl(
    config: Union[CrawlConfig, Mapping[str, Any]],
    sink: Optional[PageSink] = None,
    fetcher: Optional[PageFetcher] = None,
) -> CrawlResult:
    """Синхронная обёртка над CrawlJob.run() для кода вне event loop."""
    job = CrawlJob(config, sink=sink, fetcher=fetcher)
    return asyncio.run(job.run())
