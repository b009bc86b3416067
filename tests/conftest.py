# File: tests/conftest.py
import asyncio
import logging
from typing import Dict, List, Sequence

import pytest
from bs4 import BeautifulSoup

from site_harvest.config import CrawlConfig
from site_harvest.crawler.models import PageData
from site_harvest.errors import FetchError
from site_harvest.logger import LOGGER_NAME


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


def article(
    words: int,
    *,
    title: str = "Article",
    lang: str = "en",
    links: Sequence[str] = (),
    nav: Sequence[str] = (),
) -> str:
    """Return an HTML page whose <article> holds *words* words of text.

    *links* become anchors inside the article, *nav* anchors inside a <nav>.
    """
    body = " ".join(f"word{i}" for i in range(words))
    anchors = "".join(f'<a href="{href}">link</a>' for href in links)
    menu = "".join(f'<a href="{href}">menu</a>' for href in nav)
    return (
        f'<html lang="{lang}"><head><title>{title}</title></head><body>'
        f"<nav>{menu}</nav>"
        f"<article><h1>{title}</h1><p>{body}</p>{anchors}</article></body></html>"
    )


class StubFetcher:
    """Serves canned HTML by URL and records every fetch, like a tiny fake web."""

    def __init__(self, pages: Dict[str, str], delay: float = 0.0) -> None:
        self.pages = pages
        self.delay = delay
        self.calls: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch(self, url: str) -> PageData:
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if url not in self.pages:
                raise FetchError(url, "HTTP 404", status=404)
            return PageData(url=url, document=BeautifulSoup(self.pages[url], "html.parser"))
        finally:
            self.in_flight -= 1


@pytest.fixture(autouse=True)
def reset_project_logger():
    """CLI tests reconfigure the project logger; undo that after every test."""
    yield
    lg = logging.getLogger(LOGGER_NAME)
    for handler in list(lg.handlers):
        lg.removeHandler(handler)
        handler.close()
    lg.setLevel(logging.NOTSET)
    lg.propagate = True


@pytest.fixture()
def article_html():
    return article


@pytest.fixture()
def stub_fetcher():
    """Factory: ``stub_fetcher({url: html}, delay=0.0)``."""
    return StubFetcher


@pytest.fixture()
def basic_config() -> CrawlConfig:
    """
    Return a basic valid CrawlConfig for crawler tests.
    """
    return CrawlConfig(
        seed_url="https://site.test/",
        max_depth=1,
        max_pages=10,
        fetch_timeout=2.0,
        user_agent="TestAgent/1.0",
    )
