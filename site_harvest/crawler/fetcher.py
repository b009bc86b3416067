# site_harvest/crawler/fetcher.py
"""
Fetcher module: one bounded HTTP GET per URL, parsed into a BeautifulSoup tree.
"""
from __future__ import annotations

import asyncio
from typing import Protocol

from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout
from bs4 import BeautifulSoup, ParserRejectedMarkup

from site_harvest.config import CrawlConfig
from site_harvest.crawler.models import PageData
from site_harvest.errors import FetchError
from site_harvest.logger import get_logger

HTML_MIME_TYPES = ("text/html", "application/xhtml+xml")

log = get_logger("fetcher")


class PageFetcher(Protocol):
    async def fetch(self, url: str) -> PageData: ...


class Fetcher:
    """Single-attempt GET with redirect following, timeout and User-Agent."""

    def __init__(self, session: ClientSession, config: CrawlConfig) -> None:
        self.session = session
        self.config = config
        self._timeout = ClientTimeout(total=config.fetch_timeout)

    async def fetch(self, url: str) -> PageData:
        """
        Fetch *url* and parse the body as HTML.

        Raises FetchError on network failure, timeout, non-2xx status,
        non-HTML content, an oversized body, an undecodable one or markup the
        parser rejects. No retries.
        """
        try:
            async with self.session.get(
                url,
                allow_redirects=True,
                timeout=self._timeout,
                headers={"User-Agent": self.config.user_agent},
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}", status=resp.status)
                if resp.content_type not in HTML_MIME_TYPES:
                    raise FetchError(url, f"unsupported content type {resp.content_type!r}", status=resp.status)
                if resp.content_length is not None and resp.content_length > self.config.max_body_bytes:
                    raise FetchError(url, f"body too large ({resp.content_length} bytes)", status=resp.status)
                body = await self._read_body(url, resp)
                final_url = str(resp.url)
                encoding = resp.get_encoding()
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timed out after {self.config.fetch_timeout}s") from exc
        except ClientError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc

        try:
            text = body.decode(encoding, errors="replace")
        except LookupError as exc:
            raise FetchError(url, f"unknown encoding {encoding!r}") from exc

        try:
            document = BeautifulSoup(text, "html.parser")
        except ParserRejectedMarkup as exc:
            raise FetchError(url, f"unparseable markup: {exc}") from exc
        log.debug("Fetched %s (%d bytes) -> %s", url, len(body), final_url)
        return PageData(url=url, document=document, final_url=final_url)

    async def _read_body(self, url: str, resp: ClientResponse) -> bytes:
        # Content-Length may be absent (chunked), so the cap is enforced while streaming
        limit = self.config.max_body_bytes
        body = bytearray()
        async for chunk in resp.content.iter_chunked(64 * 1024):
            body.extend(chunk)
            if len(body) > limit:
                raise FetchError(url, f"body too large (over {limit} bytes)", status=resp.status)
        return bytes(body)
