# Fetcher and end-to-end crawl tests against a local aiohttp server
from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import ClientSession, web

from site_harvest.config import CrawlConfig
from site_harvest.crawler.fetcher import Fetcher
from site_harvest.engine import CrawlJob
from site_harvest.errors import FetchError
from site_harvest.storage import InMemoryPageStore

#: seconds the slow handler sleeps; longer than the per-fetch timeout used below
SLOW_SLEEP: float = 3.0

#: html.parser rejects unknown marked sections outright
MALFORMED_HTML = "<html><body><![UNKNOWN[]]></body></html>"


async def _serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


@pytest_asyncio.fixture
async def test_site(unused_tcp_port: int, article_html) -> AsyncIterator[tuple[str, dict]]:
    """A small site; yields (base_url, per-path hit counters with the last User-Agent)."""
    app = web.Application()
    hits: dict = {"paths": {}, "user_agent": None}

    def track(request: web.Request) -> None:
        hits["paths"][request.path] = hits["paths"].get(request.path, 0) + 1
        hits["user_agent"] = request.headers.get("User-Agent")

    async def root(request):
        track(request)
        html = article_html(
            120,
            title="Home",
            links=["/page1", "/old", "/slow", "/missing", "/banner", "/style.css", "http://other.test/x"],
        )
        return web.Response(text=html, content_type="text/html")

    async def page1(request):
        track(request)
        return web.Response(text=article_html(80, title="Page one", lang="fr-FR"), content_type="text/html")

    async def old(request):
        track(request)
        raise web.HTTPFound("/new")

    async def new(request):
        track(request)
        return web.Response(text=article_html(80, title="New home"), content_type="text/html")

    async def slow(request):
        track(request)
        await asyncio.sleep(SLOW_SLEEP)
        return web.Response(text=article_html(80), content_type="text/html")

    async def banner(request):
        track(request)
        return web.Response(body=b"\x89PNG\r\n\x1a\n" + b"\x00" * 64, content_type="image/png")

    async def broken(request):
        track(request)
        return web.Response(status=500, text="boom")

    async def hub(request):
        track(request)
        return web.Response(text=article_html(80, title="Hub", links=["/malformed", "/page1"]), content_type="text/html")

    async def malformed(request):
        track(request)
        return web.Response(text=MALFORMED_HTML, content_type="text/html")

    async def chunked(request):
        track(request)
        resp = web.StreamResponse()
        resp.content_type = "text/html"
        resp.enable_chunked_encoding()
        await resp.prepare(request)
        for _ in range(4):
            await resp.write(b"<p>" + b"x" * 100 + b"</p>")
        await resp.write_eof()
        return resp

    app.router.add_get("/", root)
    app.router.add_get("/page1", page1)
    app.router.add_get("/old", old)
    app.router.add_get("/new", new)
    app.router.add_get("/slow", slow)
    app.router.add_get("/banner", banner)
    app.router.add_get("/broken", broken)
    app.router.add_get("/hub", hub)
    app.router.add_get("/malformed", malformed)
    app.router.add_get("/chunked", chunked)

    async for url in _serve_app(app, unused_tcp_port):
        yield url, hits


def site_config(base: str, **overrides) -> CrawlConfig:
    values = dict(seed_url=base, max_depth=1, max_pages=20, fetch_timeout=1.0, user_agent="TestAgent/1.0")
    values.update(overrides)
    return CrawlConfig(**values)


# --------------------------------------------------------------------------- #
#                                Fetcher                                      #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_fetch_success_and_redirect(test_site):
    base, hits = test_site
    config = site_config(base)
    async with ClientSession() as session:
        fetcher = Fetcher(session, config)
        page = await fetcher.fetch(f"{base}/old")

    assert page.url == f"{base}/old"
    assert page.final_url == f"{base}/new"
    assert page.document.title.get_text() == "New home"
    assert hits["user_agent"] == "TestAgent/1.0"


@pytest.mark.asyncio()
@pytest.mark.parametrize(
    "path,reason",
    [
        ("/missing", "HTTP 404"),
        ("/broken", "HTTP 500"),
        ("/banner", "unsupported content type"),
        ("/slow", "timed out"),
        ("/malformed", "unparseable markup"),
    ],
)
async def test_fetch_errors(test_site, path, reason):
    base, _ = test_site
    async with ClientSession() as session:
        fetcher = Fetcher(session, site_config(base))
        with pytest.raises(FetchError) as excinfo:
            await fetcher.fetch(f"{base}{path}")

    assert excinfo.value.url == f"{base}{path}"
    assert reason in excinfo.value.reason


@pytest.mark.asyncio()
async def test_fetch_rejects_oversized_body(test_site):
    base, _ = test_site
    async with ClientSession() as session:
        fetcher = Fetcher(session, site_config(base, max_body_bytes=100))
        with pytest.raises(FetchError, match="too large"):
            await fetcher.fetch(f"{base}/page1")


@pytest.mark.asyncio()
async def test_fetch_connection_refused(unused_tcp_port: int):
    base = f"http://127.0.0.1:{unused_tcp_port}"
    async with ClientSession() as session:
        fetcher = Fetcher(session, site_config(base))
        with pytest.raises(FetchError):
            await fetcher.fetch(f"{base}/")


# --------------------------------------------------------------------------- #
#                              Crawl job                                      #
# --------------------------------------------------------------------------- #


@pytest.mark.asyncio()
async def test_crawl_job_over_http(test_site):
    base, hits = test_site
    store = InMemoryPageStore()
    result = await asyncio.wait_for(CrawlJob(site_config(base), sink=store).run(), timeout=15.0)

    assert sorted(result.urls()) == [f"{base}/", f"{base}/old", f"{base}/page1"]
    # the banner was fetched (no extension to filter on) but rejected by content type
    assert hits["paths"].get("/banner") == 1
    assert "/style.css" not in hits["paths"]
    assert all(count == 1 for count in hits["paths"].values())
    assert hits["user_agent"] == "TestAgent/1.0"

    page1 = next(p for p in result if p.url.endswith("/page1"))
    assert page1.language == "fr"
    assert page1.title == "Page one"

    stats = store.stats("127.0.0.1")
    assert stats["total_pages"] == 3
    assert stats["indexed_pages"] == 0


@pytest.mark.asyncio()
async def test_fetch_caps_chunked_body_without_content_length(test_site):
    base, _ = test_site
    async with ClientSession() as session:
        fetcher = Fetcher(session, site_config(base, max_body_bytes=200))
        with pytest.raises(FetchError, match="too large"):
            await fetcher.fetch(f"{base}/chunked")

        page = await Fetcher(session, site_config(base, max_body_bytes=1000)).fetch(f"{base}/chunked")
    assert len(page.document.find_all("p")) == 4


@pytest.mark.asyncio()
async def test_malformed_page_skipped_and_siblings_kept(test_site):
    base, hits = test_site
    result = await asyncio.wait_for(CrawlJob(site_config(f"{base}/hub")).run(), timeout=15.0)

    assert sorted(result.urls()) == [f"{base}/hub", f"{base}/page1"]
    assert hits["paths"]["/malformed"] == 1
    assert result.fetch_count == 3
