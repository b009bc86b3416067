import pytest
from bs4 import BeautifulSoup

from site_harvest.crawler.link_extractor import extract_links
from site_harvest.crawler.models import PageData
from site_harvest.crawler.url_filter import is_eligible, normalize_url

SEED = "https://example.com/"


@pytest.mark.parametrize(
    "candidate,expected",
    [
        ("https://example.com/about", True),
        ("http://example.com/about", True),
        ("https://EXAMPLE.com/docs/intro", True),
        ("https://other.com/page", False),
        ("https://blog.example.com/post", False),
        ("https://example.com/logo.png", False),
        ("https://example.com/assets/site.CSS", False),
        ("https://example.com/files/manual.pdf", False),
        ("https://example.com/app.js?v=3", False),
        ("https://example.com/pdf-guide", True),
        ("mailto:someone@example.com", False),
        ("ftp://example.com/file", False),
        ("", False),
        ("   ", False),
        ("not a url", False),
        ("http://[broken/", False),
    ],
)
def test_is_eligible(candidate, expected):
    assert is_eligible(candidate, SEED) is expected


def test_custom_skip_extensions():
    assert is_eligible("https://example.com/feed.xml", SEED)
    assert not is_eligible("https://example.com/feed.xml", SEED, skip_extensions=(".xml",))


@pytest.mark.parametrize(
    "url,expected",
    [
        ("HTTPS://Example.COM", "https://example.com/"),
        ("https://example.com/a/../b", "https://example.com/b"),
        ("https://example.com/a/./b/", "https://example.com/a/b/"),
        ("https://example.com/page#section", "https://example.com/page"),
        ("https://example.com/s?b=2&a=1", "https://example.com/s?a=1&b=2"),
    ],
)
def test_normalize_url(url, expected):
    assert normalize_url(url) == expected


def test_extract_links_resolves_and_dedupes():
    html = """
    <html><body>
      <a href="/about">About</a>
      <a href="/about#team">Team</a>
      <a href="contact">Contact</a>
      <a href="https://other.com/x">Other</a>
      <a href="mailto:a@b.c">Mail</a>
      <a href="javascript:void(0)">JS</a>
      <a href="#top">Top</a>
      <a>no href</a>
    </body></html>
    """
    page = PageData(
        url="https://example.com/docs/",
        document=BeautifulSoup(html, "html.parser"),
    )
    assert extract_links(page) == [
        "https://example.com/about",
        "https://example.com/docs/contact",
        "https://other.com/x",
    ]


def test_extract_links_uses_final_url_and_base_tag():
    doc = BeautifulSoup('<a href="next">n</a>', "html.parser")
    page = PageData(url="https://example.com/old", document=doc, final_url="https://example.com/new/")
    assert extract_links(page) == ["https://example.com/new/next"]

    doc = BeautifulSoup('<base href="/root/"><a href="x">x</a>', "html.parser")
    page = PageData(url="https://example.com/a/b", document=doc)
    assert extract_links(page) == ["https://example.com/root/x"]
