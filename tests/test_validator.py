from site_harvest.crawler.models import ExtractedPage
from site_harvest.crawler.validator import ContentValidator


def page_with(content: str) -> ExtractedPage:
    return ExtractedPage(url="https://example.com/", title="T", content=content)


def text_of(chars: int, words: int) -> str:
    """Build *words* space-separated tokens padded out to exactly *chars* characters."""
    tokens = ["w"] * words
    text = " ".join(tokens)
    return text + "x" * (chars - len(text))


def test_short_page_rejected():
    content = text_of(80, 25)
    assert len(content) == 80
    assert not ContentValidator().is_acceptable(page_with(content))


def test_substantive_page_accepted():
    content = text_of(150, 25)
    page = page_with(content)
    assert page.content_length == 150
    assert page.word_count == 25
    assert ContentValidator().is_acceptable(page)


def test_thresholds_are_strict():
    validator = ContentValidator(min_chars=100, min_words=20)
    assert not validator.is_acceptable(page_with(text_of(100, 25)))
    assert not validator.is_acceptable(page_with(text_of(150, 20)))
    assert validator.is_acceptable(page_with(text_of(101, 21)))


def test_empty_content_rejected_even_with_zero_thresholds():
    assert not ContentValidator(min_chars=0, min_words=0).is_acceptable(page_with(""))
