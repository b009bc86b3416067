"""
Minimum-content filter applied to extracted pages.
"""
from __future__ import annotations

from site_harvest.crawler.models import ExtractedPage

MIN_CONTENT_CHARS = 100
MIN_WORD_COUNT = 20


class ContentValidator:
    """Accepts pages whose text is long enough to be worth indexing."""

    def __init__(self, min_chars: int = MIN_CONTENT_CHARS, min_words: int = MIN_WORD_COUNT) -> None:
        self.min_chars = min_chars
        self.min_words = min_words

    def is_acceptable(self, page: ExtractedPage) -> bool:
        """True if content is non-empty and both thresholds are strictly exceeded."""
        return (
            bool(page.content)
            and page.content_length > self.min_chars
            and page.word_count > self.min_words
        )
