"""正文抓取模块."""

from newspulse.fetcher.extractor import FullTextExtractor, FullTextResult

__all__ = [
    "FullTextExtractor",
    "FullTextResult",
]
