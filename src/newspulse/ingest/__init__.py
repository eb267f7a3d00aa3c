"""文章来源."""

from newspulse.ingest.base import NewsProvider, ProviderPage, aggregate_candidates
from newspulse.ingest.freshrss import FreshRSSConfig, FreshRSSError, FreshRSSProvider

__all__ = [
    "FreshRSSConfig",
    "FreshRSSError",
    "FreshRSSProvider",
    "NewsProvider",
    "ProviderPage",
    "aggregate_candidates",
]
