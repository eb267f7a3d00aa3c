"""数据模型."""

from newspulse.models.article import Article, Sentiment
from newspulse.models.database import close_db, init_db
from newspulse.models.kv import KVEntry
from newspulse.models.queue import Checkpoint, PendingEntry, TryLaterEntry

__all__ = [
    "Article",
    "Checkpoint",
    "KVEntry",
    "PendingEntry",
    "Sentiment",
    "TryLaterEntry",
    "close_db",
    "init_db",
]
