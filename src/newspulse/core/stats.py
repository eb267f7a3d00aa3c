"""队列统计."""

from dataclasses import dataclass
from datetime import datetime

from newspulse.config import QueueLimits
from newspulse.core.checkpoint import claimed_ids
from newspulse.store.kv import KeyValueStore
from newspulse.store.repository import (
    ArticleStore,
    CheckpointStore,
    IdIndex,
    PendingListStore,
)


@dataclass
class QueueStats:
    """队列统计."""

    pending: int = 0
    try_later: int = 0
    processed: int = 0
    indexed: int = 0
    needs_processing: int = 0
    poisoned: int = 0
    current_id: str | None = None
    last_update: datetime | None = None


async def get_queue_stats(kv: KeyValueStore, limits: QueueLimits) -> QueueStats:
    """读取各个键并汇总统计（只读）."""
    checkpoint = await CheckpointStore(kv).load()
    queue = await PendingListStore(kv).load()
    index_ids = await IdIndex(kv).load()
    articles = ArticleStore(kv)

    # 与 Processor 看到的待处理视图一致
    queue.trim(claimed_ids(checkpoint))

    stats = QueueStats(
        pending=len(queue),
        try_later=len(checkpoint.try_later),
        processed=len(checkpoint.processed_ids),
        indexed=len(index_ids),
        current_id=checkpoint.current_id,
        last_update=checkpoint.last_update,
    )

    for article_id in index_ids:
        article = await articles.get(article_id)
        if article is None:
            continue
        if article.needs_processing(limits.max_content_fetch_attempts):
            stats.needs_processing += 1
        elif (article.last_error or "").startswith("max_retries"):
            stats.poisoned += 1

    return stats
