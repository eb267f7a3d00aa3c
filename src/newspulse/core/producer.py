"""Producer：发现新文章并合并进待处理列表.

Producer 只读检查点和 ID 索引，每次运行只写待处理列表这一个键。
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from newspulse.config import QueueLimits, Settings
from newspulse.core.checkpoint import claimed_ids
from newspulse.core.errors import IngestionUnavailable
from newspulse.ingest.base import NewsProvider, aggregate_candidates
from newspulse.models.article import Article
from newspulse.store.kv import KeyValueStore
from newspulse.store.repository import CheckpointStore, IdIndex, PendingListStore

logger = logging.getLogger(__name__)


@dataclass
class ProducerResult:
    """单次运行结果."""

    status: str = "ok"  # ok | unavailable
    fetched: int = 0
    added: int = 0
    trimmed: int = 0
    dropped: int = 0
    pending: int = 0
    error: str | None = None


def prepare_candidate(article: Article) -> Article:
    """重置新文章的处理状态，来源已提供情感时跳过情感分析."""
    return article.model_copy(
        update={
            "needs_sentiment": article.sentiment is None,
            "needs_summary": True,
            "content_timeout_count": 0,
            "extracted_content": None,
            "summary": None,
            "last_error": None,
            "processed_at": None,
        }
    )


class Producer:
    """新文章发现与合并."""

    def __init__(
        self,
        kv: KeyValueStore,
        provider: NewsProvider,
        limits: QueueLimits,
    ) -> None:
        self.provider = provider
        self.limits = limits
        self.index = IdIndex(kv, limits.id_index_ttl)
        self.pending = PendingListStore(kv)
        self.checkpoints = CheckpointStore(kv)

    async def close(self) -> None:
        """释放来源连接."""
        await self.provider.close()

    async def run(self, now: datetime | None = None) -> ProducerResult:
        """执行一次合并."""
        checkpoint = await self.checkpoints.load()
        queue = await self.pending.load()
        index_ids = await self.index.load()

        claimed = claimed_ids(checkpoint)
        known_ids = set(index_ids) | set(queue.ids()) | claimed

        try:
            candidates = await aggregate_candidates(
                self.provider, known_ids, self.limits.max_pages
            )
        except IngestionUnavailable as e:
            logger.warning(f"文章来源不可用，本次不写入: {e}")
            return ProducerResult(status="unavailable", pending=len(queue), error=str(e))

        candidates = [prepare_candidate(a) for a in candidates]
        stats = queue.merge(
            candidates,
            claimed,
            self.limits.max_pending_list_size,
            now=now or datetime.now(UTC),
        )

        await self.pending.save(queue)

        logger.info(
            f"待处理列表已更新: 新增={stats.added}, 移除已认领={stats.trimmed}, "
            f"丢弃={stats.dropped}, 当前={len(queue)}"
        )
        return ProducerResult(
            fetched=len(candidates),
            added=stats.added,
            trimmed=stats.trimmed,
            dropped=stats.dropped,
            pending=len(queue),
        )


def create_producer(settings: Settings, kv: KeyValueStore) -> Producer:
    """根据配置创建 Producer."""
    from newspulse.ingest.freshrss import FreshRSSConfig, FreshRSSProvider

    config = FreshRSSConfig(
        base_url=settings.freshrss_url,
        username=settings.freshrss_username,
        api_password=settings.freshrss_api_password,
        items_per_page=settings.items_per_page,
    )
    return Producer(kv, FreshRSSProvider(config), QueueLimits.from_settings(settings))
