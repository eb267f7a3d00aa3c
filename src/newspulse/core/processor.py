"""Processor：每次运行处理一篇文章的一个阶段.

运行步骤：

1. 读取检查点
2. 若检查点中有处理中的文章（上次运行未结束），恢复它
3. 否则从待处理列表取最旧的条目，列表为空或暂缓列表已满时取暂缓条目
4. 在任何外部调用之前写入检查点
5. 执行一个阶段
6. 保存文章并更新 ID 索引
7. 更新检查点

待处理列表只由 Producer 写入，Processor 通过在检查点中记录 ID 完成"出队"。
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime

from newspulse.config import QueueLimits, Settings
from newspulse.core.checkpoint import (
    advance_current,
    begin_current,
    claimed_ids,
    complete_current,
    mark_processed,
    park_current,
    pop_try_later,
    trim_processed_ids,
    try_later_full,
)
from newspulse.core.phases import PhaseMachine, PhaseStatus
from newspulse.models.article import Article
from newspulse.models.queue import Checkpoint
from newspulse.store.kv import KeyValueStore
from newspulse.store.repository import (
    ArticleStore,
    CheckpointStore,
    IdIndex,
    PendingListStore,
    add_to_index,
)

logger = logging.getLogger(__name__)


@dataclass
class ProcessResult:
    """单次运行结果."""

    status: str = "idle"  # idle | processed
    article_id: str | None = None
    phase: str | None = None
    outcome: str | None = None
    recovered: bool = False
    skipped: list[str] = field(default_factory=list)


class Processor:
    """检查点驱动的单篇文章处理器."""

    def __init__(
        self,
        kv: KeyValueStore,
        machine: PhaseMachine,
        limits: QueueLimits,
    ) -> None:
        self.machine = machine
        self.limits = limits
        self.articles = ArticleStore(kv, limits.id_index_ttl)
        self.index = IdIndex(kv, limits.id_index_ttl)
        self.pending = PendingListStore(kv)
        self.checkpoints = CheckpointStore(kv)
        self._index_ids: list[str] = []

    async def close(self) -> None:
        """释放外部服务连接."""
        await self.machine.close()

    async def run_once(self) -> ProcessResult:
        """执行一次处理."""
        checkpoint = await self.checkpoints.load()
        self._index_ids = await self.index.load()
        result = ProcessResult()

        if checkpoint.current_id:
            article = await self._recover(checkpoint, checkpoint.current_id)
            if article is None:
                trim_processed_ids(checkpoint, self._index_ids)
                await self._save_checkpoint(checkpoint)
                return result
            result.recovered = True
        else:
            article = await self._select(checkpoint, result)
            if article is None:
                removed = trim_processed_ids(checkpoint, self._index_ids)
                if result.skipped or removed:
                    await self._save_checkpoint(checkpoint)
                logger.info("没有待处理的文章")
                return result

            # 外部调用之前先记录处理中的文章
            begin_current(checkpoint, article)
            await self._save_checkpoint(checkpoint)

        result.status = "processed"
        result.article_id = article.id

        outcome = await self.machine.advance(article)
        article = outcome.article
        result.phase = outcome.phase
        result.outcome = outcome.status

        await self._store_and_index(article)

        if outcome.status is PhaseStatus.ADVANCED:
            advance_current(checkpoint, article)
        elif outcome.status is PhaseStatus.RETRY:
            park_current(checkpoint, article, reason=article.last_error or "")
        else:
            complete_current(checkpoint)

        trim_processed_ids(checkpoint, self._index_ids)
        await self._save_checkpoint(checkpoint)

        logger.info(
            f"处理完成: {article.id} 阶段={outcome.phase} 结果={outcome.status}"
        )
        return result

    async def _recover(
        self,
        checkpoint: Checkpoint,
        current_id: str,
    ) -> Article | None:
        """恢复上次未完成的文章，已是终态时清除检查点并返回 None."""
        article = await self.articles.get(current_id) or checkpoint.current_article

        if article is None:
            logger.warning(f"处理中的文章已不存在，清除检查点: {current_id}")
            complete_current(checkpoint)
            return None

        if article.is_terminal:
            logger.info(f"处理中的文章已是终态，清除检查点: {current_id}")
            complete_current(checkpoint)
            return None

        logger.info(f"恢复处理中的文章: {current_id}")
        return article

    async def _select(
        self,
        checkpoint: Checkpoint,
        result: ProcessResult,
    ) -> Article | None:
        """选出下一篇待处理文章，跳过已是终态的条目."""
        queue = await self.pending.load()
        queue.trim(claimed_ids(checkpoint))

        while True:
            # 暂缓列表已满时先取暂缓条目
            entry = None
            if not try_later_full(checkpoint, self.limits.max_try_later_size):
                entry = queue.pop_oldest()
            if entry is not None:
                article_id, snapshot, source = entry.id, entry.article, "pending"
            else:
                parked = pop_try_later(checkpoint)
                if parked is None:
                    return None
                article_id, snapshot, source = parked.id, parked.article, "try_later"

            stored = await self.articles.get(article_id)
            article = stored or snapshot

            if article.is_terminal:
                logger.info(f"跳过已是终态的文章: {article_id}")
                if stored is None:
                    await self._store_and_index(article)
                mark_processed(checkpoint, article_id)
                result.skipped.append(article_id)
                continue

            logger.info(f"选中文章 ({source}): {article_id} ({article.title[:50]})")
            return article

    async def _store_and_index(self, article: Article) -> None:
        """保存文章，并在 ID 不在索引中时加入索引."""
        await self.articles.put(article)

        updated, evicted = add_to_index(
            self._index_ids, article.id, self.limits.max_stored_articles
        )
        if updated == self._index_ids:
            return

        await self.index.save(updated)
        self._index_ids = updated
        if evicted:
            logger.info(f"ID 索引超出容量，淘汰 {len(evicted)} 篇")
            if self.limits.delete_old_articles:
                for article_id in evicted:
                    await self.articles.delete(article_id)

    async def _save_checkpoint(self, checkpoint: Checkpoint) -> None:
        checkpoint.last_update = datetime.now(UTC)
        await self.checkpoints.save(checkpoint)


def create_processor(settings: Settings, kv: KeyValueStore) -> Processor:
    """根据配置创建 Processor."""
    from newspulse.fetcher.extractor import FullTextExtractor
    from newspulse.llm import ArticleSummarizer, SentimentClassifier, create_llm_provider

    limits = QueueLimits.from_settings(settings)
    provider = create_llm_provider(settings)
    machine = PhaseMachine(
        fetcher=FullTextExtractor(timeout_seconds=settings.fetch_timeout_seconds),
        classifier=SentimentClassifier(provider, topic=settings.news_topic),
        summarizer=ArticleSummarizer(provider, topic=settings.news_topic),
        limits=limits,
    )
    return Processor(kv, machine, limits)

