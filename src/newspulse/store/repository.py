"""队列各个键的类型化读写.

每个键只有一个写入方：
- 待处理列表: Producer
- 检查点、文章记录、ID 索引: Processor
"""

import logging

from pydantic import ValidationError

from newspulse.core.pending import PendingQueue
from newspulse.models.article import Article
from newspulse.models.queue import Checkpoint, PendingEntry
from newspulse.store.kv import KeyValueStore

logger = logging.getLogger(__name__)

KEY_PENDING = "pending_list"
KEY_CHECKPOINT = "checkpoint"
KEY_ID_INDEX = "id_index"
ARTICLE_KEY_PREFIX = "article:"


def article_key(article_id: str) -> str:
    """文章记录的存储键."""
    return f"{ARTICLE_KEY_PREFIX}{article_id}"


class ArticleStore:
    """按 ID 存取文章记录."""

    def __init__(self, kv: KeyValueStore, ttl_seconds: int | None = None) -> None:
        self._kv = kv
        self._ttl = ttl_seconds

    async def get(self, article_id: str) -> Article | None:
        data = await self._kv.get(article_key(article_id))
        if data is None:
            return None
        try:
            return Article.model_validate(data)
        except ValidationError:
            logger.warning(f"文章记录格式错误，忽略: {article_id}")
            return None

    async def put(self, article: Article) -> None:
        await self._kv.put(
            article_key(article.id),
            article.model_dump(mode="json"),
            ttl_seconds=self._ttl,
        )

    async def delete(self, article_id: str) -> None:
        await self._kv.delete(article_key(article_id))


class IdIndex:
    """文章 ID 索引（新到旧）."""

    def __init__(self, kv: KeyValueStore, ttl_seconds: int | None = None) -> None:
        self._kv = kv
        self._ttl = ttl_seconds

    async def load(self) -> list[str]:
        data = await self._kv.get(KEY_ID_INDEX)
        if not isinstance(data, list):
            return []
        return [str(article_id) for article_id in data]

    async def save(self, ids: list[str]) -> None:
        await self._kv.put(KEY_ID_INDEX, ids, ttl_seconds=self._ttl)


def add_to_index(
    ids: list[str], article_id: str, max_size: int
) -> tuple[list[str], list[str]]:
    """将 ID 加到索引头部，返回 (新索引, 被淘汰的 ID)."""
    if article_id in ids:
        return list(ids), []
    updated = [article_id, *ids]
    return updated[:max_size], updated[max_size:]


class PendingListStore:
    """待处理列表."""

    def __init__(self, kv: KeyValueStore, ttl_seconds: int | None = None) -> None:
        self._kv = kv
        self._ttl = ttl_seconds

    async def load(self) -> PendingQueue:
        data = await self._kv.get(KEY_PENDING)
        if not isinstance(data, list):
            return PendingQueue()

        entries: list[PendingEntry] = []
        for item in data:
            try:
                entries.append(PendingEntry.model_validate(item))
            except ValidationError:
                logger.warning("待处理列表中存在格式错误的条目，已跳过")
        return PendingQueue(entries)

    async def save(self, queue: PendingQueue) -> None:
        await self._kv.put(
            KEY_PENDING,
            [entry.model_dump(mode="json") for entry in queue.entries],
            ttl_seconds=self._ttl,
        )


class CheckpointStore:
    """Processor 检查点."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    async def load(self) -> Checkpoint:
        data = await self._kv.get(KEY_CHECKPOINT)
        if data is None:
            return Checkpoint()
        try:
            return Checkpoint.model_validate(data)
        except ValidationError:
            logger.warning("检查点格式错误，从空检查点开始")
            return Checkpoint()

    async def save(self, checkpoint: Checkpoint) -> None:
        await self._kv.put(KEY_CHECKPOINT, checkpoint.model_dump(mode="json"))
