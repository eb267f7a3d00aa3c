"""待处理队列.

队列按 ``added_at`` 从旧到新排列，所有操作都以文章 ID 为键，
不依赖下标或长度，因此 Producer 基于过期视图重复合并也是幂等的。
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime

from newspulse.models.article import Article
from newspulse.models.queue import PendingEntry

logger = logging.getLogger(__name__)


@dataclass
class MergeResult:
    """合并统计."""

    added: int = 0
    trimmed: int = 0
    dropped: int = 0


class PendingQueue:
    """以 ID 为键的有序队列."""

    def __init__(self, entries: Iterable[PendingEntry] | None = None) -> None:
        self._entries: list[PendingEntry] = []
        for entry in sorted(entries or [], key=lambda e: e.added_at):
            self.push(entry)

    @property
    def entries(self) -> list[PendingEntry]:
        """当前条目（旧到新）."""
        return list(self._entries)

    def ids(self) -> list[str]:
        return [entry.id for entry in self._entries]

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, article_id: object) -> bool:
        return any(entry.id == article_id for entry in self._entries)

    def push(self, entry: PendingEntry) -> bool:
        """追加到队尾，ID 已存在时忽略."""
        if entry.id in self:
            return False
        self._entries.append(entry)
        return True

    def pop_oldest(self) -> PendingEntry | None:
        """取出最旧的条目."""
        if not self._entries:
            return None
        return self._entries.pop(0)

    def remove_if_present(self, article_id: str) -> bool:
        """按 ID 移除."""
        for index, entry in enumerate(self._entries):
            if entry.id == article_id:
                del self._entries[index]
                return True
        return False

    def trim(self, article_ids: Iterable[str]) -> int:
        """移除给定 ID 的条目，返回移除数量."""
        excluded = set(article_ids)
        before = len(self._entries)
        self._entries = [e for e in self._entries if e.id not in excluded]
        return before - len(self._entries)

    def cap(self, max_size: int) -> int:
        """超出容量时丢弃最旧的条目，返回丢弃数量."""
        overflow = len(self._entries) - max(max_size, 0)
        if overflow <= 0:
            return 0
        self._entries = self._entries[overflow:]
        return overflow

    def merge(
        self,
        candidates: Iterable[Article],
        excluded_ids: Iterable[str],
        max_size: int,
        now: datetime | None = None,
    ) -> MergeResult:
        """
        合并新发现的文章.

        Args:
            candidates: 新文章（来源顺序：新到旧）
            excluded_ids: 检查点中已认领的 ID（已处理、处理中、暂缓重试）
            max_size: 队列容量
            now: 新条目的 added_at

        Returns:
            MergeResult: 合并统计
        """
        excluded = set(excluded_ids)
        added_at = now or datetime.now(UTC)
        result = MergeResult()

        result.trimmed = self.trim(excluded)

        # 来源按新到旧返回，倒序入队使较旧的文章先被处理
        for article in reversed(list(candidates)):
            if article.id in excluded:
                continue
            entry = PendingEntry(id=article.id, article=article, added_at=added_at)
            if self.push(entry):
                result.added += 1

        result.dropped = self.cap(max_size)
        if result.dropped:
            logger.info(f"待处理列表超出容量 {max_size}，丢弃 {result.dropped} 条最旧条目")

        return result


def merge_pending(
    pending: PendingQueue,
    candidates: Iterable[Article],
    processed_ids: Iterable[str],
    max_size: int,
    now: datetime | None = None,
) -> PendingQueue:
    """返回合并后的新队列，不修改输入."""
    merged = PendingQueue(pending.entries)
    merged.merge(candidates, processed_ids, max_size, now)
    return merged
