"""检查点状态转换.

检查点只由 Processor 写入。这里的函数只修改内存中的 ``Checkpoint``，
由调用方决定何时持久化。
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from newspulse.models.article import Article
from newspulse.models.queue import Checkpoint, TryLaterEntry


def claimed_ids(checkpoint: Checkpoint) -> set[str]:
    """Processor 已认领的 ID：已处理、处理中、暂缓重试."""
    ids = set(checkpoint.processed_ids)
    if checkpoint.current_id:
        ids.add(checkpoint.current_id)
    ids.update(entry.id for entry in checkpoint.try_later)
    return ids


def begin_current(checkpoint: Checkpoint, article: Article) -> None:
    """将文章设为处理中."""
    checkpoint.current_id = article.id
    checkpoint.current_article = article


def advance_current(checkpoint: Checkpoint, article: Article) -> None:
    """非最终阶段完成，保留处理中状态并更新快照."""
    if checkpoint.current_id != article.id:
        msg = f"处理中的文章不一致: {checkpoint.current_id} != {article.id}"
        raise ValueError(msg)
    checkpoint.current_article = article


def clear_current(checkpoint: Checkpoint) -> None:
    """清除处理中状态."""
    checkpoint.current_id = None
    checkpoint.current_article = None


def mark_processed(checkpoint: Checkpoint, article_id: str) -> None:
    """记录为已处理（幂等）."""
    if article_id not in checkpoint.processed_ids:
        checkpoint.processed_ids.append(article_id)


def complete_current(checkpoint: Checkpoint) -> str | None:
    """处理中的文章进入终态，返回其 ID."""
    article_id = checkpoint.current_id
    if article_id:
        mark_processed(checkpoint, article_id)
    clear_current(checkpoint)
    return article_id


def park_current(
    checkpoint: Checkpoint,
    article: Article,
    reason: str,
    now: datetime | None = None,
) -> None:
    """
    将处理中的文章移入暂缓重试列表.

    暂缓列表不丢弃条目。容量由选择顺序保证：列表已满时 Processor
    先取暂缓条目，再取新的待处理条目。

    Args:
        checkpoint: 检查点
        article: 最新的文章状态
        reason: 失败原因
        now: 失败时间
    """
    clear_current(checkpoint)
    checkpoint.try_later = [e for e in checkpoint.try_later if e.id != article.id]
    checkpoint.try_later.append(
        TryLaterEntry(
            id=article.id,
            article=article,
            failed_at=now or datetime.now(UTC),
            reason=reason,
        )
    )


def try_later_full(checkpoint: Checkpoint, max_size: int) -> bool:
    """暂缓列表是否已达到容量."""
    return len(checkpoint.try_later) >= max(max_size, 1)


def pop_try_later(checkpoint: Checkpoint) -> TryLaterEntry | None:
    """取出最旧的暂缓条目."""
    if not checkpoint.try_later:
        return None
    return checkpoint.try_later.pop(0)


def trim_processed_ids(checkpoint: Checkpoint, index_ids: Iterable[str]) -> int:
    """只保留仍在 ID 索引中的已处理 ID，返回移除数量."""
    keep = set(index_ids)
    before = len(checkpoint.processed_ids)
    checkpoint.processed_ids = [i for i in checkpoint.processed_ids if i in keep]
    return before - len(checkpoint.processed_ids)
