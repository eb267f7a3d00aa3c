"""测试待处理队列的合并."""

from datetime import UTC, datetime, timedelta

from newspulse.core.pending import PendingQueue, merge_pending
from newspulse.models.queue import PendingEntry

NOW = datetime(2024, 1, 1, tzinfo=UTC)


def _entry(article_factory, article_id: str, minutes: int = 0) -> PendingEntry:
    return PendingEntry(
        id=article_id,
        article=article_factory(article_id),
        added_at=NOW + timedelta(minutes=minutes),
    )


class TestPendingQueue:
    """测试 PendingQueue 基本操作."""

    def test_push_ignores_duplicate_ids(self, article_factory) -> None:
        """同一 ID 只保留一份."""
        queue = PendingQueue()
        assert queue.push(_entry(article_factory, "a")) is True
        assert queue.push(_entry(article_factory, "a", minutes=1)) is False
        assert len(queue) == 1

    def test_pop_oldest(self, article_factory) -> None:
        """按 added_at 取出最旧的条目."""
        queue = PendingQueue(
            [_entry(article_factory, "b", 2), _entry(article_factory, "a", 1)]
        )
        first = queue.pop_oldest()
        assert first is not None
        assert first.id == "a"
        assert queue.ids() == ["b"]

    def test_pop_oldest_on_empty(self) -> None:
        """空队列返回 None."""
        assert PendingQueue().pop_oldest() is None

    def test_remove_if_present(self, article_factory) -> None:
        """按 ID 移除."""
        queue = PendingQueue([_entry(article_factory, "a")])
        assert queue.remove_if_present("a") is True
        assert queue.remove_if_present("a") is False
        assert "a" not in queue

    def test_cap_drops_oldest(self, article_factory) -> None:
        """超出容量丢弃最旧的条目."""
        queue = PendingQueue(
            [_entry(article_factory, str(i), minutes=i) for i in range(5)]
        )
        assert queue.cap(3) == 2
        assert queue.ids() == ["2", "3", "4"]


class TestMergePending:
    """测试 merge_pending."""

    def test_new_candidates_appended_oldest_first(self, article_factory) -> None:
        """来源按新到旧返回，入队顺序为旧到新."""
        candidates = [article_factory("new"), article_factory("old")]
        merged = merge_pending(PendingQueue(), candidates, [], 10, NOW)
        assert merged.ids() == ["old", "new"]

    def test_processed_ids_never_added(self, article_factory) -> None:
        """已处理的 ID 不会被加入."""
        merged = merge_pending(
            PendingQueue(), [article_factory("a"), article_factory("b")], ["a"], 10, NOW
        )
        assert merged.ids() == ["b"]

    def test_processed_entries_trimmed(self, article_factory) -> None:
        """已处理的条目从队列中移除."""
        pending = PendingQueue([_entry(article_factory, "a"), _entry(article_factory, "b", 1)])
        merged = merge_pending(pending, [], ["a"], 10, NOW)
        assert merged.ids() == ["b"]

    def test_existing_entries_not_duplicated(self, article_factory) -> None:
        """已在队列中的 ID 不重复，保留原 added_at."""
        pending = PendingQueue([_entry(article_factory, "a")])
        later = NOW + timedelta(hours=1)
        merged = merge_pending(pending, [article_factory("a")], [], 10, later)
        assert merged.ids() == ["a"]
        assert merged.entries[0].added_at == NOW

    def test_merge_is_idempotent(self, article_factory) -> None:
        """对相同输入重复合并结果相同."""
        candidates = [article_factory("c"), article_factory("b")]
        pending = PendingQueue([_entry(article_factory, "a")])

        once = merge_pending(pending, candidates, ["x"], 10, NOW)
        twice = merge_pending(once, candidates, ["x"], 10, NOW)
        assert once.ids() == twice.ids() == ["a", "b", "c"]

    def test_capped_at_max_size(self, article_factory) -> None:
        """结果不超过容量，丢弃最旧的条目."""
        pending = PendingQueue(
            [_entry(article_factory, f"old{i}", minutes=i) for i in range(3)]
        )
        candidates = [article_factory("n2"), article_factory("n1")]
        later = NOW + timedelta(hours=1)
        merged = merge_pending(pending, candidates, [], 3, later)
        assert merged.ids() == ["old2", "n1", "n2"]

    def test_input_not_modified(self, article_factory) -> None:
        """merge_pending 不修改输入队列."""
        pending = PendingQueue([_entry(article_factory, "a")])
        merge_pending(pending, [article_factory("b")], ["a"], 10, NOW)
        assert pending.ids() == ["a"]

    def test_merge_reports_counts(self, article_factory) -> None:
        """merge 返回新增、移除和丢弃数量."""
        queue = PendingQueue([_entry(article_factory, "a")])
        result = queue.merge(
            [article_factory("c"), article_factory("b")], ["a"], 1, NOW
        )
        assert (result.added, result.trimmed, result.dropped) == (2, 1, 1)
        assert queue.ids() == ["c"]
