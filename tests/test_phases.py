"""测试阶段状态机."""

from unittest.mock import MagicMock

import pytest

from newspulse.core.errors import AIServiceError, ContentMismatchError
from newspulse.core.phases import Phase, PhaseMachine, PhaseStatus, next_phase
from newspulse.fetcher.extractor import FullTextResult


class TestNextPhase:
    """测试阶段选择."""

    def test_sentiment_first(self, article_factory) -> None:
        """需要情感分析时先执行 P0."""
        assert next_phase(article_factory()) is Phase.SENTIMENT

    def test_content_after_sentiment(self, article_factory) -> None:
        """情感完成且无正文时执行 P1."""
        article = article_factory(needs_sentiment=False)
        assert next_phase(article) is Phase.CONTENT

    def test_summary_when_content_present(self, article_factory) -> None:
        """已有正文时执行 P2."""
        article = article_factory(needs_sentiment=False, extracted_content="text")
        assert next_phase(article) is Phase.SUMMARY

    def test_terminal_has_no_phase(self, article_factory) -> None:
        """终态文章没有下一个阶段."""
        article = article_factory(needs_sentiment=False, needs_summary=False)
        assert next_phase(article) is None


class TestSentimentPhase:
    """测试 P0 情感分析."""

    async def test_success_advances(
        self, machine: PhaseMachine, article_factory
    ) -> None:
        """成功后设置情感并清除标志."""
        outcome = await machine.advance(article_factory())
        assert outcome.phase is Phase.SENTIMENT
        assert outcome.status is PhaseStatus.ADVANCED
        assert outcome.article.sentiment == "positive"
        assert outcome.article.needs_sentiment is False
        assert outcome.article.needs_summary is True

    async def test_only_one_phase_per_call(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """一次只执行一个阶段."""
        await machine.advance(article_factory())
        fetcher.fetch.assert_not_called()

    async def test_failure_keeps_flag_without_counting(
        self, machine: PhaseMachine, classifier: MagicMock, article_factory
    ) -> None:
        """失败时保留标志，不增加计数."""
        classifier.classify.side_effect = AIServiceError("rate limited")
        outcome = await machine.advance(article_factory())
        assert outcome.status is PhaseStatus.RETRY
        assert outcome.article.needs_sentiment is True
        assert outcome.article.content_timeout_count == 0
        assert outcome.article.last_error.startswith("sentiment_error")

    async def test_completes_when_summary_not_needed(
        self, machine: PhaseMachine, article_factory
    ) -> None:
        """不需要摘要时情感完成即终态."""
        outcome = await machine.advance(article_factory(needs_summary=False))
        assert outcome.status is PhaseStatus.COMPLETED
        assert outcome.article.processed_at is not None

    async def test_input_article_not_modified(
        self, machine: PhaseMachine, article_factory
    ) -> None:
        """advance 返回副本，不修改输入."""
        article = article_factory()
        await machine.advance(article)
        assert article.needs_sentiment is True


class TestContentPhase:
    """测试 P1 正文抓取."""

    async def test_success_stores_truncated_content(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """成功后保存正文（按上限截断）."""
        fetcher.fetch.return_value = FullTextResult(success=True, content="x" * 5000)
        outcome = await machine.advance(article_factory(needs_sentiment=False))
        assert outcome.phase is Phase.CONTENT
        assert outcome.status is PhaseStatus.ADVANCED
        assert len(outcome.article.extracted_content) == 1000

    async def test_missing_link_is_terminal(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """没有链接时直接终态."""
        outcome = await machine.advance(
            article_factory(needs_sentiment=False, link=None)
        )
        assert outcome.status is PhaseStatus.FAILED
        assert outcome.article.last_error == "no_link"
        assert outcome.article.needs_summary is False
        assert outcome.article.processed_at is not None
        fetcher.fetch.assert_not_called()

    async def test_fetch_failure_increments_counter(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """抓取失败时计数加一并可重试."""
        fetcher.fetch.return_value = FullTextResult(success=False, error="HTTP 503")
        outcome = await machine.advance(article_factory(needs_sentiment=False))
        assert outcome.status is PhaseStatus.RETRY
        assert outcome.article.content_timeout_count == 1
        assert outcome.article.last_error == "fetch_failed: HTTP 503 (attempt 1/5)"

    async def test_fetch_exception_is_caught(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """抓取异常不会向上抛出."""
        fetcher.fetch.side_effect = TimeoutError("timed out")
        outcome = await machine.advance(article_factory(needs_sentiment=False))
        assert outcome.status is PhaseStatus.RETRY
        assert outcome.article.last_error.startswith("fetch_error: timed out")

    async def test_empty_content_is_transient(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """空正文视为抓取失败."""
        fetcher.fetch.return_value = FullTextResult(success=True, content="   ")
        outcome = await machine.advance(article_factory(needs_sentiment=False))
        assert outcome.status is PhaseStatus.RETRY
        assert outcome.article.extracted_content is None

    async def test_poisoned_at_max_attempts(
        self, machine: PhaseMachine, fetcher: MagicMock, article_factory
    ) -> None:
        """达到上限时强制终态."""
        fetcher.fetch.return_value = FullTextResult(success=False, error="HTTP 404")
        article = article_factory(needs_sentiment=False, content_timeout_count=4)

        outcome = await machine.advance(article)

        assert outcome.status is PhaseStatus.POISONED
        assert outcome.article.content_timeout_count == 5
        assert outcome.article.needs_sentiment is False
        assert outcome.article.needs_summary is False
        assert outcome.article.processed_at is not None
        assert outcome.article.last_error == "max_retries: fetch_failed: HTTP 404 (attempt 5/5)"


class TestSummaryPhase:
    """测试 P2 摘要生成."""

    @pytest.fixture
    def with_content(self, article_factory):
        return article_factory(
            needs_sentiment=False,
            sentiment="neutral",
            extracted_content="Some &amp; content\n\n  with   spacing",
            content_timeout_count=2,
        )

    async def test_success_completes(
        self, machine: PhaseMachine, summarizer: MagicMock, with_content
    ) -> None:
        """成功后设置摘要并进入终态."""
        outcome = await machine.advance(with_content)
        assert outcome.phase is Phase.SUMMARY
        assert outcome.status is PhaseStatus.COMPLETED
        assert outcome.article.summary
        assert outcome.article.needs_summary is False
        assert outcome.article.content_timeout_count == 0
        assert outcome.article.extracted_content is None
        assert outcome.article.processed_at is not None

    async def test_content_normalized_before_summarizing(
        self, machine: PhaseMachine, summarizer: MagicMock, with_content
    ) -> None:
        """发送给模型前解码实体并合并空白."""
        await machine.advance(with_content)
        summarizer.summarize.assert_awaited_once_with(
            with_content.title, "Some & content with spacing"
        )

    async def test_mismatch_is_terminal(
        self, machine: PhaseMachine, summarizer: MagicMock, with_content
    ) -> None:
        """内容不符直接终态，不计数."""
        summarizer.summarize.side_effect = ContentMismatchError("mismatch")
        outcome = await machine.advance(with_content)
        assert outcome.status is PhaseStatus.FAILED
        assert outcome.article.last_error == "content_mismatch"
        assert outcome.article.needs_summary is False
        assert outcome.article.summary is None
        assert outcome.article.content_timeout_count == 0

    async def test_ai_error_increments_counter(
        self, machine: PhaseMachine, summarizer: MagicMock, with_content
    ) -> None:
        """AI 服务错误计数加一并保留正文."""
        summarizer.summarize.side_effect = AIServiceError("context too long")
        outcome = await machine.advance(with_content)
        assert outcome.status is PhaseStatus.RETRY
        assert outcome.article.content_timeout_count == 3
        assert outcome.article.needs_summary is True
        assert outcome.article.extracted_content is not None
        assert outcome.article.last_error == "ai_error: context too long (attempt 3/5)"
