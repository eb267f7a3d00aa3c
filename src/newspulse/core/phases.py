"""文章处理阶段状态机.

每次调用只执行一个阶段：

- P0 情感分析: ``needs_sentiment``
- P1 正文抓取: 情感已完成、``needs_summary`` 且尚无正文
- P2 摘要生成: 已有正文、``needs_summary``

所有阶段错误都在这里转换为文章字段的更新，不向上抛出。
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import StrEnum

from newspulse.config import QueueLimits
from newspulse.core.errors import (
    ContentMismatchError,
    MaxRetriesExceeded,
    MissingLinkError,
    TransientFetchError,
)
from newspulse.fetcher.extractor import FullTextExtractor
from newspulse.llm.sentiment import SentimentClassifier
from newspulse.llm.summarizer import ArticleSummarizer
from newspulse.models.article import Article
from newspulse.utils.html_parser import normalize_content

logger = logging.getLogger(__name__)


class Phase(StrEnum):
    """处理阶段."""

    SENTIMENT = "sentiment"
    CONTENT = "content"
    SUMMARY = "summary"


class PhaseStatus(StrEnum):
    """阶段执行结果."""

    ADVANCED = "advanced"  # 非最终阶段成功，同一文章下次继续
    COMPLETED = "completed"  # 全部完成
    FAILED = "failed"  # 永久失败（无链接、内容不符）
    RETRY = "retry"  # 可重试失败
    POISONED = "poisoned"  # 重试次数用尽


TERMINAL_STATUSES = {PhaseStatus.COMPLETED, PhaseStatus.FAILED, PhaseStatus.POISONED}


@dataclass
class PhaseOutcome:
    """一次阶段执行的结果."""

    article: Article
    phase: Phase | None
    status: PhaseStatus

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def next_phase(article: Article) -> Phase | None:
    """按顺序返回第一个满足前置条件的阶段."""
    if article.needs_sentiment:
        return Phase.SENTIMENT
    if article.needs_summary and article.extracted_content is None:
        return Phase.CONTENT
    if article.needs_summary:
        return Phase.SUMMARY
    return None


def _now() -> datetime:
    return datetime.now(UTC)


class PhaseMachine:
    """执行单个处理阶段."""

    def __init__(
        self,
        fetcher: FullTextExtractor,
        classifier: SentimentClassifier,
        summarizer: ArticleSummarizer,
        limits: QueueLimits,
    ) -> None:
        self.fetcher = fetcher
        self.classifier = classifier
        self.summarizer = summarizer
        self.limits = limits

    async def close(self) -> None:
        """释放外部服务连接."""
        providers = {id(p): p for p in (self.classifier.provider, self.summarizer.provider)}
        for provider in providers.values():
            await provider.close()
        self.fetcher.close()

    async def advance(self, article: Article) -> PhaseOutcome:
        """对文章执行下一个阶段，返回更新后的副本."""
        article = article.model_copy(deep=True)
        phase = next_phase(article)

        if phase is None:
            return PhaseOutcome(article, None, PhaseStatus.COMPLETED)

        logger.info(f"执行阶段 {phase}: {article.id} ({article.title[:50]})")

        if phase is Phase.SENTIMENT:
            status = await self._run_sentiment(article)
        elif phase is Phase.CONTENT:
            status = await self._run_content(article)
        else:
            status = await self._run_summary(article)

        logger.info(f"阶段 {phase} 结果: {status} - {article.id}")
        return PhaseOutcome(article, phase, status)

    async def _run_sentiment(self, article: Article) -> PhaseStatus:
        """P0: 情感分析，失败不计数."""
        try:
            sentiment = await self.classifier.classify(
                article.title, article.description or ""
            )
        except Exception as e:
            logger.warning(f"情感分析失败: {article.id} - {e}")
            article.last_error = f"sentiment_error: {str(e)[:100]}"
            return PhaseStatus.RETRY

        article.sentiment = sentiment
        article.needs_sentiment = False
        article.last_error = None

        if article.is_terminal:
            article.processed_at = _now()
            return PhaseStatus.COMPLETED
        return PhaseStatus.ADVANCED

    async def _run_content(self, article: Article) -> PhaseStatus:
        """P1: 抓取正文."""
        try:
            content = await self._fetch_content(article)
        except MissingLinkError:
            logger.warning(f"文章没有链接，跳过摘要: {article.id}")
            article.needs_summary = False
            article.content_timeout_count = 0
            article.last_error = "no_link"
            article.processed_at = _now()
            return PhaseStatus.FAILED
        except TransientFetchError as e:
            return self._record_failure(article, f"fetch_failed: {e}")
        except Exception as e:
            return self._record_failure(article, f"fetch_error: {str(e)[:100]}")

        article.extracted_content = content[: self.limits.max_content_chars]
        article.last_error = None
        return PhaseStatus.ADVANCED

    async def _fetch_content(self, article: Article) -> str:
        if not article.link:
            raise MissingLinkError(article.id)

        result = await self.fetcher.fetch(article.link)
        if not result.success:
            raise TransientFetchError(result.error or "unknown")
        if not result.content or not result.content.strip():
            raise TransientFetchError("empty content")
        return result.content

    async def _run_summary(self, article: Article) -> PhaseStatus:
        """P2: 生成摘要并校验内容与标题一致."""
        content = normalize_content(article.extracted_content or "")

        try:
            summary = await self.summarizer.summarize(article.title, content)
        except ContentMismatchError as e:
            logger.warning(f"内容与标题不符，放弃摘要: {article.id} - {e}")
            article.needs_summary = False
            article.content_timeout_count = 0
            article.last_error = "content_mismatch"
            article.extracted_content = None
            article.processed_at = _now()
            return PhaseStatus.FAILED
        except Exception as e:
            return self._record_failure(article, f"ai_error: {str(e)[:100]}")

        article.summary = summary
        article.needs_summary = False
        article.content_timeout_count = 0
        article.last_error = None
        article.extracted_content = None
        article.processed_at = _now()
        return PhaseStatus.COMPLETED

    def _record_failure(self, article: Article, reason: str) -> PhaseStatus:
        """累加失败次数，达到上限时强制终态."""
        max_attempts = self.limits.max_content_fetch_attempts
        article.content_timeout_count += 1
        attempts = article.content_timeout_count

        if attempts >= max_attempts:
            error = MaxRetriesExceeded(reason, attempts, max_attempts)
            logger.warning(f"重试次数用尽，放弃: {article.id} - {error}")
            article.needs_sentiment = False
            article.needs_summary = False
            article.last_error = str(error)
            article.extracted_content = None
            article.processed_at = _now()
            return PhaseStatus.POISONED

        article.last_error = f"{reason} (attempt {attempts}/{max_attempts})"
        logger.warning(f"阶段失败，稍后重试: {article.id} - {article.last_error}")
        return PhaseStatus.RETRY
