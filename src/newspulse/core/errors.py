"""处理队列错误类型."""


class QueueError(Exception):
    """处理队列错误基类."""


class TransientFetchError(QueueError):
    """正文抓取失败（超时、非 200、非文本），可重试."""


class ContentMismatchError(QueueError):
    """页面内容与文章标题不符，不再重试."""


class AIServiceError(QueueError):
    """AI 服务调用失败（限流、上下文过长、服务错误），可重试."""


class MissingLinkError(QueueError):
    """文章没有链接，无法抓取正文."""


class MaxRetriesExceeded(QueueError):
    """重试次数用尽."""

    def __init__(self, reason: str, attempts: int, max_attempts: int) -> None:
        super().__init__(f"max_retries: {reason} (attempt {attempts}/{max_attempts})")
        self.reason = reason
        self.attempts = attempts
        self.max_attempts = max_attempts


class IngestionUnavailable(QueueError):
    """文章来源不可用，Producer 本次不写入任何数据."""
