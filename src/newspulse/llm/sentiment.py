"""情感分析."""

import logging

from newspulse.core.errors import AIServiceError
from newspulse.llm.base import LLMProvider, Message
from newspulse.models.article import Sentiment

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a sentiment analysis assistant. Classify the sentiment of the "
    "provided {topic}news article as exactly one word: "
    '"positive", "negative", or "neutral". Only respond with that single word.'
)

SENTIMENT_MAX_TOKENS = 10


def parse_sentiment(response: str) -> Sentiment:
    """将模型输出归一化为情感标签."""
    text = response.strip().lower()
    if "positive" in text:
        return "positive"
    if "negative" in text:
        return "negative"
    return "neutral"


class SentimentClassifier:
    """根据标题和描述判断情感倾向."""

    def __init__(self, provider: LLMProvider, topic: str = "") -> None:
        self.provider = provider
        self.topic = topic

    async def classify(self, title: str, description: str = "") -> Sentiment:
        """
        分类文章情感.

        Raises:
            AIServiceError: 模型调用失败
        """
        topic = f"{self.topic}-related " if self.topic else ""
        messages = [
            Message(role="system", content=SYSTEM_PROMPT.format(topic=topic)),
            Message(role="user", content=f"{title}. {description}".strip()),
        ]

        try:
            response = await self.provider.chat(
                messages, max_tokens=SENTIMENT_MAX_TOKENS
            )
        except Exception as e:
            raise AIServiceError(str(e)) from e

        sentiment = parse_sentiment(response)
        logger.debug(f"情感分析: {sentiment} - {title[:50]}")
        return sentiment
