"""Article 文章模型."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

Sentiment = Literal["positive", "negative", "neutral"]


class Article(BaseModel):
    """新闻文章（以 JSON 形式保存在 KV 存储中）."""

    id: str = Field(description="来源提供的稳定 ID")
    title: str = Field(default="", description="标题")
    link: str | None = Field(default=None, description="原文链接")
    published_at: datetime | None = Field(default=None, description="发布时间")
    source: str | None = Field(default=None, description="来源名称")
    description: str | None = Field(default=None, description="摘要描述")
    image_url: str | None = Field(default=None, description="配图 URL")

    extracted_content: str | None = Field(default=None, description="抓取的正文")
    sentiment: Sentiment | None = Field(default=None, description="情感倾向")
    summary: str | None = Field(default=None, description="AI 生成摘要")

    needs_sentiment: bool = Field(default=True, description="是否需要情感分析")
    needs_summary: bool = Field(default=True, description="是否需要生成摘要")
    content_timeout_count: int = Field(
        default=0, ge=0, description="正文抓取/摘要失败次数"
    )
    last_error: str | None = Field(default=None, description="最近一次失败原因")
    processed_at: datetime | None = Field(default=None, description="终态时间")

    @property
    def is_terminal(self) -> bool:
        """两个处理标志都已清除."""
        return not self.needs_sentiment and not self.needs_summary

    def needs_processing(self, max_attempts: int) -> bool:
        """是否仍待处理."""
        return (
            self.needs_sentiment
            or self.needs_summary
            or 0 < self.content_timeout_count < max_attempts
        )
