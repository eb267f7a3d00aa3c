"""处理队列的持久化记录."""

from datetime import datetime

from pydantic import BaseModel, Field

from newspulse.models.article import Article


class PendingEntry(BaseModel):
    """待处理列表中的一项（由 Producer 写入）."""

    id: str
    article: Article
    added_at: datetime


class TryLaterEntry(BaseModel):
    """暂缓重试的文章."""

    id: str
    article: Article
    failed_at: datetime
    reason: str = ""


class Checkpoint(BaseModel):
    """Processor 检查点（单行记录，仅由 Processor 写入）."""

    current_id: str | None = None
    current_article: Article | None = None
    processed_ids: list[str] = Field(default_factory=list)
    try_later: list[TryLaterEntry] = Field(default_factory=list)
    last_update: datetime | None = None
