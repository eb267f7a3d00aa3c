"""KVEntry 键值存储表."""

from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class KVEntry(SQLModel, table=True):
    """键值对（值为 JSON 文本）."""

    __tablename__ = "kv_entries"  # type: ignore[assignment]

    key: str = Field(primary_key=True, description="存储键")
    value: str = Field(description="JSON 值")
    expires_at: datetime | None = Field(default=None, description="过期时间 (UTC)")
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC)
    )
