"""键值存储接口与 SQL 实现."""

import json
import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from newspulse.models.kv import KVEntry

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    # SQLite 读回的时间不带时区，按 UTC 处理
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class KeyValueStore(ABC):
    """最终一致的键值存储：无事务、无条件写."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """读取 JSON 值，不存在或已过期时返回 None."""
        ...

    @abstractmethod
    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        """写入 JSON 值（覆盖）."""
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        """删除键."""
        ...


class SqlKeyValueStore(KeyValueStore):
    """基于 SQLModel 表的键值存储，每次操作使用独立会话."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, key: str) -> Any | None:
        async with self._session_factory() as session:
            entry = await session.get(KVEntry, key)
            if entry is None:
                return None
            if entry.expires_at is not None and _as_utc(entry.expires_at) <= _utcnow():
                logger.debug(f"键已过期: {key}")
                return None
            return json.loads(entry.value)

    async def put(self, key: str, value: Any, ttl_seconds: int | None = None) -> None:
        now = _utcnow()
        expires_at = now + timedelta(seconds=ttl_seconds) if ttl_seconds else None
        data = json.dumps(value, ensure_ascii=False, default=str)

        async with self._session_factory() as session:
            entry = await session.get(KVEntry, key)
            if entry:
                entry.value = data
                entry.expires_at = expires_at
                entry.updated_at = now
            else:
                session.add(
                    KVEntry(key=key, value=data, expires_at=expires_at, updated_at=now)
                )
            await session.commit()

    async def delete(self, key: str) -> None:
        async with self._session_factory() as session:
            entry = await session.get(KVEntry, key)
            if entry:
                await session.delete(entry)
                await session.commit()
