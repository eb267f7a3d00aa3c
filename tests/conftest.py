"""测试配置和 fixtures."""

from collections.abc import AsyncGenerator, Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from newspulse.config import QueueLimits
from newspulse.core.phases import PhaseMachine
from newspulse.core.processor import Processor
from newspulse.fetcher.extractor import FullTextResult
from newspulse.models.article import Article
from newspulse.models.kv import KVEntry  # noqa: F401
from newspulse.store.kv import SqlKeyValueStore

LONG_CONTENT = (
    "Bitcoin rallied sharply on Tuesday as institutional demand returned to the "
    "market, pushing the price above its previous resistance level for the first "
    "time in several weeks according to exchange data."
)


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """创建测试用的内存数据库会话工厂（所有会话共享同一连接）."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def kv_store(
    session_factory: async_sessionmaker[AsyncSession],
) -> SqlKeyValueStore:
    """创建测试用的键值存储."""
    return SqlKeyValueStore(session_factory)


@pytest.fixture
def limits() -> QueueLimits:
    """测试用的队列限制."""
    return QueueLimits(
        max_stored_articles=10,
        max_pending_list_size=10,
        max_try_later_size=3,
        max_content_fetch_attempts=5,
        max_content_chars=1000,
        max_pages=3,
        id_index_ttl=None,
    )


@pytest.fixture
def article_factory() -> Callable[..., Article]:
    """创建测试用的文章."""

    def _make(article_id: str = "a1", **kwargs: Any) -> Article:
        data: dict[str, Any] = {
            "id": article_id,
            "title": f"Bitcoin news {article_id}",
            "link": f"https://example.com/{article_id}",
            "description": "Markets moved today.",
        }
        data.update(kwargs)
        return Article(**data)

    return _make


@pytest.fixture
def fetcher() -> MagicMock:
    """Mock 正文抓取器（默认成功）."""
    mock = MagicMock()
    mock.fetch = AsyncMock(
        return_value=FullTextResult(success=True, content=LONG_CONTENT, word_count=30)
    )
    return mock


@pytest.fixture
def classifier() -> MagicMock:
    """Mock 情感分类器."""
    mock = MagicMock()
    mock.classify = AsyncMock(return_value="positive")
    return mock


@pytest.fixture
def summarizer() -> MagicMock:
    """Mock 摘要生成器."""
    mock = MagicMock()
    mock.summarize = AsyncMock(
        return_value="Bitcoin rose on renewed institutional demand."
    )
    return mock


@pytest.fixture
def machine(
    fetcher: MagicMock,
    classifier: MagicMock,
    summarizer: MagicMock,
    limits: QueueLimits,
) -> PhaseMachine:
    """使用 mock 服务的阶段状态机."""
    return PhaseMachine(fetcher, classifier, summarizer, limits)


@pytest.fixture
def processor(
    kv_store: SqlKeyValueStore,
    machine: PhaseMachine,
    limits: QueueLimits,
) -> Processor:
    """使用 mock 服务的 Processor."""
    return Processor(kv_store, machine, limits)
