"""处理队列运维 API."""

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from newspulse.config import QueueLimits, Settings, get_settings
from newspulse.core.processor import create_processor
from newspulse.core.producer import create_producer
from newspulse.core.stats import get_queue_stats
from newspulse.models.database import async_session_maker
from newspulse.store.kv import KeyValueStore, SqlKeyValueStore
from newspulse.store.repository import ArticleStore, CheckpointStore

router = APIRouter(prefix="/api/queue", tags=["queue"])


def get_kv_store() -> KeyValueStore:
    """获取键值存储（用于依赖注入）."""
    return SqlKeyValueStore(async_session_maker())


@router.get("/stats")
async def get_stats(
    kv: KeyValueStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """获取队列统计."""
    stats = await get_queue_stats(kv, QueueLimits.from_settings(settings))
    return {
        "pending": stats.pending,
        "try_later": stats.try_later,
        "processed": stats.processed,
        "indexed": stats.indexed,
        "needs_processing": stats.needs_processing,
        "poisoned": stats.poisoned,
        "current_id": stats.current_id,
        "last_update": stats.last_update.isoformat() if stats.last_update else None,
    }


@router.get("/try-later")
async def get_try_later(
    kv: KeyValueStore = Depends(get_kv_store),
) -> list[dict[str, Any]]:
    """获取暂缓重试的文章."""
    checkpoint = await CheckpointStore(kv).load()
    return [
        {
            "id": entry.id,
            "title": entry.article.title,
            "reason": entry.reason,
            "failed_at": entry.failed_at.isoformat(),
            "attempts": entry.article.content_timeout_count,
        }
        for entry in checkpoint.try_later
    ]


@router.post("/producer/run")
async def run_producer(
    kv: KeyValueStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """立即执行一次 Producer."""
    if not settings.freshrss_url:
        raise HTTPException(status_code=400, detail="FreshRSS 未配置")

    producer = create_producer(settings, kv)
    try:
        result = await producer.run()
    finally:
        await producer.close()
    return asdict(result)


@router.post("/processor/run")
async def run_processor(
    kv: KeyValueStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """立即执行一次 Processor."""
    processor = create_processor(settings, kv)
    try:
        result = await processor.run_once()
    finally:
        await processor.close()
    return asdict(result)


@router.get("/articles/{article_id:path}")
async def get_article(
    article_id: str,
    kv: KeyValueStore = Depends(get_kv_store),
    settings: Settings = Depends(get_settings),
) -> dict[str, Any]:
    """读取单篇文章记录."""
    article = await ArticleStore(kv, settings.id_index_ttl).get(article_id)
    if not article:
        raise HTTPException(status_code=404, detail="文章不存在")
    return article.model_dump(mode="json")
