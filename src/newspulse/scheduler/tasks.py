"""定时任务定义."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from newspulse.config import Settings

logger = logging.getLogger(__name__)

_scheduler: AsyncIOScheduler | None = None


async def producer_task(settings: Settings) -> None:
    """Producer 任务：从 FreshRSS 发现新文章."""
    from newspulse.core.producer import create_producer
    from newspulse.models.database import async_session_maker
    from newspulse.store.kv import SqlKeyValueStore

    if not settings.freshrss_url:
        logger.warning("FreshRSS 未配置，跳过 Producer")
        return

    logger.info("开始 Producer 任务...")
    producer = create_producer(settings, SqlKeyValueStore(async_session_maker()))
    try:
        result = await producer.run()
        logger.info(
            f"Producer 完成: 状态={result.status}, 新增={result.added}, "
            f"待处理={result.pending}"
        )
    except Exception as e:
        logger.exception(f"Producer 任务失败: {e}")
    finally:
        await producer.close()


async def processor_task(settings: Settings) -> None:
    """Processor 任务：处理一篇文章的一个阶段."""
    from newspulse.core.processor import create_processor
    from newspulse.models.database import async_session_maker
    from newspulse.store.kv import SqlKeyValueStore

    processor = create_processor(settings, SqlKeyValueStore(async_session_maker()))
    try:
        result = await processor.run_once()
        if result.status != "idle":
            logger.info(
                f"Processor 完成: 文章={result.article_id}, 阶段={result.phase}, "
                f"结果={result.outcome}"
            )
    except Exception as e:
        logger.exception(f"Processor 任务失败: {e}")
    finally:
        await processor.close()


def create_scheduler(settings: Settings) -> AsyncIOScheduler:
    """创建并启动定时任务调度器."""
    global _scheduler

    _scheduler = AsyncIOScheduler()

    _scheduler.add_job(
        producer_task,
        "interval",
        minutes=settings.producer_interval_minutes,
        args=[settings],
        id="producer_task",
        name="发现新文章",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    _scheduler.add_job(
        processor_task,
        "interval",
        minutes=settings.processor_interval_minutes,
        args=[settings],
        id="processor_task",
        name="处理文章",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    # 启动时立即执行一次 Producer
    _scheduler.add_job(
        producer_task,
        "date",  # 一次性任务
        args=[settings],
        id="producer_task_initial",
        name="初始发现新文章",
    )

    _scheduler.start()
    logger.info(
        f"定时任务调度器已启动，Producer 间隔: {settings.producer_interval_minutes} 分钟，"
        f"Processor 间隔: {settings.processor_interval_minutes} 分钟"
    )

    return _scheduler


async def shutdown_scheduler() -> None:
    """关闭定时任务调度器."""
    global _scheduler
    if _scheduler:
        _scheduler.shutdown(wait=False)
        logger.info("定时任务调度器已关闭")
        _scheduler = None
