"""测试定时任务."""

from unittest.mock import AsyncMock, MagicMock, patch

from newspulse.config import Settings
from newspulse.core.processor import ProcessResult
from newspulse.scheduler.tasks import (
    create_scheduler,
    processor_task,
    producer_task,
    shutdown_scheduler,
)


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, **kwargs)


class TestTasks:
    """测试任务包装."""

    async def test_processor_task_swallows_errors(self) -> None:
        """Processor 异常不会中断调度."""
        processor = MagicMock()
        processor.run_once = AsyncMock(side_effect=RuntimeError("boom"))
        processor.close = AsyncMock()

        with (
            patch("newspulse.models.database.async_session_maker"),
            patch("newspulse.core.processor.create_processor", return_value=processor),
        ):
            await processor_task(_settings())

        processor.close.assert_awaited_once()

    async def test_processor_task_runs_once(self) -> None:
        """每次调度只运行一次."""
        processor = MagicMock()
        processor.run_once = AsyncMock(return_value=ProcessResult(status="idle"))
        processor.close = AsyncMock()

        with (
            patch("newspulse.models.database.async_session_maker"),
            patch("newspulse.core.processor.create_processor", return_value=processor),
        ):
            await processor_task(_settings())

        processor.run_once.assert_awaited_once()

    async def test_producer_task_skips_without_source(self) -> None:
        """未配置 FreshRSS 时跳过."""
        with patch("newspulse.core.producer.create_producer") as create:
            await producer_task(_settings(freshrss_url=""))
        create.assert_not_called()


class TestScheduler:
    """测试调度器创建."""

    async def test_registers_jobs(self) -> None:
        """注册 Producer、Processor 和初始 Producer 任务."""
        scheduler = create_scheduler(
            _settings(producer_interval_minutes=30, processor_interval_minutes=2)
        )
        try:
            job_ids = {job.id for job in scheduler.get_jobs()}
            assert {"producer_task", "processor_task", "producer_task_initial"} <= job_ids

            processor_job = scheduler.get_job("processor_task")
            assert processor_job.max_instances == 1
            assert processor_job.coalesce is True
        finally:
            await shutdown_scheduler()
