"""NewsPulse 主应用入口."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from newspulse import __version__
from newspulse.api import queue
from newspulse.config import get_settings
from newspulse.models.database import close_db, init_db
from newspulse.scheduler import create_scheduler, shutdown_scheduler

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """应用生命周期管理."""
    app_settings = get_settings()

    logger.info("正在初始化数据库...")
    await init_db(app_settings.database_url)

    if app_settings.scheduler_enabled:
        logger.info("正在启动定时任务...")
        create_scheduler(app_settings)
    else:
        logger.info("定时任务已禁用")

    logger.info("NewsPulse 启动完成！")
    yield

    logger.info("正在关闭...")
    await shutdown_scheduler()
    await close_db()
    logger.info("NewsPulse 已关闭")


app = FastAPI(
    title="NewsPulse",
    description="新闻情感分析与摘要 - 检查点处理队列",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(queue.router)


@app.get("/")
async def root() -> dict:
    """根路径."""
    return {
        "name": "NewsPulse",
        "version": __version__,
        "description": "新闻情感分析与摘要",
    }


@app.get("/health")
async def health() -> dict:
    """健康检查."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newspulse.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
