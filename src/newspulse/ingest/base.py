"""文章来源抽象."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

from pydantic import BaseModel, Field

from newspulse.core.errors import IngestionUnavailable
from newspulse.models.article import Article

logger = logging.getLogger(__name__)


class ProviderPage(BaseModel):
    """来源返回的一页文章（新到旧）."""

    articles: list[Article] = Field(default_factory=list)
    next_page: str | None = None


class NewsProvider(ABC):
    """新闻来源抽象基类."""

    @abstractmethod
    async def fetch_page(self, page_token: str | None = None) -> ProviderPage:
        """获取一页文章，page_token 为 None 时返回第一页."""
        ...

    async def close(self) -> None:
        """释放连接."""
        return None


async def aggregate_candidates(
    provider: NewsProvider,
    known_ids: Iterable[str],
    max_pages: int,
) -> list[Article]:
    """
    分页收集新文章，遇到已知文章即停止.

    Args:
        provider: 文章来源
        known_ids: 已知 ID（索引、待处理列表、检查点）
        max_pages: 最多读取页数

    Returns:
        新文章列表（来源顺序：新到旧）

    Raises:
        IngestionUnavailable: 第一页读取失败
    """
    known = set(known_ids)
    collected: list[Article] = []
    page_token: str | None = None
    pages = 0

    while pages < max_pages:
        try:
            page = await provider.fetch_page(page_token)
        except Exception as e:
            if pages == 0:
                msg = f"文章来源不可用: {e}"
                raise IngestionUnavailable(msg) from e
            logger.warning(f"第 {pages + 1} 页读取失败，保留已收集的文章: {e}")
            break

        pages += 1
        hit_known = False
        for article in page.articles:
            if article.id in known:
                logger.info(f"遇到已知文章，停止分页: {article.title[:50]}")
                hit_known = True
                break
            collected.append(article)
            known.add(article.id)

        logger.info(
            f"第 {pages} 页: {len(page.articles)} 篇，累计新文章 {len(collected)} 篇"
        )

        if hit_known or not page.articles or not page.next_page:
            break
        page_token = page.next_page

    return collected
