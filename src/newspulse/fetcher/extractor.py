"""正文提取器."""

import asyncio
import logging
import re
from concurrent.futures import ThreadPoolExecutor

from pydantic import BaseModel
from trafilatura import extract, fetch_url
from trafilatura.settings import use_config

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class FullTextResult(BaseModel):
    """正文抓取结果."""

    success: bool
    content: str | None = None
    word_count: int = 0
    error: str | None = None


class FullTextExtractor:
    """使用 trafilatura 抓取并提取网页正文."""

    def __init__(self, timeout_seconds: int = 30, max_workers: int = 1) -> None:
        self._executor = ThreadPoolExecutor(max_workers=max_workers)
        self._config = use_config()
        # 模拟浏览器的 User-Agent，避免简单的 403
        self._config.set("DEFAULT", "USER_AGENT", USER_AGENT)
        self._config.set("DEFAULT", "DOWNLOAD_TIMEOUT", str(timeout_seconds))

    async def fetch(self, url: str) -> FullTextResult:
        """
        抓取指定 URL 的正文.

        trafilatura 是同步库，这里用线程池包装成异步。
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._fetch_sync, url)

    def _fetch_sync(self, url: str) -> FullTextResult:
        """同步抓取正文."""
        try:
            downloaded = fetch_url(url, config=self._config)
            if not downloaded:
                return FullTextResult(
                    success=False,
                    error="download failed (timeout, non-200 or non-text response)",
                )

            text_content = extract(
                downloaded,
                include_comments=False,
                include_tables=False,
                output_format="txt",
                favor_precision=True,
                config=self._config,
            )
            if not text_content:
                return FullTextResult(success=False, error="no extractable content")

            text_content = self._clean_text(text_content)
            return FullTextResult(
                success=True,
                content=text_content,
                word_count=len(text_content.split()),
            )

        except Exception as e:
            logger.warning(f"正文抓取异常: {url} - {e}")
            return FullTextResult(success=False, error=str(e))

    def _clean_text(self, text: str) -> str:
        """清理纯文本内容."""
        text = re.sub(r"\n{3,}", "\n\n", text)
        lines = [line.strip() for line in text.split("\n")]
        text = "\n".join(lines)
        # 移除控制字符
        text = re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text)
        return text.strip()

    def close(self) -> None:
        """关闭线程池."""
        self._executor.shutdown(wait=False)
