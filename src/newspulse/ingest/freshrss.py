"""FreshRSS Google Reader API 文章来源."""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

import httpx

from newspulse.ingest.base import NewsProvider, ProviderPage
from newspulse.models.article import Article
from newspulse.utils.html_parser import extract_first_image, html_to_text

logger = logging.getLogger(__name__)

READING_LIST = "user/-/state/com.google/reading-list"
MAX_DESCRIPTION_CHARS = 1000


@dataclass
class FreshRSSConfig:
    """FreshRSS 连接配置."""

    base_url: str
    username: str
    api_password: str
    items_per_page: int = 50
    timeout: float = 30.0


class FreshRSSError(Exception):
    """FreshRSS API 错误."""


class FreshRSSProvider(NewsProvider):
    """从 FreshRSS 阅读列表分页读取文章."""

    def __init__(
        self,
        config: FreshRSSConfig,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self._auth_token: str | None = None
        self._client = client or httpx.AsyncClient(timeout=config.timeout)

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    @property
    def _api_base(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/api/greader.php"

    async def authenticate(self) -> str:
        """获取认证 token."""
        url = f"{self._api_base}/accounts/ClientLogin"
        data = {
            "Email": self.config.username,
            "Passwd": self.config.api_password,
        }

        response = await self._client.post(url, data=data)
        response.raise_for_status()

        # 响应格式为多行 "Key=value"
        for line in response.text.strip().split("\n"):
            if line.startswith("Auth="):
                self._auth_token = line[5:]
                return self._auth_token

        msg = "认证失败：无法获取 Auth token"
        raise FreshRSSError(msg)

    async def _get_headers(self) -> dict[str, str]:
        """获取带认证的请求头，首次调用时登录."""
        if not self._auth_token:
            await self.authenticate()
        return {"Authorization": f"GoogleLogin auth={self._auth_token}"}

    async def fetch_page(self, page_token: str | None = None) -> ProviderPage:
        """读取阅读列表的一页，page_token 为上一页的 continuation."""
        url = f"{self._api_base}/reader/api/0/stream/contents/{READING_LIST}"
        params: dict[str, Any] = {
            "output": "json",
            "n": self.config.items_per_page,
        }
        if page_token:
            params["c"] = page_token

        response = await self._client.get(
            url,
            params=params,
            headers=await self._get_headers(),
        )
        response.raise_for_status()

        data = response.json()
        return ProviderPage(
            articles=self._parse_items(data.get("items", [])),
            next_page=data.get("continuation") or None,
        )

    def _parse_items(self, items: list[dict[str, Any]]) -> list[Article]:
        """解析文章列表."""
        articles: list[Article] = []

        for item in items:
            item_id = item.get("id")
            if not item_id:
                logger.warning("文章缺少 ID，跳过")
                continue

            content_obj = item.get("summary") or item.get("content") or {}
            content_html = content_obj.get("content", "")

            alternates = item.get("alternate", [])
            link = alternates[0].get("href") if alternates else None

            origin = item.get("origin", {})

            published_ts = item.get("published", 0)
            published_at = (
                datetime.fromtimestamp(published_ts, tz=UTC) if published_ts else None
            )

            description = html_to_text(content_html)[:MAX_DESCRIPTION_CHARS] or None

            articles.append(
                Article(
                    id=str(item_id),
                    title=item.get("title") or "无标题",
                    link=link,
                    published_at=published_at,
                    source=origin.get("title"),
                    description=description,
                    image_url=extract_first_image(content_html),
                )
            )

        return articles
