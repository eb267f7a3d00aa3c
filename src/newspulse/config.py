"""应用配置管理."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """应用配置（环境变量）."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # FreshRSS 配置（文章来源）
    freshrss_url: str = ""
    freshrss_username: str = ""
    freshrss_api_password: str = ""
    items_per_page: int = 50

    # LLM 配置
    llm_provider: Literal["openai", "ollama"] = "openai"
    news_topic: str = ""
    # 摘要回复的长度上限，情感分类使用单独的上限
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.2

    # OpenAI 配置
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"

    # Ollama 配置
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3.2"

    # 存储配置
    database_url: str = "sqlite+aiosqlite:///./newspulse.db"

    # 调度配置
    scheduler_enabled: bool = True
    producer_interval_minutes: int = 60
    processor_interval_minutes: int = 1

    # 队列限制
    max_stored_articles: int = 100
    max_pending_list_size: int = 100
    max_try_later_size: int = 20
    max_content_fetch_attempts: int = 5
    max_content_chars: int = 10 * 1024
    max_pages: int = 10
    id_index_ttl: int = 60 * 60 * 24 * 30
    delete_old_articles: bool = False

    # 全文抓取配置
    fetch_timeout_seconds: int = 30


@dataclass
class QueueLimits:
    """队列容量与重试上限."""

    max_stored_articles: int = 100
    max_pending_list_size: int = 100
    max_try_later_size: int = 20
    max_content_fetch_attempts: int = 5
    max_content_chars: int = 10 * 1024
    max_pages: int = 10
    id_index_ttl: int | None = 60 * 60 * 24 * 30
    delete_old_articles: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "QueueLimits":
        """从应用配置构建."""
        return cls(
            max_stored_articles=settings.max_stored_articles,
            max_pending_list_size=settings.max_pending_list_size,
            max_try_later_size=settings.max_try_later_size,
            max_content_fetch_attempts=settings.max_content_fetch_attempts,
            max_content_chars=settings.max_content_chars,
            max_pages=settings.max_pages,
            id_index_ttl=settings.id_index_ttl or None,
            delete_old_articles=settings.delete_old_articles,
        )


@lru_cache
def get_settings() -> Settings:
    """获取应用配置（带缓存）."""
    return Settings()
