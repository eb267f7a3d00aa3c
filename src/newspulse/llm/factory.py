"""LLM Provider 工厂."""

from newspulse.config import Settings
from newspulse.llm.base import LLMConfig, LLMProvider
from newspulse.llm.ollama import OllamaProvider
from newspulse.llm.openai import OpenAIProvider


def create_llm_provider(settings: Settings) -> LLMProvider:
    """根据配置创建 LLM Provider."""
    if settings.llm_provider == "ollama":
        config = LLMConfig(
            model=settings.ollama_model,
            temperature=settings.llm_temperature,
            max_tokens=settings.llm_max_tokens,
        )
        return OllamaProvider(config=config, host=settings.ollama_host)

    # 默认使用 OpenAI
    config = LLMConfig(
        model=settings.openai_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
    return OpenAIProvider(
        config=config,
        api_key=settings.openai_api_key,
        base_url=settings.openai_base_url,
    )
