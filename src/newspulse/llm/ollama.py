"""Ollama LLM Provider."""

import httpx

from newspulse.llm.base import LLMConfig, LLMProvider, Message


class OllamaProvider(LLMProvider):
    """Ollama 本地模型 Provider."""

    def __init__(
        self,
        config: LLMConfig,
        host: str = "http://localhost:11434",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(config)
        self.host = host.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=120.0)

    async def close(self) -> None:
        """关闭客户端."""
        await self._client.aclose()

    async def chat(
        self, messages: list[Message], max_tokens: int | None = None
    ) -> str:
        """对话，返回完整响应."""
        url = f"{self.host}/api/chat"
        payload = {
            "model": self.config.model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "stream": False,
            "options": {
                "temperature": self.config.temperature,
                "num_predict": max_tokens or self.config.max_tokens,
            },
        }

        response = await self._client.post(url, json=payload)
        response.raise_for_status()

        data = response.json()
        return data.get("message", {}).get("content", "")
