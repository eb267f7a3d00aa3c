"""LLM 抽象层."""

from newspulse.llm.base import LLMConfig, LLMProvider, Message
from newspulse.llm.factory import create_llm_provider
from newspulse.llm.ollama import OllamaProvider
from newspulse.llm.openai import OpenAIProvider
from newspulse.llm.sentiment import SentimentClassifier
from newspulse.llm.summarizer import ArticleSummarizer

__all__ = [
    "ArticleSummarizer",
    "LLMConfig",
    "LLMProvider",
    "Message",
    "OllamaProvider",
    "OpenAIProvider",
    "SentimentClassifier",
    "create_llm_provider",
]
