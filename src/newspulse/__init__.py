"""NewsPulse - 新闻情感分析与摘要处理队列."""

__version__ = "0.1.0"
