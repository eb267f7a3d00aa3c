"""文章摘要生成."""

import logging
import re

from newspulse.core.errors import AIServiceError, ContentMismatchError
from newspulse.llm.base import LLMProvider, Message

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 100
MIN_SUMMARY_LENGTH = 20
SUMMARY_MARKER = "SUMMARY:"
MISMATCH_INDICATORS = ("ERROR:", "CONTENT_MISMATCH")

# 模型在没有输出标记时常见的确认性开头
CONFIRMATION_PATTERNS = [
    re.compile(r"^The webpage content matches[^.]*\.\s*", re.IGNORECASE),
    re.compile(r"^This article discusses[^.]*\.\s*", re.IGNORECASE),
    re.compile(r"^Here'?s?\s+(a\s+)?(2-3\s+sentence\s+)?summary[^:]*:\s*", re.IGNORECASE),
    re.compile(r"^Summary:\s*", re.IGNORECASE),
]

SYSTEM_PROMPT = " ".join(
    [
        "You are a news summarization assistant.",
        "Task: First verify that the webpage content matches the article title,"
        " then provide a summary.",
        "Validation: If the webpage content does NOT match or discuss the topic"
        " in the title (e.g., wrong article, paywall, error page, or unrelated"
        ' content), respond with exactly "ERROR: CONTENT_MISMATCH".',
        "Summary: Otherwise, provide a summary of the {topic}news,"
        " focusing on key facts and implications.",
        'Format: Start your summary with the marker "SUMMARY:" followed by the'
        " actual summary text.",
    ]
)

USER_PROMPT_TEMPLATE = """Article Title: {title}

Webpage Content: {content}

First, verify the content matches the title. If it does not match, respond with "ERROR: CONTENT_MISMATCH". If it matches, provide a summary starting with "SUMMARY:" followed by your summary:"""


def parse_summary(response: str) -> str | None:
    """从模型输出中提取摘要，内容不符或过短时返回 None."""
    text = response.strip()
    upper = text.upper()

    if any(indicator in upper for indicator in MISMATCH_INDICATORS):
        return None

    marker_index = upper.find(SUMMARY_MARKER)
    if marker_index != -1:
        summary = text[marker_index + len(SUMMARY_MARKER) :]
    else:
        summary = text
        for pattern in CONFIRMATION_PATTERNS:
            summary = pattern.sub("", summary)

    summary = summary.strip()
    if len(summary) > MIN_SUMMARY_LENGTH:
        return summary
    return None


class ArticleSummarizer:
    """生成摘要并校验正文与标题一致."""

    def __init__(self, provider: LLMProvider, topic: str = "") -> None:
        self.provider = provider
        self.topic = topic

    async def summarize(self, title: str, content: str) -> str:
        """
        生成文章摘要.

        Raises:
            ContentMismatchError: 正文过短或与标题不符
            AIServiceError: 模型调用失败
        """
        if not content or len(content) < MIN_CONTENT_LENGTH:
            msg = f"正文过短: {len(content or '')} 字符"
            raise ContentMismatchError(msg)

        logger.info(f"生成摘要，正文长度 {len(content)} 字符 (~{len(content) // 4} tokens)")

        try:
            response = await self.provider.chat(self._build_messages(title, content))
        except Exception as e:
            raise AIServiceError(str(e)) from e

        summary = parse_summary(response)
        if summary is None:
            msg = f"内容与标题不符: {title[:50]}"
            raise ContentMismatchError(msg)
        return summary

    def _build_messages(self, title: str, content: str) -> list[Message]:
        """构建对话消息."""
        topic = f"{self.topic}-related " if self.topic else ""
        return [
            Message(role="system", content=SYSTEM_PROMPT.format(topic=topic)),
            Message(
                role="user",
                content=USER_PROMPT_TEMPLATE.format(title=title, content=content),
            ),
        ]
