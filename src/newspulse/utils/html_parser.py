"""HTML 解析工具."""

import html
import re

from bs4 import BeautifulSoup


def html_to_text(html_content: str) -> str:
    """
    将 HTML 转换为纯文本.

    Args:
        html_content: HTML 内容

    Returns:
        提取的纯文本内容
    """
    if not html_content:
        return ""

    soup = BeautifulSoup(html_content, "lxml")

    # 移除 script 和 style 标签
    for element in soup(["script", "style", "nav", "footer", "header"]):
        element.decompose()

    lines = [line.strip() for line in soup.get_text(separator="\n").split("\n")]
    text = "\n".join(line for line in lines if line)

    return text.strip()


def extract_first_image(html_content: str) -> str | None:
    """
    提取 HTML 中的第一张图片 URL.

    Args:
        html_content: HTML 内容

    Returns:
        图片 URL 或 None
    """
    if not html_content:
        return None

    soup = BeautifulSoup(html_content, "lxml")
    img = soup.find("img")

    if img and img.get("src"):
        src = img["src"]
        if isinstance(src, list):
            src = src[0] if src else None
        return src if src else None

    return None


def normalize_content(text: str) -> str:
    """解码 HTML 实体并合并空白，用于发送给摘要模型."""
    if not text:
        return ""
    text = html.unescape(text)
    return re.sub(r"\s+", " ", text).strip()
