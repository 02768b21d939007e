"""
数据模型模块
Data Models Module

定义知识库文章模型以及时间戳解析工具。
Defines the knowledge-base article model and timestamp helpers.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime:
    """
    解析 ISO-8601 时间戳
    Parse an ISO-8601 timestamp

    无法解析或缺失的时间一律视为 Unix 纪元，保证排序稳定且不落入任何时间窗口。
    Missing or unparseable values resolve to the Unix epoch so they sort
    first and never fall inside a rolling window.

    Args:
        value: ISO 字符串、datetime 或 None
               ISO string, datetime or None

    Returns:
        带 UTC 时区的 datetime
        Timezone-aware datetime in UTC

    Examples:
        >>> parse_timestamp('2026-01-30T10:00:00.000Z').year
        2026
        >>> parse_timestamp(None) == EPOCH
        True
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return EPOCH
    else:
        return EPOCH

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _as_text(value: Any) -> str:
    """非字符串字段统一转为字符串；None 或空值为空字符串"""
    if value is None or value == "":
        return ""
    return value if isinstance(value, str) else str(value)


def _as_optional_text(value: Any) -> str | None:
    return _as_text(value) or None


def _as_tuple(value: Any) -> tuple[str, ...]:
    if value is None or value == "" or value == [] or value == ():
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple, set, frozenset)):
        return (str(value),)
    return tuple(str(item) for item in value if item is not None)


@dataclass(frozen=True)
class Article:
    """
    文章数据模型
    Article data model

    由外部文章库提供的已收藏文章，索引后不可变。
    A saved article supplied by the external article store; immutable once
    indexed.

    Attributes:
        id: 文章唯一 ID
        title: 标题
        content: 全文（可选）
        summary: 摘要（可选）
        key_points: 关键观点，保持原有顺序
        tags: 标签，保持原有顺序用于展示
        category: 分类（可选）
        saved_at: 收藏时间（ISO-8601 字符串）
        url: 原文链接（可选）
    """
    id: str
    title: str = ""
    content: str = ""
    summary: str = ""
    key_points: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    category: str | None = None
    saved_at: str | None = None
    url: str | None = None

    @property
    def saved_time(self) -> datetime:
        """收藏时间（已解析）"""
        return parse_timestamp(self.saved_at)

    def to_dict(self) -> dict[str, Any]:
        """转换为文章库使用的字典格式"""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "summary": self.summary,
            "keyPoints": list(self.key_points),
            "tags": list(self.tags),
            "category": self.category,
            "savedAt": self.saved_at,
            "url": self.url,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Article":
        """
        从字典创建 Article 对象
        Create an Article from a dict

        同时接受文章库的驼峰键名（keyPoints, savedAt）和下划线键名。
        Accepts both the store's camelCase keys and snake_case keys.
        """
        key_points = data.get("keyPoints", data.get("key_points"))
        saved_at = data.get("savedAt", data.get("saved_at"))
        raw_id = data.get("id")

        return cls(
            id="" if raw_id is None else str(raw_id),
            title=_as_text(data.get("title")),
            content=_as_text(data.get("content")),
            summary=_as_text(data.get("summary")),
            key_points=_as_tuple(key_points),
            tags=_as_tuple(data.get("tags")),
            category=_as_optional_text(data.get("category")),
            saved_at=saved_at if isinstance(saved_at, str) else (
                saved_at.isoformat() if isinstance(saved_at, datetime) else None
            ),
            url=_as_optional_text(data.get("url")),
        )


def coerce_article(item: "Article | Mapping[str, Any]") -> Article:
    """将字典或 Article 统一为 Article"""
    if isinstance(item, Article):
        return item
    return Article.from_dict(item)


def coerce_articles(items: Iterable["Article | Mapping[str, Any]"] | None) -> tuple[Article, ...]:
    """
    将文章集合转换为不可变快照
    Convert a collection of articles into an immutable snapshot

    Examples:
        >>> snapshot = coerce_articles([{'id': 'a', 'title': 'RWA'}])
        >>> snapshot[0].title
        'RWA'
    """
    if not items:
        return ()
    return tuple(coerce_article(item) for item in items)
