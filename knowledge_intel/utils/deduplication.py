"""
去重工具模块
Deduplication Utility Module

提供关键观点去重和按 ID 的文章去重，均保留首次出现的条目。
Provides key-point and article-id deduplication, keeping the first
occurrence.
"""

import logging
from collections.abc import Iterable

from knowledge_intel.models import Article

logger = logging.getLogger(__name__)

# 比较观点时使用的前缀长度
POINT_PREFIX_LENGTH = 50


def normalize_point(point: str) -> str:
    """
    标准化关键观点以便比较
    Normalize a key point for comparison

    Examples:
        >>> normalize_point('RWA Needs Redemption')
        'rwa needs redemption'
    """
    if not point:
        return ""
    return point.lower()[:POINT_PREFIX_LENGTH]


def deduplicate_points(points: Iterable[str]) -> list[str]:
    """
    去重关键观点，保留首次出现的顺序
    Deduplicate key points, keeping first-occurrence order

    两条观点的小写前 50 个字符相同即视为重复。
    Two points are duplicates when their lowercase 50-character prefixes match.

    Examples:
        >>> deduplicate_points(['RWA is key', 'rwa is KEY', 'DeFi'])
        ['RWA is key', 'DeFi']
    """
    seen: set[str] = set()
    unique: list[str] = []

    for point in points:
        normalized = normalize_point(point)
        if normalized in seen:
            continue
        seen.add(normalized)
        unique.append(point)

    return unique


def deduplicate_articles(articles: Iterable[Article]) -> list[Article]:
    """
    按 ID 去重文章，保留首次出现的条目
    Deduplicate articles by id, keeping the first occurrence

    Args:
        articles: 文章列表

    Returns:
        去重后的文章列表
    """
    items = list(articles)
    seen_ids: set[str] = set()
    unique: list[Article] = []

    for article in items:
        if article.id in seen_ids:
            continue
        seen_ids.add(article.id)
        unique.append(article)

    removed_count = len(items) - len(unique)
    if removed_count > 0:
        logger.warning(f"Deduplication: removed {removed_count} articles with duplicate ids")

    return unique
