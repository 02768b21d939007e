"""
文章来源
Article Providers

定义知识库文章的载入接口，以及内存和 JSON 文件两种实现。
Defines the article-loading interface together with in-memory and JSON
file implementations.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from knowledge_intel.models import Article, coerce_articles
from knowledge_intel.utils.deduplication import deduplicate_articles

logger = logging.getLogger(__name__)


class ArticleLoadError(Exception):
    """
    文章载入错误
    Article Load Error

    文章库文件存在但内容无法解析时抛出。
    Raised when the article store exists but cannot be parsed.

    Attributes:
        message: 错误描述信息
        path: 文章库路径（可选）
    """

    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"Failed to load articles from '{self.path}': {self.message}"
        return f"Failed to load articles: {self.message}"


class ArticleProvider(ABC):
    """
    文章来源基类
    Article Provider Base Class

    每次调用 load_articles 都返回当前完整的文章集合（一次批量载入）。
    Every load_articles call returns the full current article set in one
    batch.
    """

    @abstractmethod
    def load_articles(self) -> tuple[Article, ...]:
        """载入全部文章"""


class StaticArticleProvider(ArticleProvider):
    """
    内存文章来源
    In-memory article provider

    Examples:
        >>> provider = StaticArticleProvider([{'id': 'a', 'title': 'RWA'}])
        >>> provider.load_articles()[0].id
        'a'
    """

    def __init__(self, articles: Iterable[Article | Mapping[str, Any]] = ()):
        self.articles = coerce_articles(articles)

    def load_articles(self) -> tuple[Article, ...]:
        return tuple(deduplicate_articles(self.articles))


class JsonFileArticleProvider(ArticleProvider):
    """
    JSON 文件文章来源
    JSON file article provider

    文件格式为 {"articles": [...]} 或直接是文章数组。
    文件不存在时记录错误并返回空集合；内容无效时抛出 ArticleLoadError。
    Accepts {"articles": [...]} or a bare list. A missing file logs an error
    and yields no articles; invalid content raises ArticleLoadError.
    """

    def __init__(self, path: str | Path = "data/knowledge-base.json"):
        self.path = Path(path)

    def load_articles(self) -> tuple[Article, ...]:
        """
        载入文章

        Raises:
            ArticleLoadError: JSON 无效或结构不正确
        """
        if not self.path.exists():
            logger.error(f"Knowledge base not found: {self.path}")
            return ()

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ArticleLoadError(str(e), str(self.path)) from e

        if isinstance(data, dict):
            records = data.get('articles') or []
        elif isinstance(data, list):
            records = data
        else:
            raise ArticleLoadError("expected an object or a list", str(self.path))

        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ArticleLoadError("'articles' must be a list of objects", str(self.path))

        articles = tuple(deduplicate_articles(coerce_articles(records)))
        logger.info(f"Loaded {len(articles)} articles from {self.path}")
        return articles
