"""
语义搜索引擎
Semantic Search Engine

在 TF-IDF 向量化器之上维护文章库，支持自然语言查询、相似文章、
片段提取和按分类分组。
Wraps the TF-IDF vectorizer with an article store: natural-language
search, find-similar, snippet extraction and category grouping.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from knowledge_intel.embeddings.vectorizer import EmptyCorpusError, TFIDFVectorizer
from knowledge_intel.models import Article, coerce_articles
from knowledge_intel.utils.text import preprocess, split_sentences

logger = logging.getLogger(__name__)

# 判断知识库是否有相关信息的阈值（严格大于）
RELEVANCE_THRESHOLD = 0.15

# 默认分类名
DEFAULT_CATEGORY = "uncategorized"

# 片段候选句的最小长度
SNIPPET_MIN_LENGTH = 15


@dataclass
class SearchHit:
    """
    搜索结果
    Search hit

    Attributes:
        id: 文章 ID
        score: 余弦相似度
        title: 标题
        category: 分类
        tags: 标签
        url: 原文链接
        saved_at: 收藏时间
        summary: 摘要
        key_points: 关键观点
        snippets: 与查询相关的原文片段
        metadata: 向量化器中的元数据
    """
    id: str
    score: float
    title: str = "Unknown"
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    url: str | None = None
    saved_at: str | None = None
    summary: str = ""
    key_points: list[str] = field(default_factory=list)
    snippets: list[str] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return asdict(self)


@dataclass
class SearchContext:
    """
    带上下文的搜索结果
    Search results with the relevance gate

    Attributes:
        question: 原始问题
        results: 搜索结果
        has_relevant_info: 最高分是否严格大于 RELEVANCE_THRESHOLD
    """
    question: str
    results: list[SearchHit] = field(default_factory=list)
    has_relevant_info: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "question": self.question,
            "results": [hit.to_dict() for hit in self.results],
            "has_relevant_info": self.has_relevant_info,
        }


def searchable_text(article: Article) -> str:
    """组合文章的所有可搜索文字"""
    return ' '.join([
        article.title,
        article.content,
        article.summary,
        *article.key_points,
        *article.tags,
    ])


class SemanticSearch:
    """
    语义搜索引擎
    Semantic Search

    批量索引：每次 index_articles 都会重建向量化器并整体 fit 一次。
    Batch indexing: every index_articles call rebuilds the vectorizer and
    fits once over the whole batch.

    Examples:
        >>> search = SemanticSearch()
        >>> search.index_articles([{'id': 'a', 'title': 'RWA tokenization'}])
        >>> [hit.id for hit in search.search('RWA')]
        ['a']
    """

    def __init__(self, vectorizer: TFIDFVectorizer | None = None):
        self.vectorizer = vectorizer or TFIDFVectorizer()
        self.articles: dict[str, Article] = {}

    def _add_article(self, article: Article) -> None:
        self.articles[article.id] = article
        self.vectorizer.add_document(article.id, searchable_text(article), {
            "title": article.title,
            "category": article.category,
            "tags": list(article.tags),
            "saved_at": article.saved_at,
        })

    def index_articles(self, articles: Iterable[Article | Mapping[str, Any]]) -> None:
        """
        批量索引文章
        Index a batch of articles

        Raises:
            EmptyCorpusError: 文章列表为空
        """
        snapshot = coerce_articles(articles)
        self.vectorizer.reset()
        self.articles = {}

        for article in snapshot:
            self._add_article(article)

        self.vectorizer.fit()
        logger.info(f"Indexed {len(self.articles)} articles for semantic search")

    def clear(self) -> None:
        """清空索引"""
        self.vectorizer.reset()
        self.articles = {}

    def get_article(self, article_id: str) -> Article | None:
        return self.articles.get(article_id)

    def search(
        self,
        query: str,
        top_k: int = 5,
        min_score: float = 0.1,
        include_snippets: bool = True
    ) -> list[SearchHit]:
        """
        搜索文章
        Search articles

        Args:
            query: 查询文本
            top_k: 返回数量
            min_score: 最低得分（含）
            include_snippets: 是否提取相关片段

        Returns:
            按得分降序的搜索结果；尚未索引任何文章时返回空列表
        """
        if not self.vectorizer.documents:
            return []

        hits = []
        for result in self.vectorizer.search(query, top_k):
            if result.score < min_score:
                continue

            article = self.articles.get(result.id)
            if article is None:
                hits.append(SearchHit(id=result.id, score=result.score, metadata=result.metadata))
                continue

            hit = SearchHit(
                id=result.id,
                score=result.score,
                title=article.title or "Unknown",
                category=article.category,
                tags=list(article.tags),
                url=article.url,
                saved_at=article.saved_at,
                summary=article.summary,
                key_points=list(article.key_points),
                metadata=result.metadata,
            )
            if include_snippets and article.content:
                hit.snippets = self.extract_relevant_snippets(query, article.content)
            hits.append(hit)

        return hits

    def extract_relevant_snippets(self, query: str, content: str, max_snippets: int = 3) -> list[str]:
        """
        提取与查询相关的片段
        Extract content sentences relevant to the query

        按句中 token 与查询 token 的原始重叠数打分，独立于向量排序。
        Scored by raw token overlap with the query, independent of the
        vector ranking.
        """
        query_tokens = set(preprocess(query).tokens)
        if not query_tokens:
            return []

        scored = []
        for sentence in split_sentences(content, SNIPPET_MIN_LENGTH):
            sentence_tokens = preprocess(sentence).tokens
            overlap = sum(1 for token in sentence_tokens if token in query_tokens)
            score = overlap / len(query_tokens)
            if score > 0:
                scored.append((sentence, score))

        scored.sort(key=lambda item: item[1], reverse=True)
        return [sentence for sentence, _ in scored[:max_snippets]]

    def search_with_context(self, question: str, top_k: int = 3) -> SearchContext:
        """
        搜索并判断知识库是否有相关信息
        Search and apply the relevance gate

        has_relevant_info 当且仅当最高分严格大于 0.15。
        """
        results = self.search(question, top_k=top_k, include_snippets=True)
        has_relevant_info = bool(results) and results[0].score > RELEVANCE_THRESHOLD

        logger.debug(
            f"Context search '{question[:30]}': results={len(results)}, "
            f"relevant={has_relevant_info}"
        )
        return SearchContext(question=question, results=results, has_relevant_info=has_relevant_info)

    def find_similar(self, article_id: str, top_k: int = 5) -> list[SearchHit]:
        """
        找出相似文章（排除自身）
        Find similar articles, excluding the source article
        """
        article = self.articles.get(article_id)
        if article is None:
            return []

        query = ' '.join([article.title, article.summary, *article.key_points])
        results = self.search(query, top_k=top_k + 1)
        return [hit for hit in results if hit.id != article_id][:top_k]

    def cluster_by_topic(self) -> dict[str, list[dict[str, Any]]]:
        """按分类分组文章（简单划分，非相似度聚类）"""
        clusters: dict[str, list[dict[str, Any]]] = {}

        for article_id, article in self.articles.items():
            category = article.category or DEFAULT_CATEGORY
            clusters.setdefault(category, []).append({
                "id": article_id,
                "title": article.title,
                "tags": list(article.tags),
                "saved_at": article.saved_at,
            })

        return clusters

    def get_stats(self) -> dict[str, Any]:
        return {
            "total_articles": len(self.articles),
            "vectorizer_stats": self.vectorizer.get_stats(),
            "categories": self.cluster_by_topic(),
        }

    def export_index(self) -> dict[str, Any]:
        """导出索引"""
        return {
            "vectorizer": self.vectorizer.export_state(),
            "articles": {article_id: a.to_dict() for article_id, a in self.articles.items()},
        }

    def import_index(self, data: dict[str, Any]) -> None:
        """导入索引"""
        if "vectorizer" in data:
            self.vectorizer.import_state(data["vectorizer"])
        if "articles" in data:
            self.articles = {
                article.id: article
                for article in coerce_articles(data["articles"].values())
            }


__all__ = [
    "DEFAULT_CATEGORY",
    "EmptyCorpusError",
    "RELEVANCE_THRESHOLD",
    "SearchContext",
    "SearchHit",
    "SemanticSearch",
    "searchable_text",
]
