"""
知识智能系统
Knowledge Intelligence

从文章来源载入一次不可变快照，并在其上建立搜索、趋势、关联、洞见与问答组件。
Loads one immutable snapshot from an article provider and builds the
search, trend, connection, insight and QA components over it.
"""

import logging
from collections import Counter
from typing import Any

from knowledge_intel.analysis.insights import InsightGenerator
from knowledge_intel.embeddings.store import VectorStore
from knowledge_intel.models import Article
from knowledge_intel.provider import ArticleProvider
from knowledge_intel.qa.engine import QAEngine
from knowledge_intel.search.semantic import DEFAULT_CATEGORY, SemanticSearch

logger = logging.getLogger(__name__)


class KnowledgeIntelligence:
    """
    知识智能系统
    Knowledge Intelligence orchestrator

    每个实例各自拥有组件，没有进程级单例；需要最新数据时调用 reload()。
    Each instance owns its components; there is no process-wide singleton.
    Call reload() to pick up changes in the article store.

    Attributes:
        provider: 文章来源
        articles: 当前快照
        search: 语义搜索
        trends: 趋势分析
        connections: 关联发现
        insights: 洞见生成
        qa: 问答引擎

    Examples:
        >>> ki = KnowledgeIntelligence(StaticArticleProvider(articles))
        >>> ki.search.search('RWA')[0].id
        'a'
    """

    def __init__(self, provider: ArticleProvider, load: bool = True):
        self.provider = provider
        self.articles: tuple[Article, ...] = ()
        self.search = SemanticSearch()
        self.insights = InsightGenerator()
        # 趋势与关联组件由洞见生成器持有，整个系统只有一份快照
        self.trends = self.insights.trend_analyzer
        self.connections = self.insights.connection_discovery
        self.qa = QAEngine(search=self.search, insights=self.insights)

        if load:
            self.reload()

    @property
    def is_empty(self) -> bool:
        return not self.articles

    def reload(self) -> None:
        """
        重新载入文章并重建所有索引
        Reload the article store and rebuild every index

        空知识库不做索引，各组件返回空结果。
        """
        self.articles = tuple(self.provider.load_articles())

        # QAEngine 同时负责搜索索引与洞见快照（含趋势与关联）
        self.qa.load_articles(self.articles)

        if self.is_empty:
            logger.warning("Knowledge base is empty, skipping indexing")
        else:
            logger.info(f"Knowledge intelligence ready: {len(self.articles)} articles")

    def get_stats(self) -> dict[str, Any]:
        """
        知识库统计
        Knowledge base statistics
        """
        vectorizer_stats = self.search.vectorizer.get_stats()

        categories = Counter(a.category or DEFAULT_CATEGORY for a in self.articles)
        tag_counts = Counter(tag for a in self.articles for tag in a.tags)
        top_tags = sorted(tag_counts.items(), key=lambda item: item[1], reverse=True)[:10]

        return {
            "total_articles": len(self.articles),
            "vocabulary_size": vectorizer_stats["vocabulary_size"],
            "average_doc_length": vectorizer_stats["average_doc_length"],
            "categories": dict(categories),
            "top_tags": top_tags,
        }

    def save_vectors(self, store: VectorStore) -> int:
        """
        用当前训练的文档向量整体替换向量存储的内容
        Replace the vector store contents with the current fit

        Returns:
            写入的向量数量
        """
        vectors = self.search.vectorizer.vectors
        if not vectors:
            logger.info("No fitted vectors to save")
            return 0

        store.replace_documents(vectors)
        return len(vectors)
