"""
关联发现模块
Connection Discovery Module

计算文章两两之间的关联度，建立关联图谱并找出知识群组。
Scores pairwise relatedness between articles, builds the connection graph
and finds knowledge clusters.

关联分数 = 标签重叠 * 0.4 + 主题相似度 * 0.4 + 观点相似度 * 0.2（固定权重）。
Relation score = tag overlap * 0.4 + topic similarity * 0.4 + key-point
similarity * 0.2 (fixed weights).
"""

import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from typing import Any

from knowledge_intel.models import Article, coerce_article, coerce_articles
from knowledge_intel.utils.text import (
    cosine_similarity,
    jaccard_similarity,
    preprocess,
    term_frequency,
)

logger = logging.getLogger(__name__)

TAG_WEIGHT = 0.4
TOPIC_WEIGHT = 0.4
KEY_POINT_WEIGHT = 0.2

# 关系类型标签
RELATION_COMMON_THEME = "common theme"
RELATION_SIMILAR_TITLE = "similar title"
RELATION_RELATED_VIEWPOINT = "related viewpoint"
RELATION_SAME_CATEGORY = "same category"
RELATION_RECENTLY_RELATED = "recently related"

TITLE_SIMILARITY_THRESHOLD = 0.3
KEY_POINT_SIMILARITY_THRESHOLD = 0.2
RECENT_DAYS = 7
RECENT_MIN_SCORE = 0.2

DEFAULT_GRAPH_MIN_SCORE = 0.15
# 聚类时建图阈值与遍历阈值不同
CLUSTER_GRAPH_MIN_SCORE = 0.25
CLUSTER_EDGE_MIN_SCORE = 0.3
NEW_ARTICLE_MIN_SCORE = 0.1


@dataclass
class Relation:
    """
    两篇文章的关联
    Relation between two articles

    Attributes:
        tag_overlap: 共同标签数 / max(|A|, |B|, 1)
        topic_similarity: 标题+摘要+观点词频的余弦相似度
        key_point_similarity: 关键观点 token 集合的 Jaccard 相似度
        total_score: 加权总分 [0, 1]
        types: 关系类型标签
        shared_tags: 共同标签（按 A 的顺序）
    """
    tag_overlap: float = 0.0
    topic_similarity: float = 0.0
    key_point_similarity: float = 0.0
    total_score: float = 0.0
    types: list[str] = field(default_factory=list)
    shared_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class Connection:
    """关联图谱中的一条边"""
    target_id: str
    target_title: str
    score: float
    types: list[str] = field(default_factory=list)
    shared_tags: list[str] = field(default_factory=list)


@dataclass
class Theme:
    """共同主题"""
    tag: str
    articles: list[dict[str, str]] = field(default_factory=list)
    count: int = 0


@dataclass
class CandidateConnection:
    """候选文章与现有文章的关联"""
    article: dict[str, Any]
    score: float
    types: list[str] = field(default_factory=list)
    shared_tags: list[str] = field(default_factory=list)


def _topic_text(article: Article) -> str:
    return ' '.join([article.title, article.summary, *article.key_points])


class ConnectionDiscovery:
    """
    关联发现
    Connection Discovery

    关联图谱为 O(n²) 两两计算，适用于个人规模的知识库。

    Attributes:
        articles: 文章快照
        connection_graph: {article_id: [Connection, ...]}，按分数降序

    Examples:
        >>> discovery = ConnectionDiscovery(articles)
        >>> relation = discovery.calculate_relation(articles[0], articles[1])
        >>> 0 <= relation.total_score <= 1
        True
    """

    def __init__(self, articles: Iterable[Article | Mapping[str, Any]] = ()):
        self.articles: tuple[Article, ...] = coerce_articles(articles)
        self.connection_graph: dict[str, list[Connection]] = {}

    def set_articles(self, articles: Iterable[Article | Mapping[str, Any]]) -> None:
        """设置文章数据并清空图谱"""
        self.articles = coerce_articles(articles)
        self.connection_graph = {}

    def calculate_relation(
        self,
        article_a: Article | Mapping[str, Any],
        article_b: Article | Mapping[str, Any]
    ) -> Relation:
        """
        计算两篇文章的关联度
        Calculate the relation between two articles

        tag_overlap、topic_similarity、key_point_similarity 都是对称的，
        所以 total_score 与参数顺序无关。
        """
        a = coerce_article(article_a)
        b = coerce_article(article_b)
        relation = Relation()

        # 1. 标签重叠
        tags_a = list(dict.fromkeys(a.tags))
        tags_b = set(b.tags)
        shared_tags = [tag for tag in tags_a if tag in tags_b]
        relation.tag_overlap = len(shared_tags) / max(len(tags_a), len(tags_b), 1)
        relation.shared_tags = shared_tags
        if len(shared_tags) >= 2:
            relation.types.append(RELATION_COMMON_THEME)

        # 2. 标题相似度
        title_similarity = jaccard_similarity(preprocess(a.title).tokens, preprocess(b.title).tokens)
        if title_similarity > TITLE_SIMILARITY_THRESHOLD:
            relation.types.append(RELATION_SIMILAR_TITLE)

        # 3. 主题相似度
        relation.topic_similarity = cosine_similarity(
            term_frequency(preprocess(_topic_text(a)).tokens),
            term_frequency(preprocess(_topic_text(b)).tokens),
        )

        # 4. 关键观点相似度
        if a.key_points and b.key_points:
            relation.key_point_similarity = jaccard_similarity(
                preprocess(' '.join(a.key_points)).tokens,
                preprocess(' '.join(b.key_points)).tokens,
            )
            if relation.key_point_similarity > KEY_POINT_SIMILARITY_THRESHOLD:
                relation.types.append(RELATION_RELATED_VIEWPOINT)

        # 5. 总分
        total = (
            relation.tag_overlap * TAG_WEIGHT
            + relation.topic_similarity * TOPIC_WEIGHT
            + relation.key_point_similarity * KEY_POINT_WEIGHT
        )
        relation.total_score = min(total, 1.0)

        # 6. 同类与时间关系
        if a.category and a.category == b.category:
            relation.types.append(RELATION_SAME_CATEGORY)

        days_diff = abs((a.saved_time - b.saved_time).total_seconds()) / 86400
        if days_diff <= RECENT_DAYS and relation.total_score > RECENT_MIN_SCORE:
            relation.types.append(RELATION_RECENTLY_RELATED)

        return relation

    def build_connection_graph(self, min_score: float = DEFAULT_GRAPH_MIN_SCORE) -> dict[str, list[Connection]]:
        """
        建立文章关联图谱
        Build the connection graph

        保留 total_score >= min_score 的边，邻接表按分数降序。
        """
        graph: dict[str, list[Connection]] = {}

        for i, source in enumerate(self.articles):
            edges = []
            for j, target in enumerate(self.articles):
                if i == j:
                    continue
                relation = self.calculate_relation(source, target)
                if relation.total_score >= min_score:
                    edges.append(Connection(
                        target_id=target.id,
                        target_title=target.title,
                        score=relation.total_score,
                        types=relation.types,
                        shared_tags=relation.shared_tags,
                    ))
            edges.sort(key=lambda c: c.score, reverse=True)
            graph[source.id] = edges

        self.connection_graph = graph
        edge_count = sum(len(edges) for edges in graph.values())
        logger.info(
            f"Connection graph built: articles={len(self.articles)}, "
            f"edges={edge_count}, min_score={min_score}"
        )
        return graph

    def find_connections(self, article_id: str, top_k: int = 5) -> list[Connection]:
        """找出文章的关联（图谱缺失时自动建立）"""
        if article_id not in self.connection_graph:
            self.build_connection_graph()
        return self.connection_graph.get(article_id, [])[:top_k]

    def find_common_themes(self) -> list[Theme]:
        """找出至少两篇文章共有的标签"""
        themes: dict[str, Theme] = {}

        for article in self.articles:
            for tag in article.tags:
                theme = themes.setdefault(tag, Theme(tag=tag))
                theme.articles.append({"id": article.id, "title": article.title})
                theme.count += 1

        common = [theme for theme in themes.values() if theme.count >= 2]
        common.sort(key=lambda t: t.count, reverse=True)
        return common

    def find_clusters(self) -> list[list[dict[str, str]]]:
        """
        找出知识群组
        Find knowledge clusters

        以 0.25 建图，只沿分数 > 0.3 的边做广度优先遍历，保留大小 >= 2 的连通分量。
        Builds the graph at 0.25, then walks only edges scoring above 0.3.
        """
        self.build_connection_graph(CLUSTER_GRAPH_MIN_SCORE)
        by_id = {article.id: article for article in self.articles}

        visited: set[str] = set()
        clusters: list[list[dict[str, str]]] = []

        for article in self.articles:
            if article.id in visited:
                continue

            cluster = []
            queue = deque([article.id])
            while queue:
                current_id = queue.popleft()
                if current_id in visited:
                    continue
                visited.add(current_id)

                current = by_id.get(current_id)
                if current is not None:
                    cluster.append({"id": current.id, "title": current.title})

                for conn in self.connection_graph.get(current_id, []):
                    if conn.target_id not in visited and conn.score > CLUSTER_EDGE_MIN_SCORE:
                        queue.append(conn.target_id)

            if len(cluster) >= 2:
                clusters.append(cluster)

        clusters.sort(key=len, reverse=True)
        return clusters

    def find_connections_for_new_article(
        self,
        candidate: Article | Mapping[str, Any]
    ) -> list[CandidateConnection]:
        """
        预览新文章与现有知识的关联（不修改图谱）
        Preview how a candidate article relates to the existing corpus
        """
        new_article = coerce_article(candidate)
        connections = []

        for existing in self.articles:
            relation = self.calculate_relation(new_article, existing)
            if relation.total_score > NEW_ARTICLE_MIN_SCORE:
                connections.append(CandidateConnection(
                    article={
                        "id": existing.id,
                        "title": existing.title,
                        "category": existing.category,
                    },
                    score=relation.total_score,
                    types=relation.types,
                    shared_tags=relation.shared_tags,
                ))

        connections.sort(key=lambda c: c.score, reverse=True)
        return connections[:5]

    def get_article(self, article_id: str) -> Article | None:
        for article in self.articles:
            if article.id == article_id:
                return article
        return None
