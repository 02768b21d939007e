"""
洞见生成模块
Insight Generator Module

组合文本处理、趋势分析与关联发现的结果，生成结构化洞见。
本模块不引入新的算法，只负责编排。
Composes text processing, trend analysis and connection discovery outputs
into structured insight summaries. No new algorithms live here.
"""

import logging
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from knowledge_intel.analysis.connections import ConnectionDiscovery, Theme
from knowledge_intel.analysis.trends import EmergingTopic, HotTopic, TrendAnalyzer
from knowledge_intel.models import Article, coerce_articles
from knowledge_intel.reports import render_full_report
from knowledge_intel.utils.deduplication import deduplicate_points
from knowledge_intel.utils.text import extract_keywords

logger = logging.getLogger(__name__)

WEEKLY_WINDOW_DAYS = 7

STATUS_NO_DATA = 'no_data'
STATUS_INSUFFICIENT_DATA = 'insufficient_data'
STATUS_NO_ACTIVITY = 'no_activity'
STATUS_ACTIVE = 'active'
STATUS_NO_RELEVANT_INFO = 'no_relevant_info'
STATUS_FOUND = 'found'


class InsightGenerator:
    """
    洞见生成器
    Insight Generator

    持有自己的 TrendAnalyzer 与 ConnectionDiscovery，三者共享同一个不可变快照。

    Examples:
        >>> generator = InsightGenerator(articles)
        >>> generator.generate_weekly_insights()['status']
        'active'
    """

    def __init__(self, articles: Iterable[Article | Mapping[str, Any]] = ()):
        self.articles: tuple[Article, ...] = ()
        self.trend_analyzer = TrendAnalyzer()
        self.connection_discovery = ConnectionDiscovery()
        self.set_articles(articles)

    def set_articles(self, articles: Iterable[Article | Mapping[str, Any]]) -> None:
        """设置文章数据"""
        self.articles = coerce_articles(articles)
        self.trend_analyzer.set_articles(self.articles)
        self.connection_discovery.set_articles(self.articles)

    def deduplicate_points(self, points: Iterable[str]) -> list[str]:
        """去重关键观点（小写前 50 字相同视为重复）"""
        return deduplicate_points(points)

    def generate_topic_insights(self, tag: str) -> dict[str, Any]:
        """
        生成主题洞见
        Generate insights for one topic

        匹配规则：标签完全包含 tag，或标题包含 tag（不区分大小写）。

        Returns:
            洞见字典；没有相关文章时 status 为 no_data
        """
        needle = tag.lower()
        related = [
            a for a in self.articles
            if tag in a.tags or needle in a.title.lower()
        ]

        if not related:
            return {
                "tag": tag,
                "status": STATUS_NO_DATA,
                "message": f"没有关于「{tag}」的文章",
            }

        all_points = [point for a in related for point in a.key_points]
        combined_text = ' '.join(
            ' '.join([a.title, a.summary, *a.key_points]) for a in related
        )
        keywords = extract_keywords(combined_text, 15)
        trend = self.trend_analyzer.analyze_trend(tag)
        by_date = sorted(related, key=lambda a: a.saved_time)

        return {
            "tag": tag,
            "article_count": len(related),
            "trend": trend.trend_description,
            "main_points": self.deduplicate_points(all_points)[:5],
            "core_keywords": [k.token for k in keywords[:8]],
            "timespan": {
                "first": by_date[0].saved_at,
                "last": by_date[-1].saved_at,
            },
            "related_topics": self.find_related_topics(tag),
        }

    def find_related_topics(self, tag: str) -> list[dict[str, Any]]:
        """找出与 tag 同时出现最多的其他标签（前 5 个）"""
        co_occurrence: Counter = Counter()
        for article in self.articles:
            if tag not in article.tags:
                continue
            co_occurrence.update(t for t in article.tags if t != tag)

        ranked = sorted(co_occurrence.items(), key=lambda item: item[1], reverse=True)[:5]
        return [{"tag": t, "co_occurrence": count} for t, count in ranked]

    def generate_cross_article_insights(self) -> dict[str, Any]:
        """
        生成跨文章洞见
        Generate cross-article insights

        至少需要 2 篇文章，否则 status 为 insufficient_data。
        """
        if len(self.articles) < 2:
            return {
                "status": STATUS_INSUFFICIENT_DATA,
                "message": "需要至少 2 篇文章才能生成跨文章洞见",
            }

        clusters = self.connection_discovery.find_clusters()
        common_themes = self.connection_discovery.find_common_themes()
        hot_topics = self.trend_analyzer.find_hot_topics()
        emerging_topics = self.trend_analyzer.find_emerging_topics()

        logger.info(
            f"Cross-article insights: articles={len(self.articles)}, "
            f"clusters={len(clusters)}, themes={len(common_themes)}"
        )

        return {
            "total_articles": len(self.articles),
            "knowledge_clusters": [
                {"size": len(cluster), "articles": [a["title"] for a in cluster]}
                for cluster in clusters
            ],
            "core_themes": [
                {
                    "theme": theme.tag,
                    "article_count": theme.count,
                    "articles": [a["title"] for a in theme.articles],
                }
                for theme in common_themes[:5]
            ],
            "trends": {
                "hot": hot_topics[:3],
                "emerging": emerging_topics[:3],
            },
            "narrative_insights": self.generate_narrative_insights(
                common_themes, hot_topics, emerging_topics
            ),
        }

    def generate_narrative_insights(
        self,
        common_themes: Sequence[Theme],
        hot_topics: Sequence[HotTopic],
        emerging_topics: Sequence[EmergingTopic]
    ) -> list[dict[str, str]]:
        """生成叙述性洞见"""
        insights = []

        if common_themes:
            top_theme = common_themes[0]
            insights.append({
                "type": "core_theme",
                "text": f"您最关注的主题是「{top_theme.tag}」，共有 {top_theme.count} 篇相关文章。",
            })

        if hot_topics:
            hot = hot_topics[0]
            insights.append({
                "type": "hot_topic",
                "text": f"近 30 天最常出现的主题是「{hot.tag}」，占近期文章的 {hot.percentage}%。",
            })

        if emerging_topics:
            emerging = emerging_topics[0]
            insights.append({
                "type": "emerging",
                "text": f"「{emerging.tag}」是近期新兴的关注主题，显示您对此领域的兴趣正在增加。",
            })

        categories = {a.category for a in self.articles if a.category}
        if len(categories) >= 3:
            insights.append({
                "type": "diversity",
                "text": f"您的知识库涵盖 {len(categories)} 个不同领域，显示广泛的阅读兴趣。",
            })

        return insights

    def answer_question(
        self,
        question: str,
        relevant_articles: Iterable[Article | Mapping[str, Any]]
    ) -> dict[str, Any]:
        """根据已检索到的相关文章组织答案"""
        articles = coerce_articles(relevant_articles)
        if not articles:
            return {
                "status": STATUS_NO_RELEVANT_INFO,
                "question": question,
                "answer": "在您的知识库中没有找到相关信息。",
            }

        all_points = [point for a in articles for point in a.key_points]
        return {
            "status": STATUS_FOUND,
            "question": question,
            "based_on": len(articles),
            "sources": [{"title": a.title, "url": a.url} for a in articles],
            "key_points": self.deduplicate_points(all_points)[:5],
            "summaries": [a.summary for a in articles if a.summary][:3],
        }

    def generate_weekly_insights(self) -> dict[str, Any]:
        """
        生成周度洞见
        Generate the weekly digest

        统计最近 7 天收藏的文章；没有时 status 为 no_activity。
        """
        week_ago = datetime.now(timezone.utc) - timedelta(days=WEEKLY_WINDOW_DAYS)
        weekly = [a for a in self.articles if a.saved_time > week_ago]

        if not weekly:
            return {
                "status": STATUS_NO_ACTIVITY,
                "message": "本周没有新收藏的文章",
            }

        tag_counts = Counter(tag for a in weekly for tag in a.tags)
        top_tags = sorted(tag_counts.items(), key=lambda item: item[1], reverse=True)[:5]
        weekly_points = [point for a in weekly for point in a.key_points]

        return {
            "status": STATUS_ACTIVE,
            "article_count": len(weekly),
            "top_topics": [{"tag": tag, "count": count} for tag, count in top_tags],
            "key_takeaways": self.deduplicate_points(weekly_points)[:5],
            "articles": [
                {"title": a.title, "category": a.category, "date": a.saved_at}
                for a in weekly
            ],
        }

    def generate_full_report(self) -> str:
        """生成完整知识智能报告（文本）"""
        return render_full_report(
            total_articles=len(self.articles),
            weekly=self.generate_weekly_insights(),
            cross=self.generate_cross_article_insights(),
        )
