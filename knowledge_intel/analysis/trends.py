"""
趋势分析器
Trend Analyzer

追踪主题随时间的发展：时间轴、趋势分类、热门话题和新兴话题。
Tracks how topics develop over time: timelines, trend classification, hot
topics and emerging topics.

趋势阈值为固定常量，不可配置：
The trend thresholds are fixed constants, not configuration:
- 近期窗口 30 天，较早窗口 30-60 天
- recent > older * 1.5 -> rising
- recent < older * 0.5 且 older > 0 -> declining
"""

import logging
import math
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from knowledge_intel.models import Article, coerce_articles

logger = logging.getLogger(__name__)

RECENT_WINDOW_DAYS = 30
OLDER_WINDOW_DAYS = 60
RISING_RATIO = 1.5
DECLINING_RATIO = 0.5

TREND_RISING = 'rising'
TREND_STABLE = 'stable'
TREND_DECLINING = 'declining'
TREND_NEW = 'new'
TREND_NO_DATA = 'no_data'

TREND_DESCRIPTIONS = {
    TREND_RISING: '关注度上升',
    TREND_STABLE: '稳定关注中',
    TREND_DECLINING: '关注度下降',
    TREND_NEW: '新兴主题',
    TREND_NO_DATA: '没有数据',
}


@dataclass
class TimelineEntry:
    """时间轴条目"""
    id: str
    title: str
    date: str | None
    category: str | None = None
    key_points: list[str] = field(default_factory=list)


@dataclass
class TrendReport:
    """
    主题趋势
    Topic trend record

    每次查询时从当前文章集合重新计算，不做持久化。
    Recomputed from the live article set on every query; never persisted.

    Attributes:
        tag: 主题
        article_count: 相关文章数
        trend: rising / stable / declining / new / no_data
        trend_description: 趋势描述
        recent_count: 最近 30 天文章数
        older_count: 30-60 天前文章数
        first_mention: 首次提及时间
        last_mention: 最后提及时间
        timeline: 最近 10 篇
        key_points_evolution: 最近 5 次的关键观点
        message: 无数据时的提示
    """
    tag: str
    article_count: int = 0
    trend: str = TREND_NO_DATA
    trend_description: str = TREND_DESCRIPTIONS[TREND_NO_DATA]
    recent_count: int = 0
    older_count: int = 0
    first_mention: str | None = None
    last_mention: str | None = None
    timeline: list[TimelineEntry] = field(default_factory=list)
    key_points_evolution: list[dict[str, Any]] = field(default_factory=list)
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class HotTopic:
    """热门话题"""
    tag: str
    count: int
    percentage: int


@dataclass
class EmergingTopic:
    """新兴话题"""
    tag: str
    recent_count: int
    older_count: int
    growth: float


def classify_trend(recent_count: int, older_count: int, article_count: int) -> str:
    """
    根据两个滚动窗口的文章数判断趋势
    Classify a trend from the two rolling-window counts

    Examples:
        >>> classify_trend(3, 1, 4)
        'rising'
        >>> classify_trend(1, 3, 4)
        'declining'
        >>> classify_trend(1, 0, 1)
        'new'
    """
    if article_count == 0:
        return TREND_NO_DATA
    if article_count == 1:
        return TREND_NEW
    if recent_count > older_count * RISING_RATIO:
        return TREND_RISING
    if recent_count < older_count * DECLINING_RATIO and older_count > 0:
        return TREND_DECLINING
    return TREND_STABLE


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class TrendAnalyzer:
    """
    趋势分析器
    Trend Analyzer

    Examples:
        >>> analyzer = TrendAnalyzer(articles)
        >>> analyzer.analyze_trend('RWA').trend
        'rising'
    """

    def __init__(self, articles: Iterable[Article | Mapping[str, Any]] = ()):
        self.articles: tuple[Article, ...] = coerce_articles(articles)

    def set_articles(self, articles: Iterable[Article | Mapping[str, Any]]) -> None:
        """设置文章数据（保存不可变快照）"""
        self.articles = coerce_articles(articles)

    def sort_by_date(self, ascending: bool = True) -> list[Article]:
        """依收藏时间排序文章"""
        return sorted(self.articles, key=lambda a: a.saved_time, reverse=not ascending)

    def _windows(self) -> tuple[datetime, datetime]:
        now = datetime.now(timezone.utc)
        return now - timedelta(days=RECENT_WINDOW_DAYS), now - timedelta(days=OLDER_WINDOW_DAYS)

    def _matches(self, article: Article, tag: str) -> bool:
        needle = tag.lower()
        return (
            tag in article.tags
            or needle in article.title.lower()
            or needle in article.content.lower()
        )

    def build_timeline(self, tag: str | None = None) -> list[TimelineEntry]:
        """
        建立时间轴
        Build a timeline

        指定 tag 时只保留标签完全匹配，或标题/正文包含 tag（不区分大小写）的文章。
        With a tag, keeps articles whose tags contain it exactly, or whose
        title/content contain it case-insensitively.
        """
        return [
            TimelineEntry(
                id=a.id,
                title=a.title,
                date=a.saved_at,
                category=a.category,
                key_points=list(a.key_points[:2]),
            )
            for a in self._related_articles(tag)
        ]

    def _related_articles(self, tag: str | None) -> list[Article]:
        articles: Iterable[Article] = self.articles
        if tag:
            articles = [a for a in articles if self._matches(a, tag)]
        return sorted(articles, key=lambda a: a.saved_time)

    def analyze_trend(self, tag: str) -> TrendReport:
        """
        分析主题趋势
        Analyze a topic trend
        """
        related = self._related_articles(tag)

        if not related:
            return TrendReport(tag=tag, message=f'没有找到与「{tag}」相关的文章')

        timeline = self.build_timeline(tag)
        recent_cutoff, older_cutoff = self._windows()
        recent_count = sum(1 for a in related if a.saved_time > recent_cutoff)
        older_count = sum(1 for a in related if older_cutoff < a.saved_time <= recent_cutoff)

        trend = classify_trend(recent_count, older_count, len(timeline))

        key_points_evolution = [
            {"date": entry.date, "points": entry.key_points}
            for entry in timeline
            if entry.key_points
        ]

        logger.debug(
            f"Trend '{tag}': articles={len(timeline)}, recent={recent_count}, "
            f"older={older_count}, trend={trend}"
        )

        return TrendReport(
            tag=tag,
            article_count=len(timeline),
            trend=trend,
            trend_description=TREND_DESCRIPTIONS[trend],
            recent_count=recent_count,
            older_count=older_count,
            first_mention=timeline[0].date,
            last_mention=timeline[-1].date,
            timeline=timeline[-10:],
            key_points_evolution=key_points_evolution[-5:],
        )

    def find_hot_topics(self, days: int = 30) -> list[HotTopic]:
        """
        找出热门话题
        Find hot topics

        统计最近 days 天内收藏文章的标签频率，返回前 10 个。
        """
        cutoff = datetime.now(timezone.utc) - timedelta(days=days)
        recent = [a for a in self.articles if a.saved_time > cutoff]
        if not recent:
            return []

        tag_freq = Counter(tag for article in recent for tag in article.tags)
        ranked = sorted(tag_freq.items(), key=lambda item: item[1], reverse=True)[:10]

        return [
            HotTopic(tag=tag, count=count, percentage=_round_half_up(count / len(recent) * 100))
            for tag, count in ranked
        ]

    def find_emerging_topics(self) -> list[EmergingTopic]:
        """
        找出新兴话题
        Find emerging topics

        比较 0-30 天与 30-60 天两个窗口的标签数；较早窗口为 0 时增长率记为 recent * 2。
        Compares tag counts between the two windows; growth is recent * 2 when
        the older window has none.
        """
        recent_cutoff, older_cutoff = self._windows()

        recent_tags: Counter = Counter()
        older_tags: Counter = Counter()
        for article in self.articles:
            saved = article.saved_time
            if saved > recent_cutoff:
                recent_tags.update(article.tags)
            elif saved > older_cutoff:
                older_tags.update(article.tags)

        emerging = []
        for tag, recent_count in recent_tags.items():
            older_count = older_tags.get(tag, 0)
            if recent_count <= older_count:
                continue
            growth = recent_count * 2 if older_count == 0 else recent_count / older_count
            emerging.append(EmergingTopic(
                tag=tag,
                recent_count=recent_count,
                older_count=older_count,
                growth=float(growth),
            ))

        emerging.sort(key=lambda t: t.growth, reverse=True)
        return emerging[:5]
