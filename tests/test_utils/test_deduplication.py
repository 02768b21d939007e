"""
去重工具单元测试
"""

import logging

from knowledge_intel.models import Article
from knowledge_intel.utils.deduplication import (
    POINT_PREFIX_LENGTH,
    deduplicate_articles,
    deduplicate_points,
    normalize_point,
)


class TestNormalizePoint:
    """测试观点标准化"""

    def test_lowercases(self):
        assert normalize_point('RWA Needs Redemption') == 'rwa needs redemption'

    def test_truncates_to_prefix(self):
        point = 'x' * 80
        assert len(normalize_point(point)) == POINT_PREFIX_LENGTH

    def test_empty(self):
        assert normalize_point('') == ''


class TestDeduplicatePoints:
    """测试关键观点去重"""

    def test_case_insensitive_duplicates_dropped(self):
        assert deduplicate_points(['RWA is key', 'rwa is KEY', 'DeFi']) == ['RWA is key', 'DeFi']

    def test_same_prefix_counts_as_duplicate(self):
        """前 50 字相同即视为重复，保留第一条"""
        prefix = 'a' * 50
        points = [prefix + ' first ending', prefix + ' second ending']
        assert deduplicate_points(points) == [prefix + ' first ending']

    def test_keeps_first_occurrence_order(self):
        points = ['c', 'a', 'b', 'a', 'c']
        assert deduplicate_points(points) == ['c', 'a', 'b']

    def test_empty(self):
        assert deduplicate_points([]) == []


class TestDeduplicateArticles:
    """测试文章按 ID 去重"""

    def test_later_duplicate_ids_dropped(self):
        articles = [
            Article(id='a', title='first'),
            Article(id='b', title='other'),
            Article(id='a', title='second'),
        ]
        result = deduplicate_articles(articles)
        assert [a.id for a in result] == ['a', 'b']
        assert result[0].title == 'first'

    def test_logs_warning_when_removed(self, caplog):
        with caplog.at_level(logging.WARNING):
            deduplicate_articles([Article(id='a'), Article(id='a')])
        assert 'removed 1' in caplog.text

    def test_no_duplicates_unchanged(self):
        articles = [Article(id='a'), Article(id='b')]
        assert deduplicate_articles(articles) == articles
