"""
知识智能系统单元测试

测试快照载入、重新载入、空知识库处理、统计与向量持久化。
"""

import pytest

from knowledge_intel.embeddings.store import VectorStore
from knowledge_intel.intelligence import KnowledgeIntelligence
from knowledge_intel.provider import ArticleProvider, StaticArticleProvider


ARTICLES = [
    {"id": "a", "tags": ["RWA"], "title": "RWA tokenization", "category": "finance",
     "keyPoints": ["RWA needs redemption"]},
    {"id": "b", "tags": ["RWA", "DeFi"], "title": "Stablecoin future", "category": "finance",
     "keyPoints": ["Stablecoin needs settlement"]},
    {"id": "c", "tags": ["AI"], "title": "AI in finance", "keyPoints": ["AI automates trading"]},
]


class MutableProvider(ArticleProvider):
    """可以在两次载入之间替换文章的来源"""

    def __init__(self, articles):
        self.articles = list(articles)

    def load_articles(self):
        return StaticArticleProvider(self.articles).load_articles()


@pytest.fixture
def ki():
    return KnowledgeIntelligence(StaticArticleProvider(ARTICLES))


class TestLoading:
    """测试载入"""

    def test_components_share_snapshot(self, ki):
        assert ki.trends.articles == ki.articles
        assert ki.connections.articles == ki.articles
        assert ki.insights.articles == ki.articles
        assert ki.qa.search is ki.search

    def test_single_trend_and_connection_instance(self, ki):
        assert ki.trends is ki.insights.trend_analyzer
        assert ki.connections is ki.insights.connection_discovery

    def test_search_ready(self, ki):
        assert ki.search.search('RWA')[0].id == 'a'
        assert ki.qa.answer('什麼是 RWA？')['status'] == 'answered'

    def test_deferred_load(self):
        ki = KnowledgeIntelligence(StaticArticleProvider(ARTICLES), load=False)
        assert ki.is_empty
        ki.reload()
        assert len(ki.articles) == 3

    def test_reload_picks_up_changes(self):
        provider = MutableProvider(ARTICLES[:1])
        ki = KnowledgeIntelligence(provider)
        assert ki.search.search('AI') == []

        provider.articles = ARTICLES
        ki.reload()

        assert ki.search.search('AI')[0].id == 'c'
        assert ki.connections.get_article('c') is not None

    def test_empty_knowledge_base(self, caplog):
        ki = KnowledgeIntelligence(StaticArticleProvider([]))
        assert ki.is_empty
        assert ki.search.search('RWA') == []
        assert ki.qa.answer('什麼是 RWA？')['status'] == 'no_relevant_info'
        assert ki.trends.find_hot_topics() == []
        assert 'empty' in caplog.text

    def test_reload_to_empty_clears_index(self):
        provider = MutableProvider(ARTICLES)
        ki = KnowledgeIntelligence(provider)
        provider.articles = []
        ki.reload()
        assert ki.search.search('RWA') == []


class TestStats:
    """测试统计"""

    def test_stats(self, ki):
        stats = ki.get_stats()
        assert stats['total_articles'] == 3
        assert stats['vocabulary_size'] > 0
        assert stats['categories'] == {'finance': 2, 'uncategorized': 1}
        assert stats['top_tags'][0] == ('RWA', 2)

    def test_empty_stats(self):
        stats = KnowledgeIntelligence(StaticArticleProvider([])).get_stats()
        assert stats['total_articles'] == 0
        assert stats['vocabulary_size'] == 0
        assert stats['top_tags'] == []


class TestSaveVectors:
    """测试向量持久化"""

    def test_save_vectors(self, ki, tmp_path):
        store = VectorStore(tmp_path / 'index.json')
        assert ki.save_vectors(store) == 3
        reopened = VectorStore(tmp_path / 'index.json')
        assert reopened.has_document('a')
        assert reopened.get_document('a')['metadata']['title'] == 'RWA tokenization'

    def test_save_after_reload_keeps_only_current_articles(self, tmp_path):
        provider = MutableProvider(ARTICLES[:2])
        ki = KnowledgeIntelligence(provider)
        path = tmp_path / 'index.json'
        ki.save_vectors(VectorStore(path))

        provider.articles = ARTICLES[2:]
        ki.reload()
        ki.save_vectors(VectorStore(path))

        assert [doc['id'] for doc in VectorStore(path).get_all_documents()] == ['c']

    def test_save_vectors_empty(self, tmp_path):
        ki = KnowledgeIntelligence(StaticArticleProvider([]))
        assert ki.save_vectors(VectorStore(tmp_path / 'index.json')) == 0
        assert not (tmp_path / 'index.json').exists()
