"""
语义搜索单元测试

测试索引、排序、相关度门槛、片段提取、相似文章与分类分组。
"""

import pytest

from knowledge_intel.embeddings.vectorizer import EmptyCorpusError, ScoredDocument, TFIDFVectorizer
from knowledge_intel.search.semantic import (
    DEFAULT_CATEGORY,
    RELEVANCE_THRESHOLD,
    SemanticSearch,
    searchable_text,
)
from knowledge_intel.models import Article


SCENARIO_ARTICLES = [
    {"id": "a", "tags": ["RWA"], "title": "RWA tokenization", "keyPoints": ["RWA needs redemption"]},
    {"id": "b", "tags": ["RWA", "DeFi"], "title": "Stablecoin future", "keyPoints": ["Stablecoin needs settlement"]},
    {"id": "c", "tags": ["AI"], "title": "AI in finance", "keyPoints": ["AI automates trading"]},
]


class FixedScoreVectorizer(TFIDFVectorizer):
    """返回固定得分的向量化器，用于测试门槛边界"""

    def __init__(self, score: float):
        super().__init__()
        self.score = score

    def search(self, query, top_k=5):
        return [ScoredDocument(id='a', score=self.score)]


@pytest.fixture
def search():
    engine = SemanticSearch()
    engine.index_articles(SCENARIO_ARTICLES)
    return engine


class TestIndexing:
    """测试索引"""

    def test_empty_batch_raises(self):
        with pytest.raises(EmptyCorpusError):
            SemanticSearch().index_articles([])

    def test_search_before_indexing_returns_empty(self):
        assert SemanticSearch().search('RWA') == []

    def test_reindex_replaces_corpus(self, search):
        search.index_articles([SCENARIO_ARTICLES[2]])
        assert search.get_article('a') is None
        assert search.get_stats()['total_articles'] == 1
        assert search.vectorizer.get_stats()['num_documents'] == 1

    def test_clear(self, search):
        search.clear()
        assert search.search('RWA') == []
        assert search.articles == {}

    def test_searchable_text_includes_all_fields(self):
        article = Article(
            id='x', title='T', content='C', summary='S', key_points=('K',), tags=('G',)
        )
        assert searchable_text(article).split() == ['T', 'C', 'S', 'K', 'G']


class TestSearch:
    """测试搜索排序"""

    def test_rwa_ranks_exact_match_first(self, search):
        """RWA 查询：a 排第一，c 没有共同词被过滤"""
        hits = search.search('RWA')
        ids = [hit.id for hit in hits]
        assert ids[0] == 'a'
        assert 'c' not in ids

    def test_hits_enriched_with_article_fields(self, search):
        hit = search.search('RWA')[0]
        assert hit.title == 'RWA tokenization'
        assert hit.tags == ['RWA']
        assert hit.key_points == ['RWA needs redemption']
        assert hit.metadata['title'] == 'RWA tokenization'

    def test_min_score_is_inclusive_filter(self, search):
        hits = search.search('RWA', min_score=0.0)
        assert all(hit.score > 0 for hit in hits)
        assert search.search('RWA', min_score=0.99) == []

    def test_unknown_vocabulary_returns_empty(self, search):
        assert search.search('quantum gravity') == []

    def test_top_k(self, search):
        assert len(search.search('RWA', top_k=1)) == 1


class TestRelevanceGate:
    """测试相关度门槛（严格大于 0.15）"""

    def test_relevant_context(self, search):
        context = search.search_with_context('RWA')
        assert context.has_relevant_info is True
        assert context.results[0].id == 'a'

    def test_exactly_threshold_is_not_relevant(self):
        engine = SemanticSearch(vectorizer=FixedScoreVectorizer(RELEVANCE_THRESHOLD))
        engine.index_articles(SCENARIO_ARTICLES)
        assert engine.search_with_context('RWA').has_relevant_info is False

    def test_just_above_threshold_is_relevant(self):
        engine = SemanticSearch(vectorizer=FixedScoreVectorizer(RELEVANCE_THRESHOLD + 1e-9))
        engine.index_articles(SCENARIO_ARTICLES)
        assert engine.search_with_context('RWA').has_relevant_info is True

    def test_no_results_is_not_relevant(self, search):
        context = search.search_with_context('quantum')
        assert context.results == []
        assert context.has_relevant_info is False

    def test_context_to_dict(self, search):
        data = search.search_with_context('RWA').to_dict()
        assert data['question'] == 'RWA'
        assert data['results'][0]['id'] == 'a'


class TestSnippets:
    """测试片段提取"""

    def test_snippets_from_matching_sentences(self):
        engine = SemanticSearch()
        engine.index_articles([{
            "id": "s",
            "title": "RWA report",
            "content": "RWA tokenization is growing fast this year. Weather is nice today and sunny.",
        }])
        hit = engine.search('RWA')[0]
        assert hit.snippets == ['RWA tokenization is growing fast this year']

    def test_snippets_disabled(self):
        engine = SemanticSearch()
        engine.index_articles([{"id": "s", "title": "RWA", "content": "RWA tokenization is growing fast."}])
        assert engine.search('RWA', include_snippets=False)[0].snippets == []

    def test_stopword_only_query_has_no_snippets(self, search):
        assert search.extract_relevant_snippets('the and of', 'Some long content sentence here.') == []

    def test_max_snippets(self, search):
        content = '. '.join(f'RWA sentence number {i} is long' for i in range(5))
        assert len(search.extract_relevant_snippets('RWA', content)) == 3


class TestSimilarAndClusters:
    """测试相似文章与分类分组"""

    def test_find_similar_excludes_source(self, search):
        assert all(hit.id != 'a' for hit in search.find_similar('a'))

    def test_find_similar_unknown_id(self, search):
        assert search.find_similar('missing') == []

    def test_cluster_by_topic_default_bucket(self, search):
        clusters = search.cluster_by_topic()
        assert list(clusters) == [DEFAULT_CATEGORY]
        assert len(clusters[DEFAULT_CATEGORY]) == 3

    def test_cluster_by_category(self):
        engine = SemanticSearch()
        engine.index_articles([
            {"id": "1", "title": "RWA", "category": "finance"},
            {"id": "2", "title": "AI", "category": "tech"},
            {"id": "3", "title": "DeFi", "category": "finance"},
        ])
        clusters = engine.cluster_by_topic()
        assert [a['id'] for a in clusters['finance']] == ['1', '3']
        assert [a['id'] for a in clusters['tech']] == ['2']

    def test_export_import_index(self, search):
        restored = SemanticSearch()
        restored.import_index(search.export_index())
        assert restored.get_article('a').title == 'RWA tokenization'
        assert restored.search('RWA')[0].id == 'a'
