"""
关联发现属性测试

Property-based tests for relation scoring and clustering.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from knowledge_intel.analysis.connections import ConnectionDiscovery


WORDS = ['rwa', 'defi', 'stablecoin', 'token', 'ai', 'agents', '代幣', '穩定幣', 'market', 'yield']
TAGS = ['RWA', 'DeFi', 'AI', 'Stablecoin', 'Regulation']
CATEGORIES = [None, 'finance', 'tech']

sentences = st.lists(st.sampled_from(WORDS), min_size=0, max_size=6).map(' '.join)

article_bodies = st.fixed_dictionaries({
    "title": sentences,
    "summary": sentences,
    "tags": st.lists(st.sampled_from(TAGS), max_size=4),
    "keyPoints": st.lists(sentences, max_size=3),
    "category": st.sampled_from(CATEGORIES),
    "savedAt": st.sampled_from([None, '2026-01-01T00:00:00Z', '2026-01-05T00:00:00Z', '2026-03-01T00:00:00Z']),
})


def with_ids(bodies):
    return [dict(body, id=f"art-{i}") for i, body in enumerate(bodies)]


class TestRelationProperties:
    """关联分数的对称性与取值范围"""

    @given(article_bodies, article_bodies)
    @settings(max_examples=100)
    def test_total_score_is_symmetric(self, body_a, body_b):
        discovery = ConnectionDiscovery()
        a, b = dict(body_a, id='a'), dict(body_b, id='b')
        forward = discovery.calculate_relation(a, b)
        backward = discovery.calculate_relation(b, a)
        assert forward.total_score == backward.total_score
        assert sorted(forward.shared_tags) == sorted(backward.shared_tags)

    @given(article_bodies, article_bodies)
    @settings(max_examples=100)
    def test_scores_within_unit_interval(self, body_a, body_b):
        relation = ConnectionDiscovery().calculate_relation(dict(body_a, id='a'), dict(body_b, id='b'))
        for value in (
            relation.tag_overlap,
            relation.topic_similarity,
            relation.key_point_similarity,
            relation.total_score,
        ):
            assert 0.0 <= value <= 1.0


class TestClusterProperties:
    """知识群组的结构性质"""

    @given(st.lists(article_bodies, min_size=0, max_size=6))
    @settings(max_examples=50)
    def test_clusters_are_disjoint_and_non_trivial(self, bodies):
        articles = with_ids(bodies)
        clusters = ConnectionDiscovery(articles).find_clusters()

        seen = set()
        for cluster in clusters:
            assert len(cluster) >= 2
            ids = {member['id'] for member in cluster}
            assert not ids & seen
            seen |= ids

    @given(st.lists(article_bodies, min_size=0, max_size=6))
    @settings(max_examples=50)
    def test_graph_edges_respect_min_score(self, bodies):
        discovery = ConnectionDiscovery(with_ids(bodies))
        graph = discovery.build_connection_graph(min_score=0.2)
        for source_id, edges in graph.items():
            for edge in edges:
                assert edge.score >= 0.2
                assert edge.target_id != source_id
