"""
文本报告渲染测试
"""

from datetime import datetime

from knowledge_intel.analysis.connections import Connection
from knowledge_intel.analysis.trends import EmergingTopic, HotTopic
from knowledge_intel.models import Article
from knowledge_intel.reports import (
    render_answer,
    render_connection_report,
    render_full_report,
    render_search_results,
    render_stats,
    render_trend_report,
)
from knowledge_intel.search.semantic import SearchHit


class TestRenderSearchResults:

    def test_no_hits(self):
        assert '没有找到相关文章。' in render_search_results('RWA', [])

    def test_hits(self):
        hit = SearchHit(id='a', score=0.665, title='RWA tokenization', tags=['RWA'], snippets=['RWA grows'])
        text = render_search_results('RWA', [hit])
        assert '找到 1 篇相关文章：' in text
        assert '相关度：66%' in text or '相关度：67%' in text
        assert '分类：未分类' in text
        assert '   > RWA grows...' in text


class TestRenderAnswer:

    def test_no_relevant(self):
        text = render_answer({
            "status": "no_relevant_info",
            "question": "量子？",
            "answer": "没有找到",
            "suggestions": "您可以尝试搜索其他主题，或收藏更多相关文章。",
        })
        assert '💭 没有找到' in text
        assert '收藏更多相关文章' in text

    def test_answered(self):
        text = render_answer({
            "status": "answered",
            "question": "什麼是 RWA？",
            "question_type": "definition",
            "answer": "RWA needs redemption",
            "supporting_points": ["RWA needs redemption"],
            "sources": [{"id": "a", "title": "RWA tokenization", "relevance": 67, "url": None}],
            "suggested_followups": ["还有哪些相关主题？"],
        })
        assert '💡 答案（问题类型：definition）' in text
        assert '📌 支持观点：' in text
        assert '   - RWA tokenization (相关度 67%)' in text
        assert '   → 还有哪些相关主题？' in text

    def test_timeline(self):
        text = render_answer({
            "status": "answered",
            "question": "RWA trend",
            "answer": "「RWA」的发展趋势：",
            "timeline": [{"title": "RWA earlier", "date": "2026-01-01T00:00:00Z", "key_point": "early"}],
            "observation": "目前资料量不足以分析完整趋势。",
        })
        assert '   2026-01-01 RWA earlier：early' in text


class TestRenderReports:

    def test_trend_report(self):
        text = render_trend_report(
            4,
            [HotTopic(tag='RWA', count=3, percentage=75)],
            [EmergingTopic(tag='AI', recent_count=2, older_count=0, growth=4.0)],
            [Article(id='a', title='RWA tokenization', saved_at='2026-01-30T10:00:00Z')],
        )
        assert '- **RWA**：3 篇 (75%)' in text
        assert '- **AI**：2 篇 (新出现)' in text
        assert '- **2026-01-30** - RWA tokenization' in text

    def test_trend_report_empty(self):
        text = render_trend_report(0, [], [], [])
        assert '_尚无足够资料_' in text
        assert '_尚无明显新兴主题_' in text

    def test_connection_report(self):
        article = Article(id='a', title='RWA tokenization')
        conn = Connection(target_id='b', target_title='Stablecoin future', score=0.3,
                          types=['same category'], shared_tags=['RWA'])
        text = render_connection_report(article, [conn])
        assert '- **Stablecoin future** [same category]' in text
        assert '  共同标签：RWA' in text

    def test_connection_report_missing_article(self):
        assert render_connection_report(None, []) == '找不到该文章'

    def test_full_report_header(self):
        text = render_full_report(
            3,
            {"status": "no_activity"},
            {"narrative_insights": [{"type": "core_theme", "text": "核心主题"}]},
            generated_at=datetime(2026, 2, 1, 9, 30),
        )
        assert '📅 生成时间：2026-02-01 09:30' in text
        assert '- 核心主题' in text

    def test_stats(self):
        text = render_stats({
            "total_articles": 3,
            "vocabulary_size": 20,
            "average_doc_length": 7.4,
            "categories": {"finance": 2},
            "top_tags": [("RWA", 2)],
        })
        assert '平均文章长度：7 tokens' in text
        assert '   finance: 2 篇' in text
        assert '   #RWA: 2 篇' in text
