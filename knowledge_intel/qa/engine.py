"""
知识问答引擎
Knowledge QA Engine

基于已收藏文章的规则式问答：识别问题类型，检索相关文章，
再按问题类型从摘要、关键观点和片段中组织答案。不调用任何生成模型。
Rule-based question answering over saved articles: classify the question,
retrieve with the relevance gate, then assemble an answer from summaries,
key points and snippets. No text generation model is involved.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from knowledge_intel.analysis.insights import InsightGenerator
from knowledge_intel.models import Article, coerce_articles, parse_timestamp
from knowledge_intel.search.semantic import SearchHit, SemanticSearch

logger = logging.getLogger(__name__)

QUESTION_DEFINITION = 'definition'
QUESTION_COMPARISON = 'comparison'
QUESTION_LISTING = 'listing'
QUESTION_REASON = 'reason'
QUESTION_SUMMARY = 'summary'
QUESTION_TREND = 'trend'
QUESTION_OPINION = 'opinion'
QUESTION_GENERAL = 'general'

STATUS_ANSWERED = 'answered'
STATUS_NO_RELEVANT_INFO = 'no_relevant_info'


def _compile(*patterns: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


# 按顺序匹配，第一个命中的类型胜出；同时收录繁体与简体写法
QUESTION_PATTERNS: tuple[tuple[str, tuple[re.Pattern, ...]], ...] = (
    (QUESTION_DEFINITION, _compile(
        r'什麼是', r'什么是', r'何謂', r'何谓', r'怎麼理解', r'怎么理解',
        r'what is', r'define', r'explain',
    )),
    (QUESTION_COMPARISON, _compile(
        r'和.*比', r'區別', r'区别', r'差異', r'差异', r'不同',
        r'vs', r'compare', r'difference',
    )),
    (QUESTION_LISTING, _compile(
        r'有哪些', r'列出', r'包括', r'what are', r'list',
    )),
    (QUESTION_REASON, _compile(
        r'為什麼', r'为什么', r'原因', r'why', r'reason',
    )),
    (QUESTION_SUMMARY, _compile(
        r'總結', r'总结', r'摘要', r'概括', r'summarize', r'summary',
    )),
    (QUESTION_TREND, _compile(
        r'趨勢', r'趋势', r'發展', r'发展', r'未來', r'未来', r'trend', r'future',
    )),
    (QUESTION_OPINION, _compile(
        r'觀點', r'观点', r'看法', r'認為', r'认为', r'opinion', r'think', r'view',
    )),
)

# 提取主题时移除的疑问词
INTERROGATIVE_PATTERN = re.compile(
    r'什麼是|什么是|何謂|何谓|怎麼|怎么|為什麼|为什么|有哪些|如何'
    r'|根據我的文章|根据我的文章|根據我收藏的|根据我收藏的'
)
ENGLISH_INTERROGATIVE_PATTERN = re.compile(
    r'\b(?:what|why|how|which|when|where|who|is|are|the|my|your)\b',
    re.IGNORECASE,
)
PUNCTUATION_PATTERN = re.compile(r'[？?，,。.！!]')

# 原因类问题优先挑选的观点
REASON_HINT_PATTERN = re.compile(r'因為|因为|所以|原因|導致|导致|由於|由于|because|due to|reason', re.IGNORECASE)


class QAEngine:
    """
    知识问答引擎
    Knowledge QA Engine

    不在调用之间保存任何会话状态，只持有文章快照以及搜索与洞见实例。

    Examples:
        >>> engine = QAEngine()
        >>> engine.analyze_question('什麼是 RWA？')
        'definition'
    """

    def __init__(
        self,
        search: SemanticSearch | None = None,
        insights: InsightGenerator | None = None
    ):
        self.search = search or SemanticSearch()
        self.insights = insights or InsightGenerator()
        self.articles: tuple[Article, ...] = ()

    def load_articles(self, articles: Iterable[Article | Mapping[str, Any]]) -> None:
        """
        载入文章数据
        Load the article snapshot

        空集合时清空搜索索引，之后的问题都会得到 no_relevant_info。
        """
        self.articles = coerce_articles(articles)
        if self.articles:
            self.search.index_articles(self.articles)
        else:
            self.search.clear()
        self.insights.set_articles(self.articles)

    def analyze_question(self, question: str) -> str:
        """
        分析问题类型
        Classify the question intent

        Examples:
            >>> QAEngine().analyze_question('有哪些穩定幣？')
            'listing'
            >>> QAEngine().analyze_question('為什麼代幣化重要？')
            'reason'
        """
        text = question.lower()
        for question_type, patterns in QUESTION_PATTERNS:
            if any(pattern.search(text) for pattern in patterns):
                return question_type
        return QUESTION_GENERAL

    def extract_topics(self, question: str) -> str:
        """
        提取问题中的主题（仅用于答案模板展示，检索仍使用完整问题）
        Extract the residual topic used in answer templates
        """
        cleaned = INTERROGATIVE_PATTERN.sub('', question)
        cleaned = ENGLISH_INTERROGATIVE_PATTERN.sub('', cleaned)
        cleaned = PUNCTUATION_PATTERN.sub('', cleaned)
        return ' '.join(cleaned.split())

    def answer(self, question: str) -> dict[str, Any]:
        """
        回答问题
        Answer a question

        Returns:
            包含 status、question、question_type、answer、sources
            以及各类型专属字段的字典
        """
        question_type = self.analyze_question(question)
        topic = self.extract_topics(question)
        context = self.search.search_with_context(question)

        if not context.has_relevant_info:
            logger.info(f"No relevant info for question: {question[:50]}")
            return {
                "status": STATUS_NO_RELEVANT_INFO,
                "question": question,
                "question_type": question_type,
                "answer": f"在您的知识库中没有找到与「{topic}」相关的信息。",
                "suggestions": self.get_suggestions(topic),
            }

        builders = {
            QUESTION_DEFINITION: self.generate_definition_answer,
            QUESTION_LISTING: self.generate_listing_answer,
            QUESTION_SUMMARY: self.generate_summary_answer,
            QUESTION_TREND: self.generate_trend_answer,
            QUESTION_REASON: self.generate_reason_answer,
        }
        builder = builders.get(question_type, self.generate_general_answer)
        body = builder(topic, context.results)

        logger.debug(f"Answered '{question[:50]}' as {question_type} from {len(context.results)} hits")

        return {
            "status": STATUS_ANSWERED,
            "question": question,
            "question_type": question_type,
            **body,
            "sources": [
                {
                    "id": hit.id,
                    "title": hit.title,
                    "relevance": int(hit.score * 100 + 0.5),
                    "url": hit.url,
                }
                for hit in context.results
            ],
        }

    def generate_definition_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """定义类：优先使用第一篇摘要"""
        summaries = [hit.summary for hit in results if hit.summary]
        key_points = [point for hit in results for point in hit.key_points]

        return {
            "answer": (summaries[0] if summaries else None)
            or (key_points[0] if key_points else None)
            or f"根据您的文章，「{topic}」的相关信息如下：",
            "supporting_points": key_points[:3],
        }

    def generate_listing_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """列举类：去重后的关键观点"""
        points = [point for hit in results for point in hit.key_points]
        return {
            "answer": f"根据您收藏的文章，关于「{topic}」的要点包括：",
            "items": list(dict.fromkeys(points))[:8],
        }

    def generate_summary_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """总结类"""
        return {
            "answer": f"关于「{topic}」的总结：",
            "summaries": [hit.summary for hit in results if hit.summary][:3],
            "key_takeaways": [point for hit in results for point in hit.key_points][:5],
        }

    def generate_trend_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """趋势类：按收藏时间排列的时间轴"""
        ordered = sorted(results, key=lambda hit: parse_timestamp(hit.saved_at))
        timeline = [
            {
                "title": hit.title,
                "date": hit.saved_at,
                "key_point": hit.key_points[0] if hit.key_points else None,
            }
            for hit in ordered
        ]

        if len(ordered) >= 2:
            observation = "观点随时间有所演变，请参考以下时间轴："
        else:
            observation = "目前资料量不足以分析完整趋势。"

        return {
            "answer": f"「{topic}」的发展趋势：",
            "timeline": timeline[:5],
            "observation": observation,
        }

    def generate_reason_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """原因类：优先包含因果词的观点"""
        points = [point for hit in results for point in hit.key_points]
        reason_points = [p for p in points if REASON_HINT_PATTERN.search(p)]
        return {
            "answer": f"关于「{topic}」的原因分析：",
            "reasons": (reason_points or points)[:4],
        }

    def generate_general_answer(self, topic: str, results: Sequence[SearchHit]) -> dict[str, Any]:
        """一般问题"""
        summaries = [hit.summary for hit in results if hit.summary]
        key_points = [point for hit in results for point in hit.key_points]
        snippets = [snippet for hit in results for snippet in hit.snippets]

        return {
            "answer": summaries[0] if summaries else f"根据您的知识库，以下是关于「{topic}」的信息：",
            "key_points": list(dict.fromkeys(key_points))[:5],
            "relevant_excerpts": snippets[:3],
        }

    def get_suggestions(self, topic: str) -> str:
        """
        根据知识库已有标签给出建议
        Suggest known tags resembling the topic

        双向比较前 3 个字符：标签包含主题前缀，或主题包含标签前缀。
        """
        known_tags = dict.fromkeys(tag for article in self.articles for tag in article.tags)
        prefix = topic.lower()[:3]

        suggestions = [
            tag for tag in known_tags
            if prefix in tag.lower() or tag.lower()[:3] in topic.lower()
        ]

        if suggestions:
            return f"您可能想问的是：{'、'.join(suggestions[:3])}？"
        return "您可以尝试搜索其他主题，或收藏更多相关文章。"

    def interactive_qa(self, question: str, context: Mapping[str, Any] | None = None) -> dict[str, Any]:
        """
        互动式问答（支持追问）
        Interactive QA with follow-up context

        context 中有 previous_topic 时会加在问题前面再检索。
        """
        enhanced = question
        previous_topic = (context or {}).get('previous_topic')
        if previous_topic:
            enhanced = f"{previous_topic} {question}"

        result = self.answer(enhanced)
        result["suggested_followups"] = self.suggest_followups(question, result)
        return result

    def suggest_followups(self, question: str, result: Mapping[str, Any]) -> list[str]:
        """建议后续问题（最多 3 个）"""
        if result.get("status") != STATUS_ANSWERED:
            return []

        followups = []
        if len(result.get("sources", [])) > 1:
            followups.append("这些观点之间有什么关联？")

        topic = self.extract_topics(question)
        followups.append(f"{topic}的未来趋势是什么？")
        followups.append("还有哪些相关主题？")
        return followups[:3]
