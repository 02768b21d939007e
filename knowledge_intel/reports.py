"""
文本报告渲染
Text Report Rendering

把各分析组件的结构化输出渲染为命令行可读的文本。
Renders the structured outputs of the analysis components as plain text for
the command line. Nothing here computes new results.
"""

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from knowledge_intel.models import Article, parse_timestamp

SEPARATOR = '=' * 50


def _format_date(value: str | None) -> str:
    if not value:
        return '未知'
    return parse_timestamp(value).strftime('%Y-%m-%d')


def render_search_results(query: str, hits: Sequence[Any]) -> str:
    """渲染搜索结果"""
    lines = [f"🔍 搜索：{query}", ""]

    if not hits:
        lines.append("没有找到相关文章。")
        return '\n'.join(lines)

    lines.append(f"找到 {len(hits)} 篇相关文章：")
    lines.append("")

    for hit in hits:
        lines.append(f"📰 {hit.title}")
        lines.append(f"   相关度：{hit.score * 100:.0f}%")
        lines.append(f"   分类：{hit.category or '未分类'}")
        if hit.tags:
            lines.append(f"   标签：{', '.join(hit.tags)}")
        if hit.snippets:
            lines.append("   相关片段：")
            for snippet in hit.snippets[:2]:
                lines.append(f"   > {snippet[:100]}...")
        lines.append("")

    return '\n'.join(lines)


def render_answer(result: Mapping[str, Any]) -> str:
    """渲染问答结果"""
    lines = [f"❓ 问题：{result.get('question', '')}", ""]

    if result.get('status') == 'no_relevant_info':
        lines.append(f"💭 {result.get('answer', '')}")
        lines.append("")
        lines.append(result.get('suggestions', ''))
        return '\n'.join(lines)

    lines.append(f"💡 答案（问题类型：{result.get('question_type', 'general')}）")
    lines.append("")
    lines.append(result.get('answer', ''))

    sections = [
        ('supporting_points', '📌 支持观点：'),
        ('key_points', '📌 关键观点：'),
        ('items', '📋 列表：'),
        ('key_takeaways', '📌 关键收获：'),
        ('reasons', '🔍 原因分析：'),
        ('relevant_excerpts', '📝 相关片段：'),
    ]
    for key, heading in sections:
        values = result.get(key) or []
        if values:
            lines.append("")
            lines.append(heading)
            for value in values:
                lines.append(f"   • {value}")

    timeline = result.get('timeline') or []
    if timeline:
        lines.append("")
        lines.append(result.get('observation', ''))
        for entry in timeline:
            point = f"：{entry['key_point']}" if entry.get('key_point') else ''
            lines.append(f"   {_format_date(entry.get('date'))} {entry.get('title', '')}{point}")

    sources = result.get('sources') or []
    if sources:
        lines.append("")
        lines.append("📚 参考来源：")
        for source in sources:
            lines.append(f"   - {source['title']} (相关度 {source['relevance']}%)")

    followups = result.get('suggested_followups') or []
    if followups:
        lines.append("")
        lines.append("💬 您可能还想问：")
        for question in followups:
            lines.append(f"   → {question}")

    return '\n'.join(lines)


def render_topic_analysis(trend: Any, insights: Mapping[str, Any]) -> str:
    """渲染单一主题的趋势与洞见"""
    lines = [
        f"📊 主题分析：{trend.tag}",
        "",
        f"文章数量：{trend.article_count}",
        f"趋势：{trend.trend_description}",
        f"首次提及：{trend.first_mention or '未知'}",
        f"最后提及：{trend.last_mention or '未知'}",
    ]

    main_points = insights.get('main_points') or []
    if main_points:
        lines.append("")
        lines.append("📌 主要观点：")
        lines.extend(f"   • {point}" for point in main_points)

    related = insights.get('related_topics') or []
    if related:
        lines.append("")
        lines.append("🔗 相关主题：")
        lines.extend(f"   • {t['tag']} ({t['co_occurrence']} 篇共同文章)" for t in related)

    return '\n'.join(lines)


def render_trend_report(
    total_articles: int,
    hot_topics: Sequence[Any],
    emerging_topics: Sequence[Any],
    recent_articles: Sequence[Article]
) -> str:
    """渲染知识库趋势报告"""
    lines = ["# 📊 知识库趋势报告", "", f"📚 总文章数：{total_articles}", ""]

    lines.append("## 🔥 近期热门主题（30天内）")
    if hot_topics:
        for topic in hot_topics:
            lines.append(f"- **{topic.tag}**：{topic.count} 篇 ({topic.percentage}%)")
    else:
        lines.append("_尚无足够资料_")

    lines.append("")
    lines.append("## 📈 新兴主题")
    if emerging_topics:
        for topic in emerging_topics:
            growth = '新出现' if topic.older_count == 0 else f"成长 {topic.growth:.1f}x"
            lines.append(f"- **{topic.tag}**：{topic.recent_count} 篇 ({growth})")
    else:
        lines.append("_尚无明显新兴主题_")

    lines.append("")
    lines.append("## 📅 最近收藏")
    for article in recent_articles[:5]:
        lines.append(f"- **{_format_date(article.saved_at)}** - {article.title}")

    return '\n'.join(lines)


def render_connection_report(article: Article | None, connections: Sequence[Any]) -> str:
    """渲染单篇文章的关联报告"""
    if article is None:
        return "找不到该文章"

    lines = ["# 🔗 文章关联报告", "", f"## 📰 {article.title}", ""]

    if not connections:
        lines.append("_目前没有找到相关文章_")
        return '\n'.join(lines)

    lines.append("### 相关文章")
    lines.append("")
    for conn in connections:
        types = f"[{', '.join(conn.types)}]" if conn.types else ''
        lines.append(f"- **{conn.target_title}** {types}".rstrip())
        lines.append(f"  相关度：{conn.score * 100:.0f}%")
        if conn.shared_tags:
            lines.append(f"  共同标签：{', '.join(conn.shared_tags)}")
        lines.append("")

    return '\n'.join(lines)


def render_full_report(
    total_articles: int,
    weekly: Mapping[str, Any],
    cross: Mapping[str, Any],
    generated_at: datetime | None = None
) -> str:
    """渲染完整知识智能报告"""
    generated_at = generated_at or datetime.now()
    lines = [
        "# 🧠 知识智能报告",
        "",
        f"📅 生成时间：{generated_at.strftime('%Y-%m-%d %H:%M')}",
        f"📚 知识库规模：{total_articles} 篇文章",
        "",
        "## 📆 本周摘要",
        "",
    ]

    if weekly.get('status') == 'active':
        lines.append(f"本周收藏 **{weekly['article_count']}** 篇文章")
        lines.append("")
        lines.append(f"**热门主题：** {'、'.join(t['tag'] for t in weekly['top_topics'])}")
        lines.append("")
        if weekly['key_takeaways']:
            lines.append("**关键收获：**")
            lines.extend(f"- {point}" for point in weekly['key_takeaways'])
            lines.append("")
    else:
        lines.append("_本周尚未收藏新文章_")
        lines.append("")

    lines.append("## 💡 知识洞见")
    lines.append("")
    for insight in cross.get('narrative_insights', []):
        lines.append(f"- {insight['text']}")
    lines.append("")

    core_themes = cross.get('core_themes') or []
    if core_themes:
        lines.append("## 🎯 核心主题")
        lines.append("")
        for theme in core_themes:
            lines.append(f"### {theme['theme']}")
            lines.append(f"{theme['article_count']} 篇文章")
            lines.append("")

    return '\n'.join(lines)


def render_stats(stats: Mapping[str, Any]) -> str:
    """渲染知识库统计"""
    lines = [
        "📊 知识库统计",
        "",
        f"总文章数：{stats['total_articles']}",
        f"词汇量：{stats['vocabulary_size']}",
        f"平均文章长度：{stats['average_doc_length']:.0f} tokens",
        "",
        "分类统计：",
    ]
    for category, count in stats['categories'].items():
        lines.append(f"   {category}: {count} 篇")

    lines.append("")
    lines.append("热门标签：")
    for tag, count in stats['top_tags']:
        lines.append(f"   #{tag}: {count} 篇")

    return '\n'.join(lines)
