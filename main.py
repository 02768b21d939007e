#!/usr/bin/env python3
"""
知识智能系统 - 主程序入口
Knowledge Intelligence - Main Entry Point

支持的命令：
1. search <query>       语义搜索
2. ask <question>       知识问答
3. analyze [tag]        主题趋势或全面分析
4. connections [id]     文章关联（不带 id 时列出所有文章）
5. report               完整知识智能报告
6. stats                知识库统计

使用方法 Usage:
    python main.py search "RWA 代幣化"
    python main.py ask "穩定幣的主要風險是什麼？"
    python main.py analyze RWA
    python main.py --kb data/knowledge-base.json report
"""

import argparse
import logging
import sys
from pathlib import Path

from knowledge_intel.config import (
    apply_defaults,
    get_config_value,
    get_search_config,
    load_config_with_defaults,
)
from knowledge_intel.embeddings.store import VectorStore
from knowledge_intel.intelligence import KnowledgeIntelligence
from knowledge_intel.provider import ArticleLoadError, JsonFileArticleProvider
from knowledge_intel.reports import (
    SEPARATOR,
    render_answer,
    render_connection_report,
    render_search_results,
    render_stats,
    render_topic_analysis,
    render_trend_report,
)

# 配置日志格式
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

COMMANDS = ('search', 'ask', 'analyze', 'connections', 'report', 'stats')


def setup_logging(verbose: bool = False) -> None:
    """
    配置日志系统
    Setup logging system

    Args:
        verbose: 是否启用详细日志（DEBUG级别）
                 Whether to enable verbose logging (DEBUG level)
    """
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    解析命令行参数
    Parse command line arguments
    """
    parser = argparse.ArgumentParser(
        description='知识智能系统 - 个人知识库的搜索、分析与问答',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
示例 Examples:
  python main.py search "RWA 代幣化"
  python main.py ask "穩定幣的主要風險是什麼？"
  python main.py analyze RWA
  python main.py connections a1b2c3
  python main.py --verbose report
        """
    )

    parser.add_argument('command', choices=COMMANDS, help='要执行的命令 / Command to run')
    parser.add_argument('params', nargs='*', help='命令参数 / Command arguments')

    config_group = parser.add_argument_group('配置选项 Config Options')
    config_group.add_argument(
        '--config', '-c',
        type=str,
        default='config.yaml',
        help='配置文件路径 (默认: config.yaml) / Config file path (default: config.yaml)'
    )
    config_group.add_argument(
        '--env',
        type=str,
        default=None,
        help='.env文件路径 (默认: 自动查找) / .env file path (default: auto-discover)'
    )
    config_group.add_argument(
        '--kb',
        type=str,
        default=None,
        help='知识库 JSON 路径 (覆盖配置文件) / Knowledge base JSON path (overrides config)'
    )
    config_group.add_argument(
        '--save-vectors',
        action='store_true',
        help='把训练好的向量写入向量存储 / Persist fitted vectors to the vector store'
    )

    general_group = parser.add_argument_group('通用选项 General Options')
    general_group.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='启用详细日志输出 / Enable verbose logging'
    )

    return parser.parse_args(argv)


def load_settings(args: argparse.Namespace, logger: logging.Logger) -> dict:
    """载入配置；配置文件不存在时使用默认值"""
    config_path = Path(args.config)
    if config_path.exists():
        config = load_config_with_defaults(str(config_path), args.env)
        logger.info(f"已加载配置文件: {config_path}")
    else:
        logger.debug(f"配置文件不存在，使用默认配置: {config_path}")
        config = apply_defaults({})

    if args.kb:
        config['knowledge_base'] = {**config['knowledge_base'], 'path': args.kb}
    return config


def cmd_search(ki: KnowledgeIntelligence, query: str, config: dict) -> str:
    search_config = get_search_config(config)
    hits = ki.search.search(
        query,
        top_k=search_config.top_k,
        min_score=search_config.min_score,
        include_snippets=search_config.include_snippets,
    )
    return render_search_results(query, hits)


def cmd_ask(ki: KnowledgeIntelligence, question: str) -> str:
    return render_answer(ki.qa.interactive_qa(question))


def cmd_analyze(ki: KnowledgeIntelligence, tag: str | None, config: dict) -> str:
    if tag:
        trend = ki.trends.analyze_trend(tag)
        insights = ki.insights.generate_topic_insights(tag)
        return render_topic_analysis(trend, insights)

    days = get_config_value(config, 'trends.hot_topic_days', 30)
    lines = [
        "📊 知识库全面分析",
        "",
        render_trend_report(
            len(ki.articles),
            ki.trends.find_hot_topics(days),
            ki.trends.find_emerging_topics(),
            ki.trends.sort_by_date(ascending=False),
        ),
        "",
        SEPARATOR,
        "",
    ]

    cross = ki.insights.generate_cross_article_insights()
    narrative = cross.get('narrative_insights') or []
    if narrative:
        lines.append("💡 知识洞见：")
        lines.append("")
        lines.extend(f"   • {insight['text']}" for insight in narrative)
    return '\n'.join(lines)


def cmd_connections(ki: KnowledgeIntelligence, article_id: str | None, config: dict) -> str:
    if not article_id:
        lines = ["📚 知识库中的文章：", ""]
        lines.extend(f"   {a.id} - {a.title}" for a in ki.articles)
        lines.append("")
        lines.append("使用方式：python main.py connections <article_id>")
        return '\n'.join(lines)

    min_score = get_config_value(config, 'connections.min_score', 0.15)
    ki.connections.build_connection_graph(min_score)
    return render_connection_report(
        ki.connections.get_article(article_id),
        ki.connections.find_connections(article_id),
    )


def run_command(ki: KnowledgeIntelligence, args: argparse.Namespace, config: dict) -> int:
    """执行单个命令并输出结果"""
    param = ' '.join(args.params).strip()

    if args.command in ('search', 'ask') and not param:
        print(f"请提供{'搜索词' if args.command == 'search' else '问题'}。", file=sys.stderr)
        return 1

    if args.command == 'search':
        output = cmd_search(ki, param, config)
    elif args.command == 'ask':
        output = cmd_ask(ki, param)
    elif args.command == 'analyze':
        output = cmd_analyze(ki, param or None, config)
    elif args.command == 'connections':
        output = cmd_connections(ki, param or None, config)
    elif args.command == 'report':
        output = ki.insights.generate_full_report()
    else:
        output = render_stats(ki.get_stats())

    print(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    主函数
    Main function

    Returns:
        退出码：0表示成功，非0表示失败
        Exit code: 0 for success, non-zero for failure
    """
    args = parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_settings(args, logger)
    except Exception as e:
        logger.error(f"加载配置文件失败: {e}")
        print(f"错误: 加载配置文件失败: {e}", file=sys.stderr)
        return 1

    kb_path = get_config_value(config, 'knowledge_base.path')
    try:
        ki = KnowledgeIntelligence(JsonFileArticleProvider(kb_path))
    except ArticleLoadError as e:
        logger.error(str(e))
        print(f"错误: {e}", file=sys.stderr)
        return 1

    if ki.is_empty:
        print("⚠️  知识库为空，请先收藏一些文章。")
        print(f"知识库路径: {kb_path}")
        return 0

    if args.save_vectors:
        store = VectorStore(get_config_value(config, 'vector_store.path'))
        saved = ki.save_vectors(store)
        logger.info(f"已保存 {saved} 个文档向量")

    return run_command(ki, args, config)


if __name__ == '__main__':
    sys.exit(main())
