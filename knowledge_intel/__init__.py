"""
知识智能
Knowledge Intelligence

个人知识库的语义搜索、趋势分析、关联发现、洞见生成与问答。
Semantic search, trend analysis, connection discovery, insights and
question answering over a personal knowledge base.
"""

__version__ = "1.0.0"
