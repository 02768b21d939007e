# Analysis module - 知识分析模块
# 包含趋势分析、关联发现和洞见生成

from .trends import (
    EmergingTopic,
    HotTopic,
    TimelineEntry,
    TrendAnalyzer,
    TrendReport,
    classify_trend,
)
from .connections import (
    CandidateConnection,
    Connection,
    ConnectionDiscovery,
    Relation,
    Theme,
)
from .insights import InsightGenerator

__all__ = [
    "EmergingTopic",
    "HotTopic",
    "TimelineEntry",
    "TrendAnalyzer",
    "TrendReport",
    "classify_trend",
    "CandidateConnection",
    "Connection",
    "ConnectionDiscovery",
    "Relation",
    "Theme",
    "InsightGenerator",
]
