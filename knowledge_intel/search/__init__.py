# Search module - 语义搜索模块

from .semantic import (
    DEFAULT_CATEGORY,
    RELEVANCE_THRESHOLD,
    SearchContext,
    SearchHit,
    SemanticSearch,
)

__all__ = [
    "DEFAULT_CATEGORY",
    "RELEVANCE_THRESHOLD",
    "SearchContext",
    "SearchHit",
    "SemanticSearch",
]
