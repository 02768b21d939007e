# Utils module - 工具模块
# 包含文本处理、关键观点去重等工具函数

from .text import (
    CHINESE_STOPWORDS,
    ENGLISH_STOPWORDS,
    Keyword,
    PreprocessedText,
    cosine_similarity,
    extract_key_sentences,
    extract_keywords,
    extract_ngrams,
    is_chinese,
    jaccard_similarity,
    preprocess,
    remove_stopwords,
    split_sentences,
    term_frequency,
    tokenize,
)
from .deduplication import (
    deduplicate_articles,
    deduplicate_points,
    normalize_point,
)

__all__ = [
    "CHINESE_STOPWORDS",
    "ENGLISH_STOPWORDS",
    "Keyword",
    "PreprocessedText",
    "cosine_similarity",
    "extract_key_sentences",
    "extract_keywords",
    "extract_ngrams",
    "is_chinese",
    "jaccard_similarity",
    "preprocess",
    "remove_stopwords",
    "split_sentences",
    "term_frequency",
    "tokenize",
    "deduplicate_articles",
    "deduplicate_points",
    "normalize_point",
]
