# Embeddings module - 向量化模块
# 包含 TF-IDF 向量化器和向量持久化存储

from .vectorizer import (
    Document,
    DocumentVector,
    EmptyCorpusError,
    ScoredDocument,
    TFIDFVectorizer,
)
from .store import VectorStore, VectorStoreError

__all__ = [
    "Document",
    "DocumentVector",
    "EmptyCorpusError",
    "ScoredDocument",
    "TFIDFVectorizer",
    "VectorStore",
    "VectorStoreError",
]
