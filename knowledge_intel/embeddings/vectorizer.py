"""
TF-IDF 向量化模块
TF-IDF Vectorizer Module

将文档转换为稀疏 TF-IDF 向量，并按余弦相似度排序检索。
Turns documents into sparse TF-IDF vectors and ranks them by cosine
similarity.

状态机：unfitted -> fitted。新增文档会使模型失效，需要重新 fit。
State machine: unfitted -> fitted. Adding a document invalidates the model.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from knowledge_intel.utils.text import cosine_similarity, preprocess, term_frequency

logger = logging.getLogger(__name__)


class EmptyCorpusError(ValueError):
    """
    空语料错误
    Empty Corpus Error

    在没有任何文档时调用 fit() 抛出；IDF 在空语料上没有定义。
    Raised when fit() is called without documents; IDF is undefined there.
    """

    def __init__(self, message: str = "Cannot fit a vectorizer on an empty corpus"):
        super().__init__(message)


@dataclass
class Document:
    """语料库中的文档"""
    id: str
    text: str
    tokens: list[str]
    term_freq: dict[str, int]
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class DocumentVector:
    """
    文档向量
    Document vector

    Attributes:
        id: 文档 ID
        vector: 稀疏向量 {term: weight}
        metadata: 元数据
    """
    id: str
    vector: dict[str, float]
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """转换为字典"""
        return {"id": self.id, "vector": self.vector, "metadata": self.metadata}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DocumentVector":
        """从字典创建"""
        return cls(
            id=data.get("id", ""),
            vector=dict(data.get("vector", {})),
            metadata=dict(data.get("metadata", {})),
        )


@dataclass
class ScoredDocument:
    """检索结果中的文档及得分"""
    id: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


class TFIDFVectorizer:
    """
    TF-IDF 向量化器
    TF-IDF Vectorizer

    IDF 使用平滑公式 ln((N+1)/(df+1)) + 1，恒为正。
    查询中不在词汇表里的词被直接忽略（不做 OOV 处理）。
    IDF uses the smoothed ln((N+1)/(df+1)) + 1, always positive. Query terms
    outside the fitted vocabulary are dropped.

    Attributes:
        documents: 语料文档
        vocabulary: 词汇表 {term: index}
        idf: IDF 表 {term: weight}
        vectors: 文档向量
        fitted: 是否已训练

    Examples:
        >>> vectorizer = TFIDFVectorizer()
        >>> vectorizer.add_document('doc1', 'RWA 代幣化是未來趨勢')
        >>> vectorizer.add_document('doc2', '穩定幣市場發展')
        >>> vectorizer.search('RWA')[0].id
        'doc1'
    """

    def __init__(self):
        self.documents: list[Document] = []
        self.vocabulary: dict[str, int] = {}
        self.idf: dict[str, float] = {}
        self.vectors: list[DocumentVector] = []
        self.fitted = False

    def add_document(self, doc_id: str, text: str, metadata: dict[str, Any] | None = None) -> None:
        """
        新增文档到语料库
        Add a document to the corpus

        Args:
            doc_id: 文档 ID
            text: 文本
            metadata: 元数据（可选）
        """
        tokens = preprocess(text).all_terms
        self.documents.append(Document(
            id=doc_id,
            text=text,
            tokens=tokens,
            term_freq=dict(term_frequency(tokens)),
            metadata=dict(metadata or {}),
        ))
        self.fitted = False

    def reset(self) -> None:
        """清空语料和模型"""
        self.documents = []
        self.vocabulary = {}
        self.idf = {}
        self.vectors = []
        self.fitted = False

    def _calculate_idf(self) -> None:
        num_docs = len(self.documents)
        doc_freq: dict[str, int] = {}

        for doc in self.documents:
            for term in dict.fromkeys(doc.tokens):
                doc_freq[term] = doc_freq.get(term, 0) + 1

        self.idf = {}
        self.vocabulary = {}
        for term, freq in doc_freq.items():
            self.idf[term] = math.log((num_docs + 1) / (freq + 1)) + 1
            self.vocabulary[term] = len(self.vocabulary)

    def vectorize(self, term_freq: dict[str, int]) -> dict[str, float]:
        """
        计算 TF-IDF 稀疏向量
        Compute a sparse TF-IDF vector

        权重 = (词频 / 文档内最大词频) * idf；未登录词直接省略。
        Weight = (tf / max tf) * idf; unknown terms are omitted.
        """
        max_freq = max(max(term_freq.values(), default=0), 1)
        vector: dict[str, float] = {}

        for term, freq in term_freq.items():
            idf = self.idf.get(term)
            if idf:
                vector[term] = (freq / max_freq) * idf

        return vector

    def fit(self) -> None:
        """
        训练向量化器
        Fit the vectorizer

        Raises:
            EmptyCorpusError: 语料为空
        """
        if not self.documents:
            raise EmptyCorpusError()

        self._calculate_idf()
        self.vectors = [
            DocumentVector(id=doc.id, vector=self.vectorize(doc.term_freq), metadata=doc.metadata)
            for doc in self.documents
        ]
        self.fitted = True

        logger.info(
            f"TF-IDF fitted: documents={len(self.documents)}, "
            f"vocabulary={len(self.vocabulary)}"
        )

    def transform_query(self, query: str) -> dict[str, float]:
        """将查询转换为向量（不扩充词汇表）"""
        tokens = preprocess(query).all_terms
        return self.vectorize(dict(term_frequency(tokens)))

    def search(self, query: str, top_k: int = 5) -> list[ScoredDocument]:
        """
        搜索最相似的文档
        Search for the most similar documents

        未训练时先自动训练；只返回得分严格大于 0 的文档。
        Fits lazily when needed; only strictly positive scores are returned.

        Raises:
            EmptyCorpusError: 需要训练但语料为空
        """
        if not self.fitted:
            self.fit()

        query_vector = self.transform_query(query)
        scores = [
            ScoredDocument(
                id=doc.id,
                score=cosine_similarity(query_vector, doc.vector),
                metadata=doc.metadata,
            )
            for doc in self.vectors
        ]

        ranked = sorted((s for s in scores if s.score > 0), key=lambda s: s.score, reverse=True)
        logger.debug(f"Vector search '{query[:30]}': {len(ranked)} hits")
        return ranked[:top_k]

    def _find_vector(self, doc_id: str) -> DocumentVector | None:
        for doc in self.vectors:
            if doc.id == doc_id:
                return doc
        return None

    def get_shared_terms(self, doc_id_a: str, doc_id_b: str) -> list[tuple[str, float]]:
        """找出两个文档共同的重要词，按平均权重降序"""
        doc_a = self._find_vector(doc_id_a)
        doc_b = self._find_vector(doc_id_b)
        if doc_a is None or doc_b is None:
            return []

        shared = [
            (term, (weight + doc_b.vector[term]) / 2)
            for term, weight in doc_a.vector.items()
            if doc_b.vector.get(term)
        ]
        return sorted(shared, key=lambda item: item[1], reverse=True)

    def get_top_terms(self, doc_id: str, top_n: int = 10) -> list[tuple[str, float]]:
        """取得文档权重最高的词"""
        doc = self._find_vector(doc_id)
        if doc is None:
            return []
        return sorted(doc.vector.items(), key=lambda item: item[1], reverse=True)[:top_n]

    def export_state(self) -> dict[str, Any]:
        """导出状态（用于持久化）"""
        return {
            "documents": [
                {"id": d.id, "text": d.text, "metadata": d.metadata, "term_freq": d.term_freq}
                for d in self.documents
            ],
            "vocabulary": dict(self.vocabulary),
            "idf": dict(self.idf),
            "vectors": [v.to_dict() for v in self.vectors],
            "fitted": self.fitted,
        }

    def import_state(self, state: dict[str, Any]) -> None:
        """导入状态"""
        self.documents = []
        for data in state.get("documents", []):
            text = data.get("text", "")
            self.documents.append(Document(
                id=data.get("id", ""),
                text=text,
                tokens=preprocess(text).all_terms,
                term_freq=dict(data.get("term_freq", {})),
                metadata=dict(data.get("metadata", {})),
            ))
        self.vocabulary = dict(state.get("vocabulary", {}))
        self.idf = dict(state.get("idf", {}))
        self.vectors = [DocumentVector.from_dict(v) for v in state.get("vectors", [])]
        self.fitted = bool(state.get("fitted", False))

    def get_stats(self) -> dict[str, Any]:
        """统计信息"""
        total_tokens = sum(len(doc.tokens) for doc in self.documents)
        return {
            "num_documents": len(self.documents),
            "vocabulary_size": len(self.vocabulary),
            "average_doc_length": total_tokens / max(len(self.documents), 1),
            "fitted": self.fitted,
        }
