"""
向量存储模块
Vector Store Module

负责文档向量的 JSON 持久化与载入。
Persists document vectors to a JSON index file and loads them back.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from knowledge_intel.embeddings.vectorizer import DocumentVector

logger = logging.getLogger(__name__)

INDEX_VERSION = "1.0"


class VectorStoreError(Exception):
    """
    向量索引文件错误
    Vector index file error

    索引文件存在但无法解析时抛出。
    Raised when the index file exists but cannot be parsed.
    """

    def __init__(self, message: str, path: str | None = None):
        self.message = message
        self.path = path
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path:
            return f"Failed to load vector index at '{self.path}': {self.message}"
        return f"Vector index error: {self.message}"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _empty_index() -> dict[str, Any]:
    return {
        "version": INDEX_VERSION,
        "created_at": _now_iso(),
        "updated_at": None,
        "documents": {},
    }


class VectorStore:
    """
    向量存储
    Vector Store

    Attributes:
        path: 索引文件路径
        loaded: 是否已载入

    Examples:
        >>> store = VectorStore('data/vectors/index.json')
        >>> store.add_document('a', {'rwa': 1.2}, {'title': 'RWA'})
        >>> store.has_document('a')
        True
    """

    def __init__(self, path: str | Path = "data/vectors/index.json"):
        self.path = Path(path)
        self.index: dict[str, Any] = _empty_index()
        self.loaded = False

    def _ensure_loaded(self) -> None:
        if not self.loaded:
            self.load()

    def load(self) -> None:
        """
        载入索引；文件不存在时使用空索引
        Load the index; a missing file starts an empty one

        Raises:
            VectorStoreError: 文件内容不是合法的索引 JSON
        """
        if not self.path.exists():
            self.index = _empty_index()
            self.loaded = True
            return

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise VectorStoreError(str(e), str(self.path)) from e

        if not isinstance(data, dict) or not isinstance(data.get("documents", {}), dict):
            raise VectorStoreError("index must be an object with a 'documents' mapping", str(self.path))

        data.setdefault("documents", {})
        self.index = data
        self.loaded = True
        logger.info(f"Loaded vector index: {len(self.index['documents'])} documents from {self.path}")

    def save(self) -> None:
        """保存索引"""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.index["updated_at"] = _now_iso()
        with open(self.path, 'w', encoding='utf-8') as f:
            json.dump(self.index, f, ensure_ascii=False, indent=2)

    def add_document(self, doc_id: str, vector: dict[str, float], metadata: dict[str, Any] | None = None) -> None:
        """新增单个文档向量并保存"""
        self._ensure_loaded()
        self.index["documents"][doc_id] = {
            "id": doc_id,
            "vector": vector,
            "metadata": metadata or {},
            "added_at": _now_iso(),
        }
        self.save()

    def add_documents(self, documents: list[DocumentVector]) -> None:
        """批量新增文档向量，只保存一次"""
        self._ensure_loaded()
        now = _now_iso()
        for doc in documents:
            self.index["documents"][doc.id] = {
                "id": doc.id,
                "vector": doc.vector,
                "metadata": doc.metadata or {},
                "added_at": now,
            }
        self.save()
        logger.info(f"Stored {len(documents)} document vectors")

    def replace_documents(self, documents: list[DocumentVector]) -> None:
        """
        以一次训练的结果整体替换索引中的所有向量，只保存一次
        Replace every stored vector with the output of one fit

        不同训练的 IDF 表不同，旧向量不能与新向量混用。
        """
        created_at = self.index.get("created_at") if self.loaded else None
        self.index = _empty_index()
        if created_at:
            self.index["created_at"] = created_at
        self.loaded = True
        self.add_documents(documents)

    def get_document(self, doc_id: str) -> dict[str, Any] | None:
        self._ensure_loaded()
        return self.index["documents"].get(doc_id)

    def get_all_documents(self) -> list[dict[str, Any]]:
        self._ensure_loaded()
        return list(self.index["documents"].values())

    def remove_document(self, doc_id: str) -> None:
        """删除文档；不存在时忽略"""
        self._ensure_loaded()
        if self.index["documents"].pop(doc_id, None) is not None:
            self.save()

    def has_document(self, doc_id: str) -> bool:
        self._ensure_loaded()
        return doc_id in self.index["documents"]

    def get_stats(self) -> dict[str, Any]:
        """取得统计信息"""
        self._ensure_loaded()
        added = [doc.get("added_at") for doc in self.index["documents"].values() if doc.get("added_at")]
        return {
            "total_documents": len(self.index["documents"]),
            "created_at": self.index.get("created_at"),
            "updated_at": self.index.get("updated_at"),
            "oldest_document": min(added) if added else None,
            "newest_document": max(added) if added else None,
        }

    def clear(self) -> None:
        """清空所有数据"""
        self.index = _empty_index()
        self.loaded = True
        self.save()
