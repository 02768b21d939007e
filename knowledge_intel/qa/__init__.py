# QA module - 知识问答模块

from .engine import QUESTION_PATTERNS, QAEngine

__all__ = [
    "QAEngine",
    "QUESTION_PATTERNS",
]
