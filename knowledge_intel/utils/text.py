"""
文本处理工具
Text Processing Utilities

中英文混合文本的分词、停用词过滤、词频统计、关键词与关键句提取，
以及 Jaccard / 余弦相似度计算。
Tokenization of mixed Chinese/English text, stopword filtering, term
frequencies, keyword and key-sentence extraction, and Jaccard / cosine
similarity.

中文按单字切分，不做多字分词。
Chinese is split per character; multi-character segmentation is not done.
"""

import math
import re
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import NamedTuple


# 中文停用词
CHINESE_STOPWORDS = frozenset({
    '的', '了', '在', '是', '我', '有', '和', '就', '不', '人', '都', '一', '一個',
    '上', '也', '很', '到', '說', '要', '去', '你', '會', '著', '沒有', '看', '好',
    '自己', '這', '那', '什麼', '他', '她', '它', '們', '這個', '那個', '如果',
    '但是', '因為', '所以', '可以', '沒', '把', '讓', '被', '與', '或', '及',
    '之', '等', '能', '將', '從', '為', '對', '而', '以', '其', '中', '更',
})

# 英文停用词
ENGLISH_STOPWORDS = frozenset({
    'the', 'a', 'an', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of',
    'with', 'by', 'from', 'as', 'is', 'was', 'are', 'were', 'been', 'be', 'have',
    'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could', 'should', 'may',
    'might', 'must', 'can', 'this', 'that', 'these', 'those', 'it', 'its', 'they',
    'them', 'their', 'he', 'she', 'him', 'her', 'his', 'we', 'us', 'our', 'you',
    'your', 'i', 'me', 'my', 'not', 'no', 'if', 'then', 'than', 'so', 'such',
    'when', 'where', 'what', 'which', 'who', 'whom', 'how', 'why', 'all', 'each',
    'every', 'both', 'few', 'more', 'most', 'other', 'some', 'any', 'only', 'own',
    'same', 'just', 'also', 'very', 'even', 'still', 'about', 'after', 'before',
})

SENTENCE_SPLIT_PATTERN = re.compile(r'[。！？.!?]+')

_CHINESE = 'chinese'
_ENGLISH = 'english'
_NUMBER = 'number'


@dataclass
class PreprocessedText:
    """
    预处理结果
    Preprocessing result

    Attributes:
        tokens: 过滤停用词后的单字/单词
        bigrams: 相邻 token 拼接的二元组
        all_terms: tokens + bigrams，用于向量空间
    """
    tokens: list[str] = field(default_factory=list)
    bigrams: list[str] = field(default_factory=list)
    all_terms: list[str] = field(default_factory=list)


class Keyword(NamedTuple):
    """关键词及其出现次数"""
    token: str
    count: int


def is_chinese(char: str) -> bool:
    """判断是否为中文字符（CJK 统一表意文字基本区）"""
    if not char:
        return False
    return 0x4E00 <= ord(char[0]) <= 0x9FFF


def tokenize(text: str | None) -> list[str]:
    """
    分词（支持中英文混合）
    Tokenize mixed Chinese/English text

    每个中文字是独立 token；连续英文字母组成一个小写 token；
    连续数字组成一个 token；其余字符作为分隔符丢弃。
    Each Chinese character is a token; runs of letters form one lowercase
    token; runs of digits form one token; anything else separates.

    Examples:
        >>> tokenize('RWA 代幣化 token 2026')
        ['rwa', '代', '幣', '化', 'token', '2026']
    """
    if not text:
        return []

    tokens: list[str] = []
    current = ''
    current_type: str | None = None

    for char in text.lower():
        if is_chinese(char):
            if current:
                tokens.append(current)
                current = ''
            tokens.append(char)
            current_type = _CHINESE
        elif 'a' <= char <= 'z':
            if current_type != _ENGLISH and current:
                tokens.append(current)
                current = ''
            current += char
            current_type = _ENGLISH
        elif '0' <= char <= '9':
            if current_type != _NUMBER and current:
                tokens.append(current)
                current = ''
            current += char
            current_type = _NUMBER
        else:
            if current:
                tokens.append(current)
                current = ''
            current_type = None

    if current:
        tokens.append(current)

    return tokens


def remove_stopwords(tokens: Iterable[str]) -> list[str]:
    """
    移除停用词
    Remove stopwords

    中文单字按中文停用词表过滤；其他 token 按英文停用词表过滤，
    且长度不超过 1 的一律丢弃。
    """
    filtered = []
    for token in tokens:
        if len(token) == 1 and is_chinese(token):
            if token not in CHINESE_STOPWORDS:
                filtered.append(token)
        elif token not in ENGLISH_STOPWORDS and len(token) > 1:
            filtered.append(token)
    return filtered


def extract_ngrams(tokens: list[str], n: int = 2) -> list[str]:
    """提取 N-gram（无分隔符拼接）"""
    return [''.join(tokens[i:i + n]) for i in range(len(tokens) - n + 1)]


def term_frequency(tokens: Iterable[str]) -> Counter:
    """计算词频"""
    return Counter(tokens)


def preprocess(text: str | None) -> PreprocessedText:
    """
    文本预处理管道
    Text preprocessing pipeline

    分词 -> 去停用词 -> 追加二元组，二元组为向量空间补充短语信号。

    Examples:
        >>> preprocess('RWA 代幣化').tokens
        ['rwa', '代', '幣', '化']
        >>> preprocess('RWA 代幣化').bigrams
        ['rwa代', '代幣', '幣化']
    """
    filtered = remove_stopwords(tokenize(text))
    bigrams = extract_ngrams(filtered, 2)
    return PreprocessedText(
        tokens=filtered,
        bigrams=bigrams,
        all_terms=filtered + bigrams,
    )


def jaccard_similarity(set_a: Iterable[str], set_b: Iterable[str]) -> float:
    """
    Jaccard 相似度 |A∩B| / |A∪B|
    Jaccard similarity

    两个集合都为空时返回 0。

    Examples:
        >>> jaccard_similarity({'a', 'b'}, {'b', 'c'})
        0.3333333333333333
        >>> jaccard_similarity(set(), set())
        0.0
    """
    a = set(set_a)
    b = set(set_b)
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def _norm(vector: Mapping[str, float]) -> float:
    return math.sqrt(sum(value * value for value in vector.values()))


def cosine_similarity(vec_a: Mapping[str, float], vec_b: Mapping[str, float]) -> float:
    """
    稀疏向量余弦相似度
    Cosine similarity of sparse vectors

    任一向量范数为 0 时返回 0。点积按排序后的公共键累加，
    因此 cosine(a, b) 与 cosine(b, a) 完全相等。
    Returns 0 when either norm is zero. The dot product runs over the sorted
    shared keys so the result is exactly symmetric.
    """
    denominator = _norm(vec_a) * _norm(vec_b)
    if denominator == 0:
        return 0.0

    shared = sorted(set(vec_a) & set(vec_b))
    dot = sum(vec_a[key] * vec_b[key] for key in shared)
    score = dot / denominator
    return max(0.0, min(1.0, score))


def split_sentences(text: str | None, min_length: int = 10) -> list[str]:
    """按中英文句末标点切分，只保留去空白后长于 min_length 的句子"""
    if not text:
        return []
    return [
        sentence.strip()
        for sentence in SENTENCE_SPLIT_PATTERN.split(text)
        if len(sentence.strip()) > min_length
    ]


def extract_key_sentences(text: str | None, top_n: int = 3) -> list[str]:
    """
    提取关键句
    Extract key sentences

    句子得分 = 句中 token 与全文 token 的重叠数 / sqrt(句子 token 数)。
    Score = overlap with the document vocabulary / sqrt(sentence token count).
    """
    sentences = split_sentences(text, 10)
    if not sentences:
        return []

    doc_tokens = set(preprocess(text).tokens)

    scored = []
    for sentence in sentences:
        sentence_tokens = set(preprocess(sentence).tokens)
        if not sentence_tokens:
            scored.append((sentence, 0.0))
            continue
        overlap = len(sentence_tokens & doc_tokens)
        scored.append((sentence, overlap / math.sqrt(len(sentence_tokens))))

    scored.sort(key=lambda item: item[1], reverse=True)
    return [sentence for sentence, _ in scored[:top_n]]


def extract_keywords(text: str | None, top_n: int = 10) -> list[Keyword]:
    """
    提取关键词
    Extract keywords

    只保留长度 >= 2 的 token，按出现次数降序；次数相同按首次出现顺序。

    Examples:
        >>> extract_keywords('token token defi', 2)
        [Keyword(token='token', count=2), Keyword(token='defi', count=1)]
    """
    frequencies = term_frequency(preprocess(text).tokens)
    ranked = sorted(
        ((token, count) for token, count in frequencies.items() if len(token) >= 2),
        key=lambda item: item[1],
        reverse=True,
    )
    return [Keyword(token, count) for token, count in ranked[:top_n]]
