"""
文本处理工具单元测试

测试分词、停用词过滤、N-gram、相似度计算以及关键词/关键句提取。
"""

import math

import pytest

from knowledge_intel.utils.text import (
    Keyword,
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


class TestIsChinese:
    """测试中文字符判断"""

    def test_chinese_character(self):
        assert is_chinese('代') is True

    def test_ascii_character(self):
        assert is_chinese('a') is False

    def test_empty_string(self):
        assert is_chinese('') is False


class TestTokenize:
    """测试分词"""

    def test_mixed_chinese_english_and_digits(self):
        """中文按字切分，英文和数字各自成段"""
        assert tokenize('RWA 代幣化 token 2026') == ['rwa', '代', '幣', '化', 'token', '2026']

    def test_letter_and_digit_runs_split(self):
        assert tokenize('abc123def') == ['abc', '123', 'def']

    def test_punctuation_separates(self):
        assert tokenize('Hello, World!') == ['hello', 'world']

    def test_lowercases_output(self):
        assert tokenize('DeFi') == ['defi']

    def test_empty_and_none(self):
        assert tokenize('') == []
        assert tokenize(None) == []


class TestRemoveStopwords:
    """测试停用词过滤"""

    def test_filters_chinese_and_english_stopwords(self):
        tokens = ['的', '代', 'the', 'a', 'rwa', 'x']
        assert remove_stopwords(tokens) == ['代', 'rwa']

    def test_keeps_order(self):
        assert remove_stopwords(['token', '幣', 'defi']) == ['token', '幣', 'defi']


class TestNgramsAndPreprocess:
    """测试 N-gram 与预处理管道"""

    def test_bigrams(self):
        assert extract_ngrams(['a', 'b', 'c']) == ['ab', 'bc']

    def test_trigrams(self):
        assert extract_ngrams(['a', 'b', 'c'], 3) == ['abc']

    def test_too_short_for_ngram(self):
        assert extract_ngrams(['a']) == []
        assert extract_ngrams([]) == []

    def test_preprocess_pipeline(self):
        result = preprocess('RWA 代幣化')
        assert result.tokens == ['rwa', '代', '幣', '化']
        assert result.bigrams == ['rwa代', '代幣', '幣化']
        assert result.all_terms == result.tokens + result.bigrams

    def test_preprocess_empty(self):
        result = preprocess(None)
        assert result.tokens == []
        assert result.all_terms == []

    def test_term_frequency(self):
        freq = term_frequency(['rwa', 'rwa', 'defi'])
        assert freq['rwa'] == 2
        assert freq['defi'] == 1


class TestJaccardSimilarity:
    """测试 Jaccard 相似度"""

    def test_partial_overlap(self):
        assert jaccard_similarity({'a', 'b'}, {'b', 'c'}) == pytest.approx(1 / 3)

    def test_identical_sets(self):
        assert jaccard_similarity(['a', 'b'], ['b', 'a']) == 1.0

    def test_both_empty_is_zero(self):
        """两个空集合返回 0 而不是除零错误"""
        assert jaccard_similarity(set(), set()) == 0.0


class TestCosineSimilarity:
    """测试余弦相似度"""

    def test_parallel_vectors(self):
        assert cosine_similarity({'a': 1.0}, {'a': 2.0}) == pytest.approx(1.0)

    def test_orthogonal_vectors(self):
        assert cosine_similarity({'a': 1.0}, {'b': 1.0}) == 0.0

    def test_zero_norm_is_zero(self):
        assert cosine_similarity({}, {'a': 1.0}) == 0.0
        assert cosine_similarity({'a': 0.0}, {'a': 0.0}) == 0.0

    def test_known_value(self):
        score = cosine_similarity({'a': 1.0, 'b': 1.0}, {'a': 1.0})
        assert score == pytest.approx(1 / math.sqrt(2))

    def test_symmetric(self):
        vec_a = {'rwa': 1.3, 'defi': 0.4, 'token': 0.9}
        vec_b = {'defi': 2.1, 'token': 0.3, 'ai': 1.0}
        assert cosine_similarity(vec_a, vec_b) == cosine_similarity(vec_b, vec_a)


class TestSentences:
    """测试句子切分与关键句提取"""

    def test_split_sentences_filters_short(self):
        text = '短句。This is a long enough sentence. ok'
        assert split_sentences(text) == ['This is a long enough sentence']

    def test_split_sentences_empty(self):
        assert split_sentences(None) == []

    def test_extract_key_sentences_top_n(self):
        text = (
            'RWA tokenization is reshaping capital markets. '
            'Stablecoin settlement needs regulated issuers. '
            'Tokenization lowers the cost of RWA issuance. '
            'Weather forecasts have nothing to do here.'
        )
        sentences = extract_key_sentences(text, top_n=2)
        assert len(sentences) == 2
        assert all(s in split_sentences(text) for s in sentences)

    def test_extract_key_sentences_no_sentences(self):
        assert extract_key_sentences('short') == []


class TestExtractKeywords:
    """测试关键词提取"""

    def test_ranked_by_count(self):
        assert extract_keywords('token token defi', 2) == [
            Keyword('token', 2),
            Keyword('defi', 1),
        ]

    def test_single_characters_excluded(self):
        keywords = extract_keywords('代幣 token')
        assert [k.token for k in keywords] == ['token']

    def test_ties_keep_first_seen_order(self):
        keywords = extract_keywords('alpha beta gamma')
        assert [k.token for k in keywords] == ['alpha', 'beta', 'gamma']
