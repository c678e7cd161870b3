"""Frequency-based keyword extraction over unigrams and bigrams."""

from __future__ import annotations

from conv_analytics.analytics.lexicon import STOP_WORDS
from conv_analytics.analytics.text import tokenize

DEFAULT_KEYWORD_LIMIT = 10
MIN_UNIGRAM_LENGTH = 3
MIN_BIGRAM_LENGTH = 5
BIGRAM_WEIGHT = 2


def keyword_weights(text: str) -> dict[str, int]:
    """
    Build the merged unigram/bigram weight table.

    Unigrams are counted first, then bigrams at double weight. The dict keeps
    first-seen insertion order, which is the tie-break used for ranking.
    A bigram does not reduce the counts of the words inside it.
    """
    words = tokenize(text)
    counts: dict[str, int] = {}

    for word in words:
        if word in STOP_WORDS or len(word) < MIN_UNIGRAM_LENGTH:
            continue
        counts[word] = counts.get(word, 0) + 1

    for first, second in zip(words, words[1:]):
        if first in STOP_WORDS or second in STOP_WORDS:
            continue
        bigram = f"{first} {second}"
        if len(bigram) < MIN_BIGRAM_LENGTH:
            continue
        counts[bigram] = counts.get(bigram, 0) + BIGRAM_WEIGHT

    return counts


def extract_keywords(text: str, limit: int = DEFAULT_KEYWORD_LIMIT) -> list[str]:
    """
    Return the top terms of a text by weight.

    Args:
        text: Free text, any case.
        limit: Maximum number of terms to return.

    Returns:
        Terms sorted by descending weight; equal weights keep first-seen order.
    """
    if limit <= 0:
        return []
    counts = keyword_weights(text)
    # sorted() is stable, so equal weights stay in insertion order
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [term for term, _ in ranked[:limit]]
