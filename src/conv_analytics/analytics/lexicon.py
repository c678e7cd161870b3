"""Fixed word lists used by sentiment scoring and keyword extraction."""

from __future__ import annotations

POSITIVE_WORDS: frozenset[str] = frozenset({
    "good", "great", "awesome", "love", "happy", "thanks", "nice",
    "excellent", "amazing", "fantastic", "working", "fixed",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "bad", "terrible", "hate", "sad", "angry", "problem", "awful", "worst",
    "poor", "broken", "damage", "damaged", "defect", "defective", "faulty",
    "notworking", "missing", "broke", "cracked", "scratched", "malfunction",
})

NEGATORS: frozenset[str] = frozenset({
    "not", "don't", "never", "isn't", "aren't", "no",
})

# Prefixes that catch inflections missing from NEGATIVE_WORDS ("breaking", "faults")
NEGATIVE_ROOTS: tuple[str, ...] = ("damag", "break", "defec", "fault", "malfunct")

# Matched against the raw lowercased text, not tokens
NEGATIVE_PHRASES: tuple[str, ...] = ("not working", "doesn't work", "did not work")

STOP_WORDS: frozenset[str] = frozenset({
    "the", "is", "a", "an", "and", "or", "to", "of", "in", "for", "on",
    "with", "you", "i", "it", "this", "that", "we", "our", "be", "are",
    "was", "if", "but", "so", "as", "at", "by", "from",
})
