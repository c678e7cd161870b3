"""
Lexicon-based sentiment scoring and mood labeling.

Scores are heuristic polarity measures in [-1, 1]: the mean contribution of
the tokens that matched the lexicon, with a one-token negation window.
"""

from __future__ import annotations

from enum import Enum

from conv_analytics.analytics.lexicon import (
    NEGATIVE_PHRASES,
    NEGATIVE_ROOTS,
    NEGATIVE_WORDS,
    NEGATORS,
    POSITIVE_WORDS,
)
from conv_analytics.analytics.text import tokenize


class MoodLabel(Enum):
    """Friendly mood bucket for a sentiment score."""

    VERY_POSITIVE = "very positive"
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"
    VERY_NEGATIVE = "very negative"


MOOD_EMOJI: dict[str, str] = {
    MoodLabel.VERY_POSITIVE.value: "\U0001F604",  # grinning face with smiling eyes
    MoodLabel.POSITIVE.value: "\U0001F642",  # slightly smiling face
    MoodLabel.NEUTRAL.value: "\U0001F610",  # neutral face
    MoodLabel.NEGATIVE.value: "\u2639\ufe0f",  # frowning face
    MoodLabel.VERY_NEGATIVE.value: "\U0001F621",  # pouting face
}

UNKNOWN_MOOD_EMOJI = "\U0001F914"  # thinking face


def score_sentiment(text: str) -> float:
    """
    Compute a sentiment score for a block of text.

    Each token in the positive or negative lexicon contributes +1 or -1,
    flipped when the previous token is a negator. Tokens starting with a
    negative root count as negative words. The first token that matches
    nothing triggers the phrase check: if the text contains a negative phrase
    such as "not working", it contributes -1 once and scanning stops.

    Args:
        text: Free text, any case.

    Returns:
        The mean contribution clamped to [-1, 1], or 0.0 when no token
        contributed.
    """
    words = tokenize(text)
    text_lower = text.lower()
    has_negative_phrase = any(phrase in text_lower for phrase in NEGATIVE_PHRASES)

    score = 0
    sentiment_words = 0

    for i, word in enumerate(words):
        negated = i > 0 and words[i - 1] in NEGATORS

        if word in POSITIVE_WORDS:
            score += -1 if negated else 1
            sentiment_words += 1
            continue

        if word in NEGATIVE_WORDS or word.startswith(NEGATIVE_ROOTS):
            score += 1 if negated else -1
            sentiment_words += 1
            continue

        if has_negative_phrase:
            # Phrase-level detection counts once for the whole text
            score -= 1
            sentiment_words += 1
            break

    if sentiment_words == 0:
        return 0.0

    normalized = score / sentiment_words
    return max(-1.0, min(1.0, normalized))


def label_for_mood(score: float) -> MoodLabel:
    """Map a sentiment score to its mood bucket."""
    if score >= 0.6:
        return MoodLabel.VERY_POSITIVE
    if score >= 0.2:
        return MoodLabel.POSITIVE
    if -0.2 < score < 0.2:
        return MoodLabel.NEUTRAL
    if score <= -0.6:
        return MoodLabel.VERY_NEGATIVE
    return MoodLabel.NEGATIVE


def emoji_for_mood(label: MoodLabel | str) -> str:
    """Return the emoji for a mood label; unknown labels get a thinking face."""
    key = label.value if isinstance(label, MoodLabel) else str(label).lower()
    return MOOD_EMOJI.get(key, UNKNOWN_MOOD_EMOJI)
