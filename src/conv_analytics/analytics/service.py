"""
Conversation analytics service.

Turns an ordered sequence of chat messages into a ConversationAnalytics
summary: role counts, sentiment, user mood, keywords, response latency and
a token estimate. The transform is total; it never raises on message input.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from conv_analytics.analytics.keywords import extract_keywords
from conv_analytics.analytics.sentiment import (
    MoodLabel,
    emoji_for_mood,
    label_for_mood,
    score_sentiment,
)
from conv_analytics.analytics.text import count_words
from conv_analytics.analytics.timing import average_response_ms, round_half_up
from conv_analytics.config import ANALYTICS
from conv_analytics.conversation.models import Message, MessageRole

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationAnalytics:
    """Summary of a single conversation."""

    user_count: int = 0
    bot_count: int = 0
    sentiment_score: float = 0.0  # -1..1
    top_keywords: tuple[str, ...] = ()
    average_response_ms: int | None = None
    tokens_used: int | None = None
    user_mood_score: float = 0.0  # -1..1, user messages only
    user_mood_label: str = MoodLabel.NEUTRAL.value
    user_mood_emoji: str = emoji_for_mood(MoodLabel.NEUTRAL)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the camelCase dictionary consumed by reports, omitting absent values."""
        d: dict[str, Any] = {
            "userCount": self.user_count,
            "botCount": self.bot_count,
            "sentimentScore": self.sentiment_score,
            "topKeywords": list(self.top_keywords),
            "averageResponseMs": self.average_response_ms,
            "tokensUsed": self.tokens_used,
            "userMoodScore": self.user_mood_score,
            "userMoodLabel": self.user_mood_label,
            "userMoodEmoji": self.user_mood_emoji,
        }
        return {k: v for k, v in d.items() if v is not None}


def estimate_tokens(text: str, tokens_per_word: float = ANALYTICS.TOKENS_PER_WORD) -> int:
    """Rough token estimate from the whitespace word count."""
    if not text:
        return 0
    return max(0, round_half_up(count_words(text) * tokens_per_word))


class AnalyticsService:
    """
    Computes ConversationAnalytics from message sequences.

    Stateless apart from its tunables, so one instance can be shared.
    """

    def __init__(
        self,
        keyword_limit: int | None = None,
        tokens_per_word: float | None = None,
    ) -> None:
        """
        Initialize analytics service.

        Args:
            keyword_limit: Number of keywords to return. Defaults to config.
            tokens_per_word: Token estimate ratio. Defaults to config.
        """
        self.keyword_limit = keyword_limit if keyword_limit is not None else ANALYTICS.KEYWORD_LIMIT
        self.tokens_per_word = (
            tokens_per_word if tokens_per_word is not None else ANALYTICS.TOKENS_PER_WORD
        )

    def analyze(self, messages: Sequence[Message]) -> ConversationAnalytics:
        """
        Compute the analytics summary for a conversation.

        Args:
            messages: Messages in conversation order.

        Returns:
            ConversationAnalytics. An empty sequence yields zero counts,
            neutral mood and no latency or token estimate.
        """
        if not messages:
            return ConversationAnalytics()

        user_texts = [m.text for m in messages if m.role is MessageRole.USER]
        user_count = len(user_texts)
        bot_count = sum(1 for m in messages if m.role is MessageRole.BOT)

        all_text = " ".join(m.text for m in messages)
        user_text = " ".join(user_texts)

        user_mood_score = score_sentiment(user_text) if user_text else 0.0
        mood = label_for_mood(user_mood_score)

        analytics = ConversationAnalytics(
            user_count=user_count,
            bot_count=bot_count,
            sentiment_score=score_sentiment(all_text),
            top_keywords=tuple(extract_keywords(all_text, limit=self.keyword_limit)),
            average_response_ms=average_response_ms(messages),
            tokens_used=estimate_tokens(all_text, self.tokens_per_word),
            user_mood_score=user_mood_score,
            user_mood_label=mood.value,
            user_mood_emoji=emoji_for_mood(mood),
        )

        logger.debug(
            "Computed conversation analytics",
            extra={"extra_data": {"messages": len(messages), "analytics": analytics.to_dict()}},
        )
        return analytics

    def analyze_records(
        self, records: Iterable[Mapping[str, Any]]
    ) -> ConversationAnalytics:
        """
        Normalize raw message records and analyze them.

        Raises:
            InvalidMessageError: If a record has an unknown role.
        """
        return self.analyze([Message.from_dict(r) for r in records])
