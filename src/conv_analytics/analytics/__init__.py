"""Analytics module for conversation summaries and reports."""

from conv_analytics.analytics.dashboard import ConversationDashboard
from conv_analytics.analytics.report import render_report, role_breakdown
from conv_analytics.analytics.service import (
    AnalyticsService,
    ConversationAnalytics,
    estimate_tokens,
)
from conv_analytics.analytics.sentiment import MoodLabel, label_for_mood, score_sentiment

__all__ = [
    "AnalyticsService",
    "ConversationAnalytics",
    "ConversationDashboard",
    "MoodLabel",
    "estimate_tokens",
    "label_for_mood",
    "render_report",
    "role_breakdown",
    "score_sentiment",
]
