"""
Plain-text conversation report and chart data.

The report carries the same lines as the dashboard's downloadable report:
headline metrics followed by a Role/Message table.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from conv_analytics.analytics.service import ConversationAnalytics
from conv_analytics.conversation.models import Message

REPORT_TITLE = "Conversation Analytics Report"


def role_breakdown(analytics: ConversationAnalytics) -> dict[str, Any]:
    """User/bot message counts shaped for a doughnut chart."""
    return {
        "labels": ["User", "Bot"],
        "data": [analytics.user_count, analytics.bot_count],
    }


def _summary_lines(analytics: ConversationAnalytics) -> list[str]:
    lines = [
        f"User messages: {analytics.user_count}",
        f"Bot messages: {analytics.bot_count}",
        f"Sentiment: {analytics.sentiment_score:.2f}",
    ]
    if analytics.user_mood_label:
        lines.append(
            f"User mood: {analytics.user_mood_emoji} {analytics.user_mood_label} "
            f"({analytics.user_mood_score:.2f})"
        )
    # A zero average is dropped along with a missing one
    if analytics.average_response_ms:
        lines.append(f"Avg response: {analytics.average_response_ms} ms")
    if analytics.tokens_used is not None:
        lines.append(f"Estimated tokens: {analytics.tokens_used}")
    if analytics.top_keywords:
        lines.append(f"Top keywords: {', '.join(analytics.top_keywords)}")
    return lines


def _message_table(messages: Sequence[Message]) -> list[str]:
    width = max([len("Role")] + [len(m.role.value) for m in messages])
    rows = [f"{'Role'.ljust(width)} | Message", f"{'-' * width}-+-{'-' * 7}"]
    for message in messages:
        # Keep one row per message
        text = " ".join(message.text.split())
        rows.append(f"{message.role.value.ljust(width)} | {text}")
    return rows


def render_report(analytics: ConversationAnalytics, messages: Sequence[Message]) -> str:
    """
    Render the conversation report as plain text.

    Args:
        analytics: Summary computed for the messages.
        messages: Messages in display order.

    Returns:
        Report text ending with a newline.
    """
    lines = [REPORT_TITLE, ""]
    lines.extend(_summary_lines(analytics))
    lines.append("")
    lines.extend(_message_table(messages))
    return "\n".join(lines) + "\n"
