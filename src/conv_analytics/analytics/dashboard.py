"""
Live conversation dashboard.

Follows the selected conversation, keeps its messages ordered and recomputes
the analytics summary on every update.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from conv_analytics.analytics.report import render_report, role_breakdown
from conv_analytics.analytics.service import AnalyticsService, ConversationAnalytics
from conv_analytics.conversation.models import Message, sort_by_timestamp
from conv_analytics.conversation.selection import ConversationSelection
from conv_analytics.conversation.source import MessageSource, Subscription

logger = logging.getLogger(__name__)

DEFAULT_CONVERSATION_ID = "default"

UpdateCallback = Callable[[ConversationAnalytics], None]


class ConversationDashboard:
    """
    Keeps a ConversationAnalytics summary in sync with a message source.

    Switching the selection drops the previous conversation's subscription
    before following the new one.
    """

    def __init__(
        self,
        source: MessageSource,
        selection: ConversationSelection,
        service: AnalyticsService | None = None,
    ) -> None:
        self._source = source
        self._service = service or AnalyticsService()
        self._listeners: list[UpdateCallback] = []
        self._messages_subscription: Subscription | None = None

        self.conversation_id = DEFAULT_CONVERSATION_ID
        self.messages: list[Message] = []
        self.summary = ConversationAnalytics()

        self._selection_subscription = selection.listen(self._on_selection)

    def on_update(self, callback: UpdateCallback) -> Subscription:
        """Register a renderer; it is called with each recomputed summary."""
        self._listeners.append(callback)

        def cancel() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(cancel)

    def chart_data(self) -> dict[str, Any]:
        return role_breakdown(self.summary)

    def report(self) -> str:
        return render_report(self.summary, self.messages)

    def close(self) -> None:
        """Release the selection and message subscriptions."""
        self._selection_subscription.unsubscribe()
        if self._messages_subscription is not None:
            self._messages_subscription.unsubscribe()
            self._messages_subscription = None

    def _on_selection(self, conversation_id: str | None) -> None:
        if self._messages_subscription is not None:
            self._messages_subscription.unsubscribe()

        self.conversation_id = conversation_id or DEFAULT_CONVERSATION_ID
        logger.debug(f"Dashboard following conversation {self.conversation_id}")
        self._messages_subscription = self._source.subscribe(
            self.conversation_id, self._on_messages
        )

    def _on_messages(self, messages: list[Message]) -> None:
        self.messages = sort_by_timestamp(messages)
        self.summary = self._service.analyze(self.messages)
        for listener in list(self._listeners):
            try:
                listener(self.summary)
            except Exception:
                logger.warning("Dashboard update listener failed", exc_info=True)
