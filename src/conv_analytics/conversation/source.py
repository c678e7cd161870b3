"""
Message sources: push the ordered messages of a conversation to subscribers.

The analytics side only depends on the ``MessageSource`` protocol, never on
how a particular backend delivers updates.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable
from typing import Protocol

from conv_analytics.conversation.models import Message, sort_by_timestamp

logger = logging.getLogger(__name__)

MessageCallback = Callable[[list[Message]], None]


class Subscription:
    """Handle returned by ``subscribe``; ``unsubscribe`` is idempotent."""

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel: Callable[[], None] | None = cancel

    @property
    def active(self) -> bool:
        return self._cancel is not None

    def unsubscribe(self) -> None:
        """Stop delivery. Safe to call more than once."""
        cancel, self._cancel = self._cancel, None
        if cancel is not None:
            cancel()


class MessageSource(Protocol):
    """Anything that can stream the ordered message list of a conversation."""

    def subscribe(self, conversation_id: str, callback: MessageCallback) -> Subscription:
        """
        Register a callback for a conversation.

        The callback receives the full ordered list immediately and again
        after every change.
        """
        ...


class SubscriberRegistry:
    """Per-conversation callback bookkeeping shared by source implementations."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[MessageCallback]] = defaultdict(list)
        self._lock = threading.Lock()

    def add(self, conversation_id: str, callback: MessageCallback) -> Subscription:
        with self._lock:
            self._subscribers[conversation_id].append(callback)

        def cancel() -> None:
            with self._lock:
                callbacks = self._subscribers.get(conversation_id)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(conversation_id, None)

        return Subscription(cancel)

    def count(self, conversation_id: str) -> int:
        with self._lock:
            return len(self._subscribers.get(conversation_id, ()))

    def notify(self, conversation_id: str, messages: list[Message]) -> None:
        """
        Deliver a snapshot to every subscriber of a conversation.

        A failing callback is logged and does not stop delivery to the rest.
        """
        with self._lock:
            callbacks = list(self._subscribers.get(conversation_id, ()))

        for callback in callbacks:
            deliver(callback, conversation_id, list(messages))


def deliver(callback: MessageCallback, conversation_id: str, messages: list[Message]) -> None:
    """Invoke one subscriber callback, logging instead of propagating its errors."""
    try:
        callback(messages)
    except Exception:
        logger.warning(
            "Message subscriber failed for conversation %s", conversation_id, exc_info=True
        )


class InMemoryMessageSource:
    """
    In-process message source.

    Keeps each conversation's messages in memory and pushes a timestamp-ordered
    copy to subscribers on every change.
    """

    def __init__(self) -> None:
        self._messages: dict[str, list[Message]] = defaultdict(list)
        self._registry = SubscriberRegistry()

    def subscribe(self, conversation_id: str, callback: MessageCallback) -> Subscription:
        subscription = self._registry.add(conversation_id, callback)
        deliver(callback, conversation_id, self.get_messages(conversation_id))
        return subscription

    def get_messages(self, conversation_id: str) -> list[Message]:
        """Return the conversation's messages ordered by timestamp."""
        return sort_by_timestamp(self._messages.get(conversation_id, []))

    def add_message(self, conversation_id: str, message: Message) -> None:
        """Append a message and notify subscribers."""
        self._messages[conversation_id].append(message)
        self._registry.notify(conversation_id, self.get_messages(conversation_id))

    def clear(self, conversation_id: str) -> None:
        """Drop a conversation's messages and notify subscribers with an empty list."""
        self._messages.pop(conversation_id, None)
        self._registry.notify(conversation_id, [])

    def subscriber_count(self, conversation_id: str) -> int:
        return self._registry.count(conversation_id)
