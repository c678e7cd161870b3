"""Currently selected conversation, remembered across sessions."""

from __future__ import annotations

import logging
from collections.abc import Callable

from conv_analytics.conversation.source import Subscription
from conv_analytics.preferences.store import KeyValueStore

logger = logging.getLogger(__name__)

LAST_CONVERSATION_KEY = "lastConversationId"

SelectionCallback = Callable[[str | None], None]


class ConversationSelection:
    """
    Holds the selected conversation ID and broadcasts changes.

    The ID is restored from and written back to a key-value store on a
    best-effort basis; storage errors are logged and ignored.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self._listeners: list[SelectionCallback] = []
        self._current: str | None = None

        try:
            self._current = store.get(LAST_CONVERSATION_KEY) or None
        except Exception:
            logger.warning("Failed to restore last conversation id", exc_info=True)

    @property
    def current(self) -> str | None:
        return self._current

    def select(self, conversation_id: str | None) -> None:
        """Select a conversation, or clear the selection with None."""
        try:
            if conversation_id:
                self._store.set(LAST_CONVERSATION_KEY, conversation_id)
            else:
                self._store.remove(LAST_CONVERSATION_KEY)
        except Exception:
            logger.warning("Failed to persist conversation selection", exc_info=True)

        self._current = conversation_id or None
        for listener in list(self._listeners):
            self._notify(listener)

    def listen(self, callback: SelectionCallback) -> Subscription:
        """Receive the current selection now and every change after."""
        self._listeners.append(callback)
        self._notify(callback)

        def cancel() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return Subscription(cancel)

    def _notify(self, listener: SelectionCallback) -> None:
        try:
            listener(self._current)
        except Exception:
            logger.warning("Selection listener failed", exc_info=True)
