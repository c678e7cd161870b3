"""
Conversation storage using JSON files.

Each conversation is stored as a separate file with its messages inline:
data/conversations/conv_abc123.json

The store doubles as a MessageSource: subscribers are pushed the ordered
message list whenever a conversation changes.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import time
import uuid
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from conv_analytics.config import PATHS
from conv_analytics.conversation.models import (
    ConvAnalyticsError,
    Message,
    MessageRole,
    sort_by_timestamp,
)
from conv_analytics.conversation.source import (
    MessageCallback,
    SubscriberRegistry,
    Subscription,
    deliver,
)

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "New Chat"
MAX_TITLE_LENGTH = 40

_VALID_ID = re.compile(r"^[A-Za-z0-9_-]{1,100}$")


class ConversationNotFoundError(ConvAnalyticsError, KeyError):
    """No conversation exists with the requested ID."""


def _utc_now_iso() -> str:
    return datetime.utcnow().isoformat() + "Z"


def title_from_message(text: str) -> str:
    """Derive a conversation title from its first user message."""
    text = text.strip()
    if len(text) > MAX_TITLE_LENGTH:
        return text[:MAX_TITLE_LENGTH] + "…"
    return text


@dataclass
class Conversation:
    """A stored conversation with its messages."""

    id: str
    title: str = DEFAULT_TITLE
    created_at: str = field(default_factory=_utc_now_iso)
    updated_at: str = field(default_factory=_utc_now_iso)
    last_message: str | None = None
    messages: list[Message] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        d = asdict(self)
        d["messages"] = [m.to_dict() for m in self.messages]
        return d

    def summary(self) -> dict[str, Any]:
        """Listing view without the message bodies."""
        return {
            "id": self.id,
            "title": self.title,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "last_message": self.last_message,
            "message_count": len(self.messages),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Conversation:
        """Create from dictionary."""
        return cls(
            id=data["id"],
            title=data.get("title", DEFAULT_TITLE),
            created_at=data.get("created_at", ""),
            updated_at=data.get("updated_at", ""),
            last_message=data.get("last_message"),
            messages=[Message.from_dict(m) for m in data.get("messages", [])],
        )


class ConversationStore:
    """
    JSON file-based conversation store.

    Mutations are serialized with an asyncio lock; subscriber callbacks run
    after the lock is released.
    """

    def __init__(self, storage_dir: Path | None = None) -> None:
        """
        Initialize conversation store.

        Args:
            storage_dir: Directory to store conversations.
                        Defaults to data/conversations under the data dir.
        """
        self.storage_dir = storage_dir or PATHS.CONVERSATIONS_DIR
        self._ensure_dir_exists()
        self._lock = asyncio.Lock()
        self._registry = SubscriberRegistry()

    def _ensure_dir_exists(self) -> None:
        """Create storage directory if it doesn't exist."""
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def _get_filepath(self, conversation_id: str) -> Path:
        if not _VALID_ID.match(conversation_id):
            raise ConversationNotFoundError(conversation_id)
        return self.storage_dir / f"conv_{conversation_id}.json"

    def _generate_id(self) -> str:
        return uuid.uuid4().hex

    def _load(self, conversation_id: str) -> Conversation | None:
        """Read a conversation from disk, or None if missing or unreadable."""
        filepath = self._get_filepath(conversation_id)
        if not filepath.exists():
            return None

        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return Conversation.from_dict(json.load(f))
        except (json.JSONDecodeError, TypeError, KeyError, ValueError, OSError) as e:
            logger.warning(f"Failed to read conversation file {filepath}: {e}")
            return None

    def _save(self, conversation: Conversation) -> None:
        """Write a conversation to disk with owner-only permissions."""
        filepath = self._get_filepath(conversation.id)
        try:
            fd = os.open(filepath, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(conversation.to_dict(), f, indent=2, ensure_ascii=False)
            logger.debug(f"Saved conversation {conversation.id}")
        except OSError as e:
            logger.error(f"Failed to save conversation {conversation.id}: {e}")
            raise

    async def create_conversation(self) -> str:
        """
        Create an empty conversation.

        Returns:
            The new conversation ID.
        """
        async with self._lock:
            conversation = Conversation(id=self._generate_id())
            self._save(conversation)
        logger.info(f"Created conversation {conversation.id}")
        return conversation.id

    async def get(self, conversation_id: str) -> Conversation:
        """
        Get a conversation by ID.

        Raises:
            ConversationNotFoundError: If the conversation does not exist.
        """
        conversation = self._load(conversation_id)
        if conversation is None:
            raise ConversationNotFoundError(conversation_id)
        return conversation

    async def get_messages(self, conversation_id: str) -> list[Message]:
        """Return a conversation's messages ordered by timestamp."""
        conversation = await self.get(conversation_id)
        return sort_by_timestamp(conversation.messages)

    async def add_message(
        self,
        conversation_id: str,
        role: MessageRole | str,
        text: str,
        created_at: float | None = None,
    ) -> Message:
        """
        Append a message to a conversation.

        The first user message replaces the default title.

        Args:
            conversation_id: The conversation ID.
            role: Message author.
            text: Message text.
            created_at: Epoch milliseconds. Defaults to now.

        Returns:
            The stored Message.

        Raises:
            ConversationNotFoundError: If the conversation does not exist.
            InvalidMessageError: If the role is unknown.
        """
        message = Message.from_dict({
            "role": role,
            "text": text,
            "created_at": created_at if created_at is not None else time.time() * 1000,
        })

        async with self._lock:
            conversation = await self.get(conversation_id)
            has_user_message = any(m.role is MessageRole.USER for m in conversation.messages)
            conversation.messages.append(message)
            conversation.last_message = message.text
            conversation.updated_at = _utc_now_iso()
            if message.role is MessageRole.USER and not has_user_message:
                conversation.title = title_from_message(message.text) or DEFAULT_TITLE
            self._save(conversation)

        self._registry.notify(conversation_id, sort_by_timestamp(conversation.messages))
        return message

    async def list_conversations(self) -> list[Conversation]:
        """
        List stored conversations.

        Returns:
            Conversations, most recently updated first. Unreadable files are skipped.
        """
        conversations: list[Conversation] = []
        try:
            for filepath in self.storage_dir.glob("conv_*.json"):
                try:
                    with open(filepath, "r", encoding="utf-8") as f:
                        conversations.append(Conversation.from_dict(json.load(f)))
                except (json.JSONDecodeError, TypeError, KeyError, ValueError) as e:
                    logger.warning(f"Failed to read conversation file {filepath}: {e}")
                    continue
        except OSError as e:
            logger.error(f"Failed to list conversations: {e}")

        conversations.sort(key=lambda c: c.updated_at, reverse=True)
        return conversations

    async def delete_conversation(self, conversation_id: str) -> bool:
        """
        Delete a conversation and its messages.

        Returns:
            True if a conversation was deleted, False if it did not exist.
        """
        async with self._lock:
            try:
                filepath = self._get_filepath(conversation_id)
            except ConversationNotFoundError:
                return False
            if not filepath.exists():
                return False
            filepath.unlink()

        logger.info(f"Deleted conversation {conversation_id}")
        self._registry.notify(conversation_id, [])
        return True

    def subscribe(self, conversation_id: str, callback: MessageCallback) -> Subscription:
        """
        Follow a conversation's messages.

        Unknown conversations deliver an empty list until messages arrive.
        """
        subscription = self._registry.add(conversation_id, callback)
        try:
            conversation = self._load(conversation_id)
        except ConversationNotFoundError:
            conversation = None
        messages = sort_by_timestamp(conversation.messages) if conversation else []
        deliver(callback, conversation_id, messages)
        return subscription

    def count(self) -> int:
        """Return total count of stored conversations."""
        return len(list(self.storage_dir.glob("conv_*.json")))
