"""
Message records exchanged between the chat store and the analytics core.

Timestamps arrive in several shapes (Firestore ``{"seconds": n}`` maps,
``datetime`` objects, epoch milliseconds) and are coerced to epoch
milliseconds. Anything unrecognized degrades to 0 instead of failing.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any


class ConvAnalyticsError(Exception):
    """Base exception for conv_analytics operations."""


class InvalidMessageError(ConvAnalyticsError, ValueError):
    """A raw message record could not be turned into a Message."""


class MessageRole(Enum):
    """Author of a chat message."""

    USER = "user"
    BOT = "bot"


def to_ms(value: Any) -> float:
    """
    Coerce a timestamp in any supported shape to epoch milliseconds.

    Args:
        value: ``None``, a ``datetime``, a mapping with a numeric ``seconds``
            key, a number (epoch ms) or a numeric string.

    Returns:
        Epoch milliseconds, or 0 when the value is missing, malformed,
        non-finite or too large for a float.
    """
    if not value:
        return 0
    try:
        if isinstance(value, datetime):
            ms = value.timestamp() * 1000
        elif isinstance(value, Mapping):
            seconds = value.get("seconds")
            if not isinstance(seconds, (int, float)) or isinstance(seconds, bool):
                return 0
            ms = float(seconds) * 1000
        else:
            ms = float(value)
    except (TypeError, ValueError, OverflowError, OSError):
        return 0
    if not math.isfinite(ms):
        return 0
    return ms


@dataclass(frozen=True)
class Message:
    """A single chat message."""

    role: MessageRole
    text: str
    created_at: float | None = None  # epoch milliseconds

    @property
    def timestamp_ms(self) -> float:
        """Timestamp used for ordering; missing timestamps sort as 0."""
        return to_ms(self.created_at)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding a missing timestamp."""
        d: dict[str, Any] = {"role": self.role.value, "text": self.text}
        if self.created_at is not None:
            d["created_at"] = self.created_at
        return d

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Message:
        """
        Build a Message from a loosely-typed record.

        Accepts ``createdAt`` or ``created_at`` in any shape ``to_ms``
        understands. A non-string ``text`` is stringified; a missing one is
        treated as empty.

        Raises:
            InvalidMessageError: If the role is not ``user`` or ``bot``.
        """
        raw_role = data.get("role")
        try:
            role = raw_role if isinstance(raw_role, MessageRole) else MessageRole(raw_role)
        except ValueError as e:
            raise InvalidMessageError(f"Unknown message role: {raw_role!r}") from e

        text = data.get("text")
        if text is None:
            text = ""
        elif not isinstance(text, str):
            text = str(text)

        raw_ts = data.get("createdAt")
        if raw_ts is None:
            raw_ts = data.get("created_at")
        created_at = to_ms(raw_ts) if raw_ts is not None else None

        return cls(role=role, text=text, created_at=created_at)


def sort_by_timestamp(messages: list[Message]) -> list[Message]:
    """Return messages ordered by timestamp ascending, keeping ties in input order."""
    return sorted(messages, key=lambda m: m.timestamp_ms)
