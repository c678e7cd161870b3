"""Response latency aggregation."""

from __future__ import annotations

import math
from collections.abc import Sequence

from conv_analytics.conversation.models import Message, MessageRole, sort_by_timestamp


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2).

    Non-finite values round to 0.
    """
    if not math.isfinite(value):
        return 0
    return math.floor(value + 0.5)


def average_response_ms(messages: Sequence[Message]) -> int | None:
    """
    Average delay between a user message and the next bot reply.

    Messages are ordered by timestamp first (ties keep input order). Each
    user message is paired with the first bot message after it; several user
    messages in a row can pair with the same reply.

    Returns:
        Mean delay in whole milliseconds, or None when no user message is
        followed by a bot message.
    """
    items = sort_by_timestamp(list(messages))
    total = 0.0
    count = 0

    for i, message in enumerate(items[:-1]):
        if message.role is not MessageRole.USER:
            continue
        for reply in items[i + 1:]:
            if reply.role is MessageRole.BOT:
                total += reply.timestamp_ms - message.timestamp_ms
                count += 1
                break

    if count == 0:
        return None
    return round_half_up(total / count)
