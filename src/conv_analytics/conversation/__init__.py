"""Chat messages, message sources and conversation storage."""

from conv_analytics.conversation.models import (
    ConvAnalyticsError,
    InvalidMessageError,
    Message,
    MessageRole,
)
from conv_analytics.conversation.selection import ConversationSelection
from conv_analytics.conversation.source import (
    InMemoryMessageSource,
    MessageSource,
    Subscription,
)
from conv_analytics.conversation.storage import ConversationNotFoundError, ConversationStore

__all__ = [
    "ConvAnalyticsError",
    "ConversationNotFoundError",
    "ConversationSelection",
    "ConversationStore",
    "InMemoryMessageSource",
    "InvalidMessageError",
    "Message",
    "MessageRole",
    "MessageSource",
    "Subscription",
]
