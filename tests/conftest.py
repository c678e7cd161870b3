"""
Pytest configuration and shared fixtures.

Provides message factories, stores and services for unit and integration
testing of the conv_analytics package.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from conv_analytics.analytics.service import AnalyticsService
from conv_analytics.conversation.models import Message
from conv_analytics.conversation.source import InMemoryMessageSource
from conv_analytics.conversation.storage import ConversationStore
from conv_analytics.preferences.store import InMemoryKeyValueStore, JSONFileKeyValueStore
from tests.utils.factories import MessageFactory

# ============================================================================
# Message Fixtures
# ============================================================================


@pytest.fixture
def support_conversation() -> list[Message]:
    """A short support chat with timestamps one to three seconds apart."""
    return [
        MessageFactory.user("My headphones arrived damaged and the left cup is cracked", at=1_000),
        MessageFactory.bot("Sorry about that! I can arrange a replacement for the damaged headphones.", at=3_000),
        MessageFactory.user("Thanks, that would be great", at=10_000),
        MessageFactory.bot("Done. The replacement ships tomorrow.", at=11_000),
    ]


# ============================================================================
# Service and Storage Fixtures
# ============================================================================


@pytest.fixture
def service() -> AnalyticsService:
    """Analytics service with default tunables."""
    return AnalyticsService(keyword_limit=10, tokens_per_word=1.33)


@pytest.fixture
def message_source() -> InMemoryMessageSource:
    """Empty in-memory message source."""
    return InMemoryMessageSource()


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    """Empty in-memory key-value store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def json_kv_store(tmp_path: Path) -> JSONFileKeyValueStore:
    """Key-value store backed by a temp file."""
    return JSONFileKeyValueStore(tmp_path / "prefs" / "preferences.json")


@pytest.fixture
def conversation_store(tmp_path: Path) -> ConversationStore:
    """Conversation store in a temp directory."""
    return ConversationStore(storage_dir=tmp_path / "conversations")
