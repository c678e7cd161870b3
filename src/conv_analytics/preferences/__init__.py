"""Key-value persistence and user preferences."""

from conv_analytics.preferences.store import (
    InMemoryKeyValueStore,
    JSONFileKeyValueStore,
    KeyValueStore,
)
from conv_analytics.preferences.theme import ThemePreference

__all__ = [
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "KeyValueStore",
    "ThemePreference",
]
