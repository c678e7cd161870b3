"""Tests for key-value stores, theme preference and conversation selection."""

import json

import pytest

from conv_analytics.conversation.selection import LAST_CONVERSATION_KEY, ConversationSelection
from conv_analytics.preferences.store import InMemoryKeyValueStore, JSONFileKeyValueStore
from conv_analytics.preferences.theme import THEME_KEY, ThemePreference


class FailingStore:
    """Key-value store whose every operation fails, like disabled browser storage."""

    def get(self, key):
        raise OSError("storage unavailable")

    def set(self, key, value):
        raise OSError("storage unavailable")

    def remove(self, key):
        raise OSError("storage unavailable")


class TestInMemoryKeyValueStore:
    """Tests for InMemoryKeyValueStore."""

    def test_get_set_remove(self, kv_store):
        assert kv_store.get("k") is None
        kv_store.set("k", "v")
        assert kv_store.get("k") == "v"
        kv_store.remove("k")
        assert kv_store.get("k") is None

    def test_remove_missing_key(self, kv_store):
        kv_store.remove("nope")

    def test_initial_values_copied(self):
        initial = {"a": "1"}
        store = InMemoryKeyValueStore(initial)
        store.set("a", "2")
        assert initial == {"a": "1"}


class TestJSONFileKeyValueStore:
    """Tests for JSONFileKeyValueStore."""

    def test_missing_file_reads_empty(self, json_kv_store):
        assert json_kv_store.get("k") is None

    def test_persists_across_instances(self, json_kv_store):
        json_kv_store.set("theme", "light")
        reopened = JSONFileKeyValueStore(json_kv_store.path)
        assert reopened.get("theme") == "light"
        assert json.loads(json_kv_store.path.read_text()) == {"theme": "light"}

    def test_remove(self, json_kv_store):
        json_kv_store.set("a", "1")
        json_kv_store.set("b", "2")
        json_kv_store.remove("a")
        assert json_kv_store.get("a") is None
        assert json_kv_store.get("b") == "2"

    def test_corrupt_file_reads_empty(self, json_kv_store):
        json_kv_store.path.parent.mkdir(parents=True, exist_ok=True)
        json_kv_store.path.write_text("{broken")
        assert json_kv_store.get("k") is None
        json_kv_store.set("k", "v")
        assert json_kv_store.get("k") == "v"

    def test_non_object_file_reads_empty(self, json_kv_store):
        json_kv_store.path.parent.mkdir(parents=True, exist_ok=True)
        json_kv_store.path.write_text("[1, 2, 3]")
        assert json_kv_store.get("0") is None

    def test_invalid_utf8_reads_empty(self, json_kv_store):
        json_kv_store.path.parent.mkdir(parents=True, exist_ok=True)
        json_kv_store.path.write_bytes(b'{"theme": "\xff\xfe"}')
        assert json_kv_store.get("theme") is None
        assert ThemePreference(json_kv_store).dark

    def test_no_temp_files_left_behind(self, json_kv_store):
        json_kv_store.set("k", "v")
        leftovers = [p.name for p in json_kv_store.path.parent.iterdir()]
        assert leftovers == [json_kv_store.path.name]


class TestThemePreference:
    """Tests for ThemePreference."""

    def test_defaults_to_dark_and_persists(self, kv_store):
        theme = ThemePreference(kv_store)
        assert theme.dark
        assert kv_store.get(THEME_KEY) == "dark"

    def test_honors_stored_light(self):
        theme = ThemePreference(InMemoryKeyValueStore({THEME_KEY: "light"}))
        assert not theme.dark
        assert theme.theme == "light"

    def test_unknown_value_resets_to_dark(self):
        store = InMemoryKeyValueStore({THEME_KEY: "sepia"})
        theme = ThemePreference(store)
        assert theme.dark
        assert store.get(THEME_KEY) == "dark"

    def test_toggle_persists(self, kv_store):
        theme = ThemePreference(kv_store)
        assert theme.toggle() == "light"
        assert kv_store.get(THEME_KEY) == "light"
        assert theme.toggle() == "dark"
        assert kv_store.get(THEME_KEY) == "dark"

    def test_storage_failures_are_ignored(self):
        theme = ThemePreference(FailingStore())
        assert theme.dark
        assert theme.toggle() == "light"


class TestConversationSelection:
    """Tests for ConversationSelection."""

    def test_restores_last_conversation(self):
        store = InMemoryKeyValueStore({LAST_CONVERSATION_KEY: "abc"})
        assert ConversationSelection(store).current == "abc"

    def test_nothing_stored(self, kv_store):
        assert ConversationSelection(kv_store).current is None

    def test_select_persists(self, kv_store):
        selection = ConversationSelection(kv_store)
        selection.select("abc")
        assert selection.current == "abc"
        assert kv_store.get(LAST_CONVERSATION_KEY) == "abc"

    def test_clear_selection_removes_key(self, kv_store):
        selection = ConversationSelection(kv_store)
        selection.select("abc")
        selection.select(None)
        assert selection.current is None
        assert kv_store.get(LAST_CONVERSATION_KEY) is None

    def test_listen_receives_current_and_changes(self, kv_store):
        selection = ConversationSelection(kv_store)
        seen = []
        sub = selection.listen(seen.append)
        selection.select("one")
        selection.select("two")
        sub.unsubscribe()
        selection.select("three")
        assert seen == [None, "one", "two"]

    def test_failing_listener_does_not_block_others(self, kv_store):
        selection = ConversationSelection(kv_store)

        def broken(_value):
            raise RuntimeError("boom")

        seen = []
        selection.listen(broken)
        selection.listen(seen.append)
        selection.select("abc")
        assert seen == [None, "abc"]

    def test_storage_failures_are_ignored(self):
        selection = ConversationSelection(FailingStore())
        assert selection.current is None
        selection.select("abc")
        assert selection.current == "abc"


@pytest.mark.parametrize("value", ["dark", "light"])
def test_theme_round_trip_through_file(tmp_path, value):
    """A theme written by one session is read back by the next."""
    path = tmp_path / "preferences.json"
    theme = ThemePreference(JSONFileKeyValueStore(path))
    if value == "light":
        theme.toggle()
    assert ThemePreference(JSONFileKeyValueStore(path)).theme == value
