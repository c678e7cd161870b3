"""Dark/light theme preference, dark unless the user chose otherwise."""

from __future__ import annotations

import logging

from conv_analytics.preferences.store import KeyValueStore

logger = logging.getLogger(__name__)

THEME_KEY = "theme"
DARK = "dark"
LIGHT = "light"


class ThemePreference:
    """Persisted theme choice. Storage failures are logged, never raised."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store
        self.dark = True

        stored: str | None = None
        try:
            stored = store.get(THEME_KEY)
        except Exception:
            logger.warning("Failed to read theme preference", exc_info=True)

        if stored in (DARK, LIGHT):
            self.dark = stored == DARK
        else:
            self._persist()

    @property
    def theme(self) -> str:
        return DARK if self.dark else LIGHT

    def toggle(self) -> str:
        """Flip between dark and light and persist the choice."""
        self.dark = not self.dark
        self._persist()
        return self.theme

    def _persist(self) -> None:
        try:
            self._store.set(THEME_KEY, self.theme)
        except Exception:
            logger.warning("Failed to persist theme preference", exc_info=True)
