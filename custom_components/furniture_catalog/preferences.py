"""Display preferences kept next to the item collection.

Language and dark-mode preferences live under their own singular keys in the
same key-value store as the catalog (``"ar"``/``"en"`` and ``"true"``/``"false"``).
"""

from __future__ import annotations

from .const import DARK_MODE_KEY, DEFAULT_LANGUAGE, LANG_AR, LANG_EN, LANGUAGE_KEY, LANGUAGES
from .exceptions import ValidationError
from .storage import KeyValueStore


class Preferences:
    """Typed access to the language and theme preference keys."""

    def __init__(self, kv: KeyValueStore) -> None:
        self._kv = kv

    @property
    def language(self) -> str:
        value = self._kv.get(LANGUAGE_KEY)
        return value if value in LANGUAGES else DEFAULT_LANGUAGE

    def set_language(self, language: str) -> str:
        if language not in LANGUAGES:
            raise ValidationError(f"language must be one of: {', '.join(LANGUAGES)}")
        self._kv.set(LANGUAGE_KEY, language)
        return language

    def toggle_language(self) -> str:
        return self.set_language(LANG_EN if self.language == LANG_AR else LANG_AR)

    @property
    def dark_mode(self) -> bool | None:
        """Saved theme choice, or None to follow the system preference."""

        value = self._kv.get(DARK_MODE_KEY)
        if value is None:
            return None
        return value == "true"

    def set_dark_mode(self, enabled: bool) -> None:
        self._kv.set(DARK_MODE_KEY, "true" if enabled else "false")

    def reset_dark_mode(self) -> None:
        self._kv.remove(DARK_MODE_KEY)
