"""User-interface strings loaded from per-language JSON files."""

from __future__ import annotations

import json
import os
from pathlib import Path

DEFAULT_LANGUAGE = "en"


def load_translation_file(path: str | os.PathLike[str]) -> dict[str, str]:
    """Read a JSON object of strings; unreadable or invalid files give an empty dict.

    Values that are not strings become empty strings.
    """
    try:
        raw = Path(path).read_bytes()
        document = json.loads(raw)
    except (OSError, ValueError):
        return {}
    if not isinstance(document, dict):
        return {}
    return {key: value if isinstance(value, str) else "" for key, value in document.items()}


class Translation:
    """Lookup of translated texts, falling back to English and then to the key."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = Path(directory)
        self._translations: dict[str, str] = {}

    def set_translation(self, locale: str) -> None:
        """Load the texts for a BCP 47 language name such as "fr" or "pt-BR"."""
        defaults = load_translation_file(self.directory / f"{DEFAULT_LANGUAGE}.json")
        if not defaults:
            raise RuntimeError("Invalid translation file")
        name = locale.replace("_", "-")
        if name == DEFAULT_LANGUAGE:
            self._translations = defaults
            return
        translations = load_translation_file(self.directory / f"{name}.json")
        for key, value in defaults.items():
            if not translations.get(key):
                translations[key] = value
        self._translations = translations

    def get_text(self, key: str) -> str:
        return self._translations.get(key, key)