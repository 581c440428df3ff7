"""Local key-value persistence for preferences and custom commands."""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Protocol

from loguru import logger

PREFERENCES_FILE = "preferences.json"
LANGUAGE_KEY = "selectedLanguage"
COMMANDS_KEY = "customCommands"

LANGUAGE_OPTIONS: dict[str, str] = {
    "en": "English",
    "hi": "हिन्दी (Hindi)",
    "es": "Español (Spanish)",
    "fr": "Français (French)",
}
DEFAULT_LANGUAGE = "en"


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store; nothing survives the session."""

    def __init__(self, values: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(values or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def remove(self, key: str) -> None:
        self._values.pop(key, None)


class FileStore:
    """JSON object of text values on disk, rewritten on every change."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.RLock()
        self._values = self._load()

    @classmethod
    def in_home(cls, home: Path) -> FileStore:
        return cls(home / PREFERENCES_FILE)

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._save()

    def remove(self, key: str) -> None:
        with self._lock:
            if self._values.pop(key, None) is not None:
                self._save()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading preferences from {self.path}: {e}")
            return {}
        if not isinstance(loaded, dict):
            logger.error(f"Ignoring preferences file {self.path}: expected an object")
            return {}
        return {str(key): value for key, value in loaded.items() if isinstance(value, str)}

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(self._values, f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Error saving preferences to {self.path}: {e}")


def load_language(store: KeyValueStore) -> str:
    """Stored language code, reset to English when missing or unsupported."""
    stored = store.get(LANGUAGE_KEY)
    if stored in LANGUAGE_OPTIONS:
        return stored
    store.set(LANGUAGE_KEY, DEFAULT_LANGUAGE)
    return DEFAULT_LANGUAGE


def normalize_language(code: str) -> str:
    normalized = code.strip().lower()
    if normalized not in LANGUAGE_OPTIONS:
        raise ValueError(f"unsupported language: {code} (choose from {', '.join(LANGUAGE_OPTIONS)})")
    return normalized


def save_language(store: KeyValueStore, code: str) -> str:
    normalized = normalize_language(code)
    store.set(LANGUAGE_KEY, normalized)
    return normalized
