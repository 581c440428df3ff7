import json
from pathlib import Path

import pytest

from advocate.store import LANGUAGE_KEY, FileStore, MemoryStore, load_language, save_language


def test_file_store_round_trips_values(tmp_path: Path) -> None:
    path = tmp_path / "state" / "preferences.json"
    store = FileStore(path)
    store.set("selectedLanguage", "hi")

    assert json.loads(path.read_text(encoding="utf-8")) == {"selectedLanguage": "hi"}
    assert FileStore(path).get("selectedLanguage") == "hi"


def test_file_store_remove_rewrites_file(tmp_path: Path) -> None:
    store = FileStore(tmp_path / "preferences.json")
    store.set("a", "1")
    store.remove("a")
    store.remove("missing")

    assert FileStore(tmp_path / "preferences.json").get("a") is None


@pytest.mark.parametrize("content", ["{broken", "[1, 2, 3]"])
def test_unreadable_file_starts_empty(tmp_path: Path, content: str) -> None:
    path = tmp_path / "preferences.json"
    path.write_text(content, encoding="utf-8")

    assert FileStore(path).get("selectedLanguage") is None


def test_load_language_defaults_to_english_and_writes_back() -> None:
    store = MemoryStore({LANGUAGE_KEY: "de"})
    assert load_language(store) == "en"
    assert store.get(LANGUAGE_KEY) == "en"


def test_load_language_keeps_supported_code() -> None:
    assert load_language(MemoryStore({LANGUAGE_KEY: "fr"})) == "fr"


def test_save_language_validates_code() -> None:
    store = MemoryStore()
    assert save_language(store, " ES ") == "es"
    with pytest.raises(ValueError):
        save_language(store, "xx")
    assert store.get(LANGUAGE_KEY) == "es"
