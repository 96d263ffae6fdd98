from datetime import datetime, timedelta

import _bootstrap  # noqa: F401
import pytest

from haiku_assistant.database import HistoryDatabase


def test_records_round_trip(history_db):
    newest = history_db.recent(1)[0]
    loaded = history_db.get(newest.id)
    assert loaded == newest
    assert loaded.lines == ("Lac sous la brume", "Reflet des monts endormis", "Silence d'aurore")
    assert loaded.keywords == ["brume", "Fleur"]
    assert loaded.syllables == (4, 7, 5)
    assert history_db.get("missing") is None


def test_recent_is_newest_first(history_db):
    themes = [record.theme for record in history_db.recent()]
    assert themes == ["Un matin au bord du lac", "Urbain", "Nature"]
    assert len(history_db) == 3


def test_recent_keywords_and_themes_are_unique(history_db):
    history_db.add(("a", "b", "c"), "Nature", ["pluie", "vent"], (1, 1, 1), created_at=datetime(2024, 4, 2))
    assert history_db.recent_keywords() == ["pluie", "vent", "brume", "Fleur", "néon", "fleur", "printemps"]
    assert history_db.recent_keywords(limit=2) == ["pluie", "vent"]
    assert history_db.recent_themes() == ["Nature", "Un matin au bord du lac", "Urbain"]


def test_find_is_case_insensitive_substring(history_db):
    assert [r.theme for r in history_db.find_by_theme("LAC")] == ["Un matin au bord du lac"]
    assert [r.theme for r in history_db.find_by_keyword("fleur")] == ["Un matin au bord du lac", "Nature"]
    assert history_db.find_by_keyword("neige") == []


def test_remove_and_clear(history_db):
    target = history_db.recent()[1]
    assert history_db.remove(target.id)
    assert not history_db.remove(target.id)
    assert len(history_db) == 2
    history_db.clear()
    assert history_db.recent() == []
    assert history_db.recent_keywords() == []


def test_history_is_capped(tmp_path):
    db = HistoryDatabase(tmp_path / "capped.db", max_size=3)
    db.initialize()
    start = datetime(2024, 1, 1)
    for index in range(5):
        db.add(("a", "b", "c"), f"theme {index}", [f"k{index}"], (5, 7, 5), created_at=start + timedelta(days=index))
    assert [record.theme for record in db.recent()] == ["theme 4", "theme 3", "theme 2"]
    orphaned = db.conn.execute("SELECT COUNT(*) FROM keywords").fetchone()[0]
    assert orphaned == 3
    db.close()


def test_add_requires_three_lines(history_db):
    with pytest.raises(ValueError):
        history_db.add(("one", "two"), "Nature", [], (0, 0, 0))


def test_settings_store(history_db):
    assert history_db.get_setting("model") is None
    history_db.set_setting("model", "openai/gpt-4-turbo")
    history_db.set_setting("model", "anthropic/claude-3-sonnet")
    assert history_db.get_setting("model") == "anthropic/claude-3-sonnet"
    assert history_db.settings() == {"model": "anthropic/claude-3-sonnet"}
    history_db.delete_setting("model")
    assert history_db.get_setting("model") is None
