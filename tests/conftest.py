from __future__ import annotations

from datetime import datetime, timedelta

import _bootstrap  # noqa: F401
import pytest

from haiku_assistant.database import HistoryDatabase


@pytest.fixture()
def history_db(tmp_path):
    db_path = tmp_path / "history.db"
    db = HistoryDatabase(db_path)
    db.initialize()

    start = datetime(2024, 4, 1, 8, 0)
    data = [
        {
            "lines": ("Cerisier en fleur", "Les pétales tombent en danse", "Printemps éternel"),
            "theme": "Nature",
            "keywords": ["fleur", "printemps"],
            "syllables": (5, 7, 5),
        },
        {
            "lines": ("Néons dans la nuit", "Reflets sur l'asphalte mouillé", "Ville qui respire"),
            "theme": "Urbain",
            "keywords": ["néon", "pluie"],
            "syllables": (5, 7, 5),
        },
        {
            "lines": ("Lac sous la brume", "Reflet des monts endormis", "Silence d'aurore"),
            "theme": "Un matin au bord du lac",
            "keywords": ["brume", "Fleur"],
            "syllables": (4, 7, 5),
        },
    ]

    for offset, details in enumerate(data):
        db.add(created_at=start + timedelta(minutes=offset), **details)

    try:
        yield db
    finally:
        db.close()
