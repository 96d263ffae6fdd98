"""Pre-written haiku used when the completion provider is unavailable."""
from __future__ import annotations

import random
from typing import Dict, List, Optional, Tuple

from .models import GenerationRequest, HaikuCandidate
from .themes import find_theme

DEMO_HAIKUS: Dict[str, List[Tuple[str, str, str]]] = {
    "nature": [
        ("Cerisier en fleur", "Les pétales tombent en danse", "Printemps éternel"),
        ("Vent dans les bambous", "Murmure des temps anciens", "Paix retrouvée"),
        ("Lac sous la brume", "Reflet des monts endormis", "Silence d'aurore"),
        ("Souffle du vent doux", "Caresse les fleurs des champs", "Nature en éveil"),
        ("Feuille qui s'envole", "Danse avec le vent d'automne", "Liberté pure"),
    ],
    "emotions": [
        ("Larme de joie", "Sur la joue de l'enfant heureux", "Bonheur simple"),
        ("Cœur qui s'envole", "Vers les étoiles du soir", "Amour infini"),
        ("Mélancolie", "Dans le café qui refroidit", "Solitude douce"),
    ],
    "urban": [
        ("Néons dans la nuit", "Reflets sur l'asphalte mouillé", "Ville qui respire"),
        ("Métro du matin", "Visages anonymes pressés", "Humanité vive"),
        ("Gratte-ciel debout", "Touchent les nuages gris", "Rêves verticaux"),
    ],
    "seasons": [
        ("Feuilles d'automne", "Dansent sur le vent frisquet", "Temps qui s'enfuit"),
        ("Neige silencieuse", "Couvre le monde endormi", "Hiver cristallin"),
        ("Bourgeon timide", "Perce la terre réchauffée", "Vie qui renaît"),
    ],
}

DEFAULT_DEMO_THEME = "nature"


def demo_haiku(request: GenerationRequest, rng: Optional[random.Random] = None) -> HaikuCandidate:
    """Pick a pre-written haiku for the request's theme (Nature otherwise)."""

    rng = rng or random.Random()
    theme = find_theme(request.theme)
    options = DEMO_HAIKUS.get(theme.id if theme else "", DEMO_HAIKUS[DEFAULT_DEMO_THEME])
    return HaikuCandidate(*rng.choice(options))
