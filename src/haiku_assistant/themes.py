"""Catalogue of suggested haiku themes."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    description: str = ""


SUGGESTED_THEMES: Tuple[Theme, ...] = (
    Theme("nature", "Nature", "Paysages, saisons, éléments naturels"),
    Theme("emotions", "Émotions", "Sentiments profonds, mélancolie, joie"),
    Theme("urban", "Urbain", "Ville, architecture, vie citadine"),
    Theme("seasons", "Saisons", "Printemps, été, automne, hiver"),
    Theme("philosophy", "Philosophique", "Réflexions sur la vie, temps qui passe"),
    Theme("technology", "Technologie", "Monde numérique, innovation"),
    Theme("cuisine", "Cuisine", "Saveurs, arômes, plats traditionnels"),
    Theme("travel", "Voyage", "Découvertes, cultures, horizons lointains"),
    Theme("art", "Art", "Créativité, beauté, expression artistique"),
    Theme("memory", "Souvenirs", "Nostalgie, enfance, moments précieux"),
)


def find_theme(label: str) -> Optional[Theme]:
    """Look up a suggested theme by id or display name, ignoring case."""

    wanted = label.strip().casefold()
    for theme in SUGGESTED_THEMES:
        if wanted in (theme.id.casefold(), theme.name.casefold()):
            return theme
    return None
