"""Instructions sent to the completion provider."""
from __future__ import annotations

from typing import List, Optional

from .models import GenerationRequest, HaikuCandidate
from .validation import ValidationResult, format_counts

SYSTEM_PROMPT = """Tu es un maître poète spécialisé dans la création de haïkus traditionnels japonais.

Règles strictes à respecter:
1. Structure exacte: 5 syllabes (ligne 1), 7 syllabes (ligne 2), 5 syllabes (ligne 3)
2. Incorporer les mots-clés fournis de manière naturelle et poétique
3. Respecter le thème choisi avec subtilité
4. Capturer un moment précis, une émotion ou une observation
5. Utiliser des images concrètes et sensorielles
6. Éviter les rimes forcées
7. Créer une césure ou un tournant surprenant entre les lignes
8. Répondre UNIQUEMENT avec les 3 lignes du haïku, séparées par des retours à la ligne
9. Pas d'explication, pas de commentaire, juste le haïku

Le haïku doit être en français et respecter parfaitement la structure 5-7-5 syllabes."""

USER_PROMPT_TEMPLATE = """Crée un haïku sur le thème "{theme}" en incorporant ces mots-clés: {keywords}

Rappel de la structure requise:
- Ligne 1: exactement 5 syllabes
- Ligne 2: exactement 7 syllabes
- Ligne 3: exactement 5 syllabes
{feedback}
Réponds uniquement avec le haïku, rien d'autre."""

FEEDBACK_TEMPLATE = """
Ta tentative précédente comptait {counts} syllabes au lieu de 5-7-5:
{previous}
Corrections nécessaires:
{errors}
"""


def system_prompt() -> str:
    return SYSTEM_PROMPT


def user_prompt(request: GenerationRequest, feedback: Optional["AttemptFeedback"] = None) -> str:
    keywords = ", ".join(keyword.strip() for keyword in request.keywords if keyword.strip())
    return USER_PROMPT_TEMPLATE.format(
        theme=request.resolved_theme,
        keywords=keywords,
        feedback=feedback.render() if feedback else "",
    )


class AttemptFeedback:
    """What went wrong with the previous candidate, to steer the next attempt."""

    def __init__(self, candidate: HaikuCandidate, result: ValidationResult):
        self.candidate = candidate
        self.result = result

    def render(self) -> str:
        previous = "\n".join(f"> {line}" for line in self.candidate.lines)
        errors: List[str] = [f"- {error}" for error in self.result.errors]
        return FEEDBACK_TEMPLATE.format(
            counts=format_counts(self.result.counts),
            previous=previous,
            errors="\n".join(errors),
        )
