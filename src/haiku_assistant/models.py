"""Dataclasses shared by the generator, the history store and the CLI."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple

from .themes import find_theme

Counts = Tuple[int, int, int]

CUSTOM_THEME = "custom"
MAX_KEYWORDS = 5
CUSTOM_THEME_MIN_LENGTH = 3
CUSTOM_THEME_MAX_LENGTH = 200


@dataclass(frozen=True)
class HaikuCandidate:
    line1: str
    line2: str
    line3: str

    @property
    def lines(self) -> Tuple[str, str, str]:
        return (self.line1, self.line2, self.line3)

    @classmethod
    def from_lines(cls, lines: List[str]) -> "HaikuCandidate":
        if len(lines) != 3:
            raise ValueError(f"A haiku has exactly three lines, got {len(lines)}")
        return cls(*lines)


@dataclass
class GenerationRequest:
    """Theme and keywords the haiku should be written around."""

    theme: str
    keywords: List[str]
    custom_theme: Optional[str] = None

    @property
    def is_custom(self) -> bool:
        return self.theme == CUSTOM_THEME

    @property
    def resolved_theme(self) -> str:
        """Theme text used in prompts; custom text replaces the marker."""

        if self.is_custom and self.custom_theme:
            return self.custom_theme.strip()
        return self.theme

    def validate(self) -> List[str]:
        """Return the constraints this request violates (empty when valid)."""

        problems: List[str] = []
        keywords = [keyword for keyword in self.keywords if keyword.strip()]
        if not keywords:
            problems.append("Au moins un mot-clé est requis")
        elif len(keywords) > MAX_KEYWORDS:
            problems.append(f"Maximum {MAX_KEYWORDS} mots-clés autorisés")

        if self.is_custom:
            text = (self.custom_theme or "").strip()
            if not text:
                problems.append("Le thème personnalisé ne peut pas être vide")
            elif len(text) < CUSTOM_THEME_MIN_LENGTH:
                problems.append(
                    f"Le thème doit contenir au moins {CUSTOM_THEME_MIN_LENGTH} caractères"
                )
            elif len(text) > CUSTOM_THEME_MAX_LENGTH:
                problems.append(
                    f"Le thème ne peut pas dépasser {CUSTOM_THEME_MAX_LENGTH} caractères"
                )
        elif not self.theme.strip():
            problems.append("Un thème est requis")
        elif find_theme(self.theme) is None:
            problems.append(f"Thème inconnu: {self.theme}")
        return problems


class ErrorKind(Enum):
    """Failure classes a generation can end with."""

    CONFIGURATION_MISSING = ("configuration_missing", False)
    INVALID_REQUEST = ("invalid_request", False)
    TRANSPORT_FAILURE = ("transport_failure", True)
    AUTH_FAILURE = ("auth_failure", False)
    RATE_LIMITED = ("rate_limited", False)
    SERVER_FAILURE = ("server_failure", True)
    API_ERROR = ("api_error", False)
    EMPTY_RESPONSE = ("empty_response", True)
    MALFORMED_RESPONSE = ("malformed_response", True)
    STRUCTURE_INVALID = ("structure_invalid", True)

    def __init__(self, label: str, retryable: bool):
        self.label = label
        self.retryable = retryable


@dataclass
class GenerationOutcome:
    candidate: Optional[HaikuCandidate]
    counts: Counts
    accepted: bool
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> "GenerationOutcome":
        return cls(candidate=None, counts=(0, 0, 0), accepted=False, error=message, error_kind=kind)


@dataclass
class HaikuRecord:
    """A haiku kept in the history store."""

    id: str
    lines: Tuple[str, str, str]
    theme: str
    keywords: List[str] = field(default_factory=list)
    syllables: Counts = (0, 0, 0)
    created_at: datetime = field(default_factory=datetime.now)

    def as_text(self) -> str:
        """Plain text export: the three lines followed by the theme."""

        return "\n".join(self.lines) + f"\n\n— {self.theme}"
