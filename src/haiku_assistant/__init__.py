"""French haiku assistant: syllable counting, 5-7-5 validation and generation."""

from .generator import HaikuGenerator
from .models import ErrorKind, GenerationOutcome, GenerationRequest, HaikuCandidate
from .syllables import count_line, count_word
from .validation import ValidationResult, validate

__all__ = [
    "ErrorKind",
    "GenerationOutcome",
    "GenerationRequest",
    "HaikuCandidate",
    "HaikuGenerator",
    "ValidationResult",
    "count_line",
    "count_word",
    "validate",
]
