"""Generate haiku through the completion provider and retry until they scan."""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from .completion import MESSAGES, CompletionClient, CompletionError, OpenRouterClient
from .config import Settings
from .models import ErrorKind, GenerationOutcome, GenerationRequest, HaikuCandidate
from .prompts import AttemptFeedback, system_prompt, user_prompt
from .validation import format_counts, validate

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_RETRIES = 2

CONNECTION_TEST_REQUEST = GenerationRequest(theme="Nature", keywords=["test"])


def parse_candidate(text: str) -> HaikuCandidate:
    """Take the first three non-empty lines of ``text`` as a candidate."""

    lines = [line.strip() for line in text.strip().splitlines() if line.strip()]
    if len(lines) < 3:
        raise CompletionError(ErrorKind.MALFORMED_RESPONSE)
    return HaikuCandidate.from_lines(lines[:3])


class HaikuGenerator:
    """Drive one request through at most ``max_retries + 1`` completion calls."""

    def __init__(self, settings: Settings, client: Optional[CompletionClient] = None):
        self.settings = settings
        if client is None and settings.configured:
            client = OpenRouterClient(settings)
        self.client = client

    async def generate(
        self, request: GenerationRequest, max_retries: int = DEFAULT_MAX_RETRIES
    ) -> GenerationOutcome:
        if not self.settings.configured or self.client is None:
            return GenerationOutcome.failure(
                ErrorKind.CONFIGURATION_MISSING, MESSAGES[ErrorKind.CONFIGURATION_MISSING]
            )

        problems = request.validate()
        if problems:
            return GenerationOutcome.failure(ErrorKind.INVALID_REQUEST, "; ".join(problems))

        remaining = max(0, max_retries)
        feedback: Optional[AttemptFeedback] = None
        system = system_prompt()
        while True:
            try:
                text = await self.client.complete(system, user_prompt(request, feedback))
                candidate = parse_candidate(text)
            except CompletionError as exc:
                if exc.retryable and remaining > 0:
                    remaining -= 1
                    LOGGER.warning("%s, retrying (%d left)", exc.message, remaining)
                    continue
                LOGGER.warning("Generation failed: %s", exc.message)
                return GenerationOutcome.failure(exc.kind, exc.message)
            except Exception as exc:
                # cancellation is a BaseException and still propagates
                LOGGER.exception("Completion client raised unexpectedly")
                return GenerationOutcome.failure(ErrorKind.API_ERROR, f"Erreur API: {exc}")

            result = validate(candidate)
            if result.valid:
                return GenerationOutcome(candidate=candidate, counts=result.counts, accepted=True)

            if remaining > 0:
                remaining -= 1
                LOGGER.warning(
                    "Invalid haiku structure %s, retrying (%d left): %s",
                    format_counts(result.counts),
                    remaining,
                    "; ".join(result.errors),
                )
                feedback = AttemptFeedback(candidate, result)
                continue

            message = "{}: {}".format(
                MESSAGES[ErrorKind.STRUCTURE_INVALID], "; ".join(result.errors)
            )
            return GenerationOutcome(
                candidate=candidate,
                counts=result.counts,
                accepted=False,
                error=message,
                error_kind=ErrorKind.STRUCTURE_INVALID,
            )

    async def test_connection(self) -> Tuple[bool, Optional[str]]:
        """Try a single generation; report whether the provider answered."""

        outcome = await self.generate(CONNECTION_TEST_REQUEST, max_retries=0)
        if outcome.error_kind is ErrorKind.STRUCTURE_INVALID:
            # the provider answered; the verse just did not scan
            return True, None
        return outcome.accepted, outcome.error
