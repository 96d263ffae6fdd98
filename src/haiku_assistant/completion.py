"""Chat-completion collaborator backed by the OpenRouter API."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Protocol

import openai
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletion

from .config import RECOMMENDED_MODELS, Settings
from .models import ErrorKind

LOGGER = logging.getLogger(__name__)

MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.CONFIGURATION_MISSING: "Clé API OpenRouter non configurée",
    ErrorKind.INVALID_REQUEST: "Requête invalide",
    ErrorKind.TRANSPORT_FAILURE: (
        "Erreur de connexion: Impossible de contacter l'API OpenRouter. "
        "Vérifiez votre connexion internet."
    ),
    ErrorKind.AUTH_FAILURE: "Clé API invalide. Vérifiez votre configuration OpenRouter.",
    ErrorKind.RATE_LIMITED: "Limite de requêtes atteinte. Veuillez patienter avant de réessayer.",
    ErrorKind.SERVER_FAILURE: "Erreur serveur OpenRouter. Veuillez réessayer plus tard.",
    ErrorKind.API_ERROR: "Erreur inconnue",
    ErrorKind.EMPTY_RESPONSE: "Réponse vide de l'API",
    ErrorKind.MALFORMED_RESPONSE: "Format de haïku invalide",
    ErrorKind.STRUCTURE_INVALID: "Structure de haïku invalide",
}

TIMEOUT_MESSAGE = "Délai d'attente dépassé: L'API OpenRouter met trop de temps à répondre."
FORBIDDEN_MESSAGE = "Accès refusé. Vérifiez les permissions de votre clé API."

# Families worth offering for creative writing.
CREATIVE_MODEL_FAMILIES = ("claude", "gpt", "gemini", "llama", "mistral")


class CompletionError(Exception):
    """A completion attempt that produced no usable text."""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None, status: Optional[int] = None):
        self.kind = kind
        self.message = message or MESSAGES[kind]
        self.status = status
        super().__init__(self.message)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable


class CompletionClient(Protocol):
    async def complete(self, system: str, user: str) -> str:
        ...


def classify(exc: openai.APIError) -> CompletionError:
    """Translate an ``openai`` exception into a :class:`CompletionError`."""

    if isinstance(exc, openai.APITimeoutError):
        return CompletionError(ErrorKind.TRANSPORT_FAILURE, TIMEOUT_MESSAGE)
    if isinstance(exc, openai.APIConnectionError):
        return CompletionError(ErrorKind.TRANSPORT_FAILURE)
    if isinstance(exc, openai.APIStatusError):
        status = exc.status_code
        if status == 401:
            kind, message = ErrorKind.AUTH_FAILURE, MESSAGES[ErrorKind.AUTH_FAILURE]
        elif status == 403:
            kind, message = ErrorKind.AUTH_FAILURE, FORBIDDEN_MESSAGE
        elif status == 429:
            kind, message = ErrorKind.RATE_LIMITED, MESSAGES[ErrorKind.RATE_LIMITED]
        elif status >= 500:
            kind, message = ErrorKind.SERVER_FAILURE, MESSAGES[ErrorKind.SERVER_FAILURE]
        else:
            kind = ErrorKind.API_ERROR
            message = f"Erreur API: {exc.message}" if exc.message else MESSAGES[kind]
        return CompletionError(kind, f"{message} (Code: {status})", status=status)
    return CompletionError(ErrorKind.API_ERROR, f"Erreur API: {exc}")


class OpenRouterClient:
    """Send one chat completion per call through the OpenAI-compatible API."""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self._client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            # retries are owned by the generator's budget
            max_retries=0,
            default_headers={
                "HTTP-Referer": settings.app_url,
                "X-Title": settings.app_title,
            },
        )

    async def complete(self, system: str, user: str) -> str:
        LOGGER.debug("Requesting completion from %s", self.settings.model)
        try:
            response = await self._client.chat.completions.create(
                model=self.settings.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": user},
                ],
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                top_p=0.9,
                frequency_penalty=0.5,
                presence_penalty=0.3,
                stream=False,
            )
        except openai.APIError as exc:
            error = classify(exc)
            LOGGER.debug("Completion failed: %r", exc)
            raise error from exc

        if not isinstance(response, ChatCompletion):
            # a 200 with a non-JSON body (proxy or captive portal page)
            LOGGER.debug("Unexpected completion payload: %r", response)
            raise CompletionError(ErrorKind.MALFORMED_RESPONSE)
        message = response.choices[0].message if response.choices else None
        content = message.content if message is not None else None
        if not content or not content.strip():
            raise CompletionError(ErrorKind.EMPTY_RESPONSE)
        return content

    async def list_models(self) -> List[str]:
        """Ids of the provider's models that suit creative generation."""

        try:
            page = await self._client.models.list()
        except openai.APIError as exc:
            raise classify(exc) from exc
        return [
            model.id
            for model in page.data
            if any(family in model.id for family in CREATIVE_MODEL_FAMILIES)
        ]


async def available_models(client: OpenRouterClient) -> List[str]:
    """Provider models, or the recommended list when the provider cannot be reached."""

    try:
        models = await client.list_models()
    except CompletionError as exc:
        LOGGER.warning("Falling back to recommended models: %s", exc.message)
        return list(RECOMMENDED_MODELS)
    return models or list(RECOMMENDED_MODELS)
