"""Builds the configured AIModel implementation."""

import logging
from typing import Optional

from agrohub.domain.interfaces.ai_model import AIModel
from agrohub.infrastructure.ai.groq.groq_client import GroqClient
from agrohub.infrastructure.ai.openai.gpt_client import GptClient

logger = logging.getLogger(__name__)

PROVIDER_GEMINI = "gemini"
PROVIDER_OPENAI = "openai"
PROVIDER_GROQ = "groq"
SUPPORTED_PROVIDERS = (PROVIDER_GEMINI, PROVIDER_OPENAI, PROVIDER_GROQ)

GEMINI_OPENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
GEMINI_DEFAULT_MODEL = "gemini-3-flash-preview"


def create_ai_model(
    provider: str,
    api_key: Optional[str],
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    timeout_s: Optional[float] = None,
) -> AIModel:
    """Returns a client for `provider`.

    Raises:
        ValueError: If the provider is unknown.
    """
    provider = provider.lower()
    if provider == PROVIDER_GEMINI:
        return GptClient(
            api_key=api_key,
            model=model or GEMINI_DEFAULT_MODEL,
            base_url=base_url or GEMINI_OPENAI_BASE_URL,
            provider=PROVIDER_GEMINI,
            timeout_s=timeout_s,
        )
    if provider == PROVIDER_OPENAI:
        return GptClient(api_key=api_key, model=model, base_url=base_url, provider=PROVIDER_OPENAI, timeout_s=timeout_s)
    if provider == PROVIDER_GROQ:
        if base_url:
            logger.warning("base_url is ignored for the groq provider.")
        return GroqClient(api_key=api_key, model=model, timeout_s=timeout_s)
    raise ValueError(f"Unknown AI provider '{provider}'. Expected one of {SUPPORTED_PROVIDERS}")
