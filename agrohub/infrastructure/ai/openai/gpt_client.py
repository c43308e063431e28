"""Concrete implementation of the AIModel interface using the OpenAI SDK.

Hides the specifics of the OpenAI client library and translates requests/
responses between the domain model and the Chat Completions API. Also serves
Gemini through Google's OpenAI-compatible endpoint by pointing `base_url` at
it, which is how the default provider is reached.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

from openai import OpenAI

# Domain Layer Imports
from agrohub.domain.interfaces.ai_model import AIModel
from agrohub.domain.models.ai import ResponseSchema, StructuredAIResponse
from agrohub.domain.models.common import PromptText, ProviderName, TokenUsage
from agrohub.domain.models.errors import CredentialMissingError, UpstreamError

logger = logging.getLogger(__name__)

SYSTEM_INSTRUCTION = "You are an agricultural market assistant. Reply with JSON only."


class GptClient(AIModel):
    """OpenAI-compatible implementation of the AIModel interface."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        provider: str = "openai",
        timeout_s: Optional[float] = None,
    ):
        """Initializes the client.

        The SDK client is created on first use, so a missing key surfaces as a
        failed call (absorbed by the resolvers) rather than a start-up error.

        Args:
            api_key: Provider API key.
            model: Model identifier to request.
            base_url: Alternative OpenAI-compatible endpoint.
            provider: Name reported in logs and events.
            timeout_s: Optional per-request timeout.
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.base_url = base_url
        self.timeout_s = timeout_s
        self._provider = ProviderName(provider)
        self._client: Optional[OpenAI] = None
        logger.info(f"GptClient initialized for provider '{provider}', model: {self.model}")

    @property
    def provider_name(self) -> ProviderName:
        return self._provider

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            if not self.api_key:
                raise CredentialMissingError(f"No API key configured for provider '{self._provider}'")
            kwargs: Dict[str, Any] = {"api_key": self.api_key}
            if self.base_url:
                kwargs["base_url"] = self.base_url
            if self.timeout_s is not None:
                kwargs["timeout"] = self.timeout_s
            self._client = OpenAI(**kwargs)
        return self._client

    def _build_messages(self, prompt: PromptText) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": SYSTEM_INSTRUCTION},
            {"role": "user", "content": prompt},
        ]

    def _build_response_format(self, schema: ResponseSchema) -> Dict[str, Any]:
        return {
            "type": "json_schema",
            "json_schema": {
                "name": schema.name,
                "schema": schema.to_json_schema(),
                "strict": True,
            },
        }

    def _parse_openai_response(self, response: Any) -> StructuredAIResponse:
        """Parses the response object from an OpenAI API call."""
        try:
            choice = response.choices[0]
            content = choice.message.content

            token_usage = None
            if response.usage:
                token_usage = TokenUsage(
                    prompt_tokens=response.usage.prompt_tokens,
                    completion_tokens=response.usage.completion_tokens,
                    total_tokens=response.usage.total_tokens
                )

            return StructuredAIResponse(
                text=content or None,
                token_usage=token_usage,
                model_name=getattr(response, "model", None),
            )
        except (AttributeError, IndexError, KeyError, TypeError) as e:
            logger.error(f"Failed to parse {self._provider} response structure: {e}")
            logger.debug(f"Raw response object: {response}")
            raise UpstreamError(f"Invalid response structure from {self._provider}: {e}") from e

    async def generate_structured(self, prompt: PromptText, schema: ResponseSchema) -> StructuredAIResponse:
        """Sends the prompt and requests JSON conforming to `schema`."""
        logger.debug(f"Sending '{schema.name}' prompt to {self._provider} model: {self.model}")
        start_time = time.perf_counter()
        # Use asyncio.to_thread for the synchronous SDK call
        response = await asyncio.to_thread(
            self.client.chat.completions.create,
            model=self.model,
            messages=self._build_messages(prompt),
            response_format=self._build_response_format(schema),
        )
        latency_ms = (time.perf_counter() - start_time) * 1000

        structured_response = self._parse_openai_response(response)
        structured_response.latency_ms = latency_ms
        logger.debug(f"Received response from {self._provider} in {latency_ms:.2f}ms. Usage: {structured_response.token_usage}")
        return structured_response
