"""Concrete implementation of the AIModel interface using the Groq API.

Groq's JSON mode does not take a schema, so the declared schema is described
in the system message and the resolvers validate the parsed result.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional

from groq import Groq as GroqSDKClient

# Domain Layer Imports
from agrohub.domain.interfaces.ai_model import AIModel
from agrohub.domain.models.ai import ResponseSchema, StructuredAIResponse
from agrohub.domain.models.common import PromptText, ProviderName, TokenUsage
from agrohub.domain.models.errors import CredentialMissingError, UpstreamError

logger = logging.getLogger(__name__)


class GroqClient(AIModel):
    """Groq implementation of the AIModel interface."""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout_s: Optional[float] = None):
        """Initializes the Groq client.

        Args:
            api_key: Groq API key. Checked on first call, not here.
            model: The Groq model to use.
            timeout_s: Optional per-request timeout.
        """
        self.api_key = api_key
        self.model = model or self.DEFAULT_MODEL
        self.timeout_s = timeout_s
        self._client: Optional[GroqSDKClient] = None
        logger.info(f"GroqClient initialized for model: {self.model}")

    @property
    def provider_name(self) -> ProviderName:
        return ProviderName("groq")

    @property
    def client(self) -> GroqSDKClient:
        if self._client is None:
            if not self.api_key:
                raise CredentialMissingError("No API key configured for provider 'groq'")
            kwargs: Dict[str, Any] = {"api_key": self.api_key}
            if self.timeout_s is not None:
                kwargs["timeout"] = self.timeout_s
            self._client = GroqSDKClient(**kwargs)
        return self._client

    def _build_messages(self, prompt: PromptText, schema: ResponseSchema) -> List[Dict[str, str]]:
        schema_text = json.dumps(schema.to_json_schema())
        return [
            {
                "role": "system",
                "content": f"Reply with a single JSON object matching this JSON Schema: {schema_text}",
            },
            {"role": "user", "content": prompt},
        ]

    def _parse_groq_response(self, response: Any) -> StructuredAIResponse:
        """Parses the response object from a Groq API call."""
        try:
            choice = response.choices[0]
            content = choice.message.content

            token_usage = None
            if response.usage:
                # Map Groq's usage structure to our domain model
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
            logger.error(f"Failed to parse Groq response structure: {e}")
            logger.debug(f"Raw Groq response object: {response}")
            raise UpstreamError(f"Invalid response structure from Groq: {e}") from e

    async def generate_structured(self, prompt: PromptText, schema: ResponseSchema) -> StructuredAIResponse:
        """Sends the prompt in JSON mode to the configured Groq model."""
        logger.debug(f"Sending '{schema.name}' prompt to Groq model: {self.model}")
        start_time = time.perf_counter()
        # Use asyncio.to_thread as the official Groq SDK is synchronous
        chat_completion = await asyncio.to_thread(
            self.client.chat.completions.create,
            messages=self._build_messages(prompt, schema),
            model=self.model,
            response_format={"type": "json_object"},
        )
        latency_ms = (time.perf_counter() - start_time) * 1000

        structured_response = self._parse_groq_response(chat_completion)
        structured_response.latency_ms = latency_ms
        logger.debug(f"Received response from Groq in {latency_ms:.2f}ms. Usage: {structured_response.token_usage}")
        return structured_response
