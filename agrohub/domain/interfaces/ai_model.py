"""Interface for AI Language Models (LLMs).

Defines the contract for sending a prompt with a response schema to a
generative model provider (e.g., Gemini, OpenAI GPT, Groq Llama).
"""

import abc

# Import relevant domain models
from ..models.ai import ResponseSchema, StructuredAIResponse
from ..models.common import PromptText, ProviderName


class AIModel(abc.ABC):
    """Abstract Base Class for AI language model interactions."""

    @property
    @abc.abstractmethod
    def provider_name(self) -> ProviderName:
        """Short provider identifier used in logs and events."""
        pass

    @abc.abstractmethod
    async def generate_structured(
        self, prompt: PromptText, schema: ResponseSchema
    ) -> StructuredAIResponse:
        """Sends a single prompt and asks for JSON matching `schema`.

        Args:
            prompt: The natural-language prompt.
            schema: The declared output schema.

        Returns:
            A StructuredAIResponse whose `text` is the raw JSON string, or
            None when the provider returned no content.

        Raises:
            Exception: Provider SDK errors are propagated unchanged so the
                retry executor can classify them.
        """
        pass
