"""
Base LLM service interface.

Defines the common interface for text generation backends, so the marketplace
assistant can run against Gemini in production and a scripted fake in tests.
"""

from abc import ABC, abstractmethod


class BaseLLMService(ABC):
    """
    Abstract base class for LLM services.

    Implementations take a single prompt and return the model's text reply.
    """

    @abstractmethod
    def generate(self, prompt: str, json_mode: bool = False) -> str:
        """
        Generate a reply for a single prompt.

        Args:
            prompt: Full prompt text
            json_mode: Ask the backend to answer with JSON only

        Returns:
            Reply text (may be empty)

        Raises:
            Exception: Backend errors are propagated to the caller
        """
        pass

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Get the name of the LLM provider."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Get the name of the model being used."""
        pass
