"""
Factory for creating LLM service instances.

Picks the backend named by llm.provider in the configuration.
"""

from typing import Optional

from ..config import ConfigManager, get_config_manager
from ..utils import get_logger
from .base_llm_service import BaseLLMService

logger = get_logger("llm_factory")


class LLMProvider:
    """Supported LLM providers."""
    GEMINI = "gemini"


def create_llm_service(
    provider: Optional[str] = None,
    model_name: Optional[str] = None,
    api_key: Optional[str] = None,
    config: Optional[ConfigManager] = None,
    **kwargs
) -> BaseLLMService:
    """
    Factory function to create an LLM service instance.

    Arguments left as None are taken from the configuration.

    Args:
        provider: LLM provider to use ("gemini")
        model_name: Model name (provider-specific)
        api_key: API key for the provider
        config: Configuration manager (defaults to the global one)
        **kwargs: Additional provider-specific arguments

    Returns:
        BaseLLMService instance

    Raises:
        ValueError: If the provider is not supported or no API key is configured

    Examples:
        service = create_llm_service()

        service = create_llm_service(
            provider="gemini",
            model_name="gemini-2.5-flash",
            api_key="your-api-key",
        )
    """
    config = config or get_config_manager()
    provider = (provider or config.get("llm.provider", LLMProvider.GEMINI)).lower()

    logger.info(f"Creating LLM service with provider: {provider}")

    if provider == LLMProvider.GEMINI:
        from .gemini_llm_service import GeminiLLMService

        if model_name is None:
            model_name = config.get("llm.gemini.model", "gemini-2.5-flash")
        if api_key is None:
            api_key = config.get_gemini_api_key()

        logger.info(f"Initializing Gemini service with model: {model_name}")
        return GeminiLLMService(
            model_name=model_name,
            api_key=api_key,
            temperature=kwargs.get("temperature", config.get("llm.gemini.temperature", 0.4)),
            api_key_env=config.get("llm.gemini.api_key_env", "GOOGLE_API_KEY"),
        )

    raise ValueError(
        f"Unsupported LLM provider: {provider}. "
        f"Supported providers: {LLMProvider.GEMINI}"
    )
