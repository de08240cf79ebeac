"""
Google Gemini backend, called through LangChain.

Two chat model instances share the same settings; the second one is built with
the "application/json" response MIME type and serves json_mode requests.
"""

import os
from typing import Any, Optional

from langchain_core.messages import HumanMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..utils import get_logger
from .base_llm_service import BaseLLMService

JSON_MIME_TYPE = "application/json"


class GeminiLLMService(BaseLLMService):
    """Gemini chat model behind the BaseLLMService interface."""

    def __init__(
        self,
        model_name: str = "gemini-2.5-flash",
        api_key: Optional[str] = None,
        temperature: float = 0.4,
        api_key_env: str = "GOOGLE_API_KEY",
    ):
        """
        Args:
            model_name: Gemini model id
            api_key: Google API key; read from api_key_env when None
            temperature: Sampling temperature (0.0 to 1.0)
            api_key_env: Environment variable holding the API key

        Raises:
            ValueError: No API key was given or found in the environment
        """
        self.logger = get_logger("gemini_llm_service")
        self._model_name = model_name
        self._temperature = temperature
        self._api_key = api_key or os.getenv(api_key_env)

        if not self._api_key:
            self.logger.error("Google API key not provided")
            raise ValueError(
                f"Google API key required. Set {api_key_env}, store it with "
                "set_gemini_api_key or pass api_key"
            )

        self.llm = self._build_chat_model()
        self.json_llm = self._build_chat_model(response_mime_type=JSON_MIME_TYPE)
        self.logger.info(f"Gemini model {self._model_name} initialized")

    def _build_chat_model(self, **extra: Any) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=self._model_name,
            google_api_key=self._api_key,
            temperature=self._temperature,
            **extra,
        )

    def generate(self, prompt: str, json_mode: bool = False) -> str:
        llm = self.json_llm if json_mode else self.llm
        self.logger.debug(
            f"Prompt of {len(prompt)} chars to {self._model_name}"
            f"{' (JSON mode)' if json_mode else ''}"
        )
        try:
            response = llm.invoke([HumanMessage(content=prompt)])
        except Exception as e:
            self.logger.error(f"Error calling Gemini: {e}")
            raise

        text = _content_text(response.content)
        self.logger.debug(f"Reply of {len(text)} chars")
        return text

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model_name


def _content_text(content: Any) -> str:
    """Message content as plain text; Gemini may return a list of parts."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return "".join(
            part if isinstance(part, str) else part.get("text", "")
            for part in content
            if isinstance(part, str) or (isinstance(part, dict) and part.get("type") == "text")
        )
    return str(content or "")
