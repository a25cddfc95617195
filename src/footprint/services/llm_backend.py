"""
Generative-model backend used for extraction and classification.

The pipeline only depends on the ``CompletionBackend`` protocol; the
OpenAI implementation talks to any OpenAI-compatible chat-completions
endpoint.
"""
from __future__ import annotations

from typing import Optional, Protocol

from openai import OpenAI

from ..config import Config
from ..exceptions import BackendError
from ..logger import get_logger

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You extract structured business information from web content. "
    "Answer with a single JSON object and nothing else."
)


class CompletionBackend(Protocol):
    """Anything that turns a prompt into free text."""

    def complete(
        self,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        model: Optional[str] = None,
    ) -> str:
        ...


class OpenAIBackend:
    """
    Chat-completions backend.

    No retries: a failed call raises BackendError and the caller degrades.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[OpenAI] = None,
        json_mode: Optional[bool] = None,
    ):
        """
        Initialize the backend.

        Args:
            api_key: API key (default from config)
            base_url: Endpoint override for OpenAI-compatible servers (default from config)
            model: Default model name (default from config)
            timeout: Per-call timeout in seconds (default from config)
            client: Pre-built client, mainly for tests
            json_mode: Request response_format=json_object (default from config)
        """
        self.model = model or Config.AI_MODEL_NAME
        self.timeout = timeout or Config.BACKEND_TIMEOUT_S
        self.json_mode = Config.AI_MODEL_JSON_MODE if json_mode is None else json_mode
        self._client: Optional[OpenAI] = client

        if self._client is None:
            api_key = api_key or Config.AI_MODEL_API_KEY
            if api_key:
                self._client = OpenAI(
                    api_key=api_key,
                    base_url=base_url or Config.AI_MODEL_URL,
                    timeout=self.timeout,
                    max_retries=0,
                )
                logger.info(f"Model backend initialized with model: {self.model}")
            else:
                logger.warning("AI_MODEL_API_KEY not set. Model-based stages will degrade.")

    def is_available(self) -> bool:
        """Check if the backend has a client to call."""
        return self._client is not None

    def complete(
        self,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
        model: Optional[str] = None,
    ) -> str:
        """
        Send one prompt and return the raw completion text.

        Raises:
            BackendError: If the backend is unavailable or the call fails
        """
        if self._client is None:
            raise BackendError("Model backend not configured")

        request = {
            "model": model or self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if self.json_mode:
            request["response_format"] = {"type": "json_object"}

        try:
            response = self._client.chat.completions.create(**request)
        except Exception as e:
            raise BackendError(f"Model backend call failed: {e}") from e

        if not response.choices:
            raise BackendError("Model backend returned no choices")

        return response.choices[0].message.content or ""
